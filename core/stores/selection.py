# core/stores/selection.py
import logging
from typing import FrozenSet, Iterable, List, Optional

from PySide6.QtCore import QObject, Signal

logger = logging.getLogger(__name__)

ALL_SUBSCRIPTIONS = "all"

SORT_ASC = "asc"
SORT_DESC = "desc"

# ключ сортировки -> атрибут профиля
SORT_KEYS = {
    'remarks': 'remarks',
    'address': 'address',
    'port': 'port',
    'configType': 'config_type',
    'network': 'network',
}


class SelectionController(QObject):
    """
    Выбранные профили и активные фильтры списка профилей

    Выбор и фильтры живут независимо от коллекции: перезагрузка их не
    сбрасывает, но выбор всегда сужается до id, которые еще существуют.
    """

    selection_changed = Signal(object)  # frozenset id
    filter_changed = Signal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self._selected = set()
        self.filter_sub_id = ALL_SUBSCRIPTIONS
        self.search_query = ""
        self.sort_key = 'remarks'
        self.sort_dir = SORT_ASC

    # ========== Выбор ==========

    @property
    def selected_ids(self) -> FrozenSet[str]:
        return frozenset(self._selected)

    def is_selected(self, resource_id: str) -> bool:
        return resource_id in self._selected

    def _replace(self, ids: Iterable[str]):
        ids = set(ids)
        if ids != self._selected:
            self._selected = ids
            self.selection_changed.emit(self.selected_ids)

    def toggle(self, resource_id: str):
        """Добавляет отсутствующий id или убирает присутствующий"""
        selected = set(self._selected)
        if resource_id in selected:
            selected.discard(resource_id)
        else:
            selected.add(resource_id)
        self._replace(selected)

    def set_selected(self, ids: Iterable[str]):
        self._replace(ids)

    def select_all(self, visible_ids: Iterable[str]):
        """Заменяет выбор видимыми сейчас id"""
        self._replace(visible_ids)

    def clear(self):
        self._replace(())

    def discard(self, ids: Iterable[str]):
        self._replace(self._selected.difference(ids))

    def retain(self, surviving_ids: Iterable[str]):
        """Оставляет в выборе только существующие id"""
        self._replace(self._selected.intersection(surviving_ids))

    def all_selected(self, visible_ids: Iterable[str]) -> bool:
        visible_ids = list(visible_ids)
        return bool(visible_ids) and all(i in self._selected for i in visible_ids)

    def toggle_select_all(self, visible_ids: Iterable[str]):
        """
        Чекбокс "выбрать все": если выбраны все видимые - снимаем выбор,
        иначе (в т.ч. при частичном выборе) выбираем все видимые
        """
        visible_ids = list(visible_ids)
        if self.all_selected(visible_ids):
            self.clear()
        else:
            self.select_all(visible_ids)

    # ========== Фильтры ==========

    def set_filter(self, sub_id: Optional[str]):
        self.filter_sub_id = sub_id or ALL_SUBSCRIPTIONS
        self.filter_changed.emit()

    def set_search(self, query: str):
        self.search_query = query or ""
        self.filter_changed.emit()

    def set_sort(self, key: str, direction: str = SORT_ASC):
        if key not in SORT_KEYS:
            raise ValueError(f"Unknown sort key: {key}")
        if direction not in (SORT_ASC, SORT_DESC):
            raise ValueError(f"Unknown sort direction: {direction}")
        self.sort_key = key
        self.sort_dir = direction
        self.filter_changed.emit()

    def toggle_sort(self, key: str):
        """Тот же ключ - разворачивает направление, новый ключ - по возрастанию"""
        if key == self.sort_key:
            self.set_sort(key, SORT_DESC if self.sort_dir == SORT_ASC else SORT_ASC)
        else:
            self.set_sort(key, SORT_ASC)

    def visible(self, profiles: Iterable) -> List:
        """Профили после поиска и сортировки (коллекция не изменяется)"""
        items = list(profiles)

        if self.search_query:
            query = self.search_query.lower()
            items = [
                p for p in items
                if query in p.remarks.lower() or query in p.address.lower()
            ]

        attr = SORT_KEYS[self.sort_key]

        def sort_value(profile):
            value = getattr(profile, attr, None)
            if value is None:
                return ""
            if isinstance(value, (int, float)):
                return value
            return str(value).casefold()

        items.sort(key=sort_value, reverse=self.sort_dir == SORT_DESC)
        return items
