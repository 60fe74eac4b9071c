# core/stores/base.py
import logging
from typing import Any, Iterable, List, Optional, Set

from PySide6.QtCore import QObject, Signal

logger = logging.getLogger(__name__)


class ResourceStore(QObject):
    """
    Локальное зеркало одной удаленной коллекции

    Подклассы задают имена команд backend'а и тип записи. Коллекция
    заменяется только целиком, после успешного list-вызова.
    """

    items_changed = Signal(object)  # list записей
    loading_changed = Signal(bool)

    item_type: Any = None
    list_method = ""
    add_method = ""
    update_method = ""
    delete_method = ""  # удаление по одному id
    bulk_delete_method = ""  # удаление списком id
    set_active_method = ""

    def __init__(self, client, parent=None):
        super().__init__(parent)
        self.client = client
        self._items: List[Any] = []
        self._pending_loads = 0
        self._last_filter: Optional[str] = None

    @property
    def items(self) -> List[Any]:
        return list(self._items)

    @property
    def loading(self) -> bool:
        return self._pending_loads > 0

    def ids(self) -> Set[str]:
        return {item.id for item in self._items}

    def get(self, resource_id: str) -> Optional[Any]:
        for item in self._items:
            if item.id == resource_id:
                return item
        return None

    # ========== Загрузка ==========

    def _list_args(self, filter: Optional[str]) -> list:
        return []

    def _decode(self, raw: Optional[list]) -> List[Any]:
        items = []
        for record in raw or []:
            try:
                items.append(self.item_type.from_dict(record))
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning(f"⚠️ {type(self).__name__}: пропущена запись {record!r:.80}: {e}")
        return items

    def _set_pending(self, delta: int):
        was_loading = self.loading
        self._pending_loads += delta
        if self.loading != was_loading:
            self.loading_changed.emit(self.loading)

    async def load(self, filter: Optional[str] = None):
        """Запрашивает коллекцию и целиком заменяет локальную копию"""
        self._last_filter = filter
        self._set_pending(1)
        try:
            raw = await self.client.call(self.list_method, *self._list_args(filter))
            self._replace_items(self._decode(raw))
        finally:
            self._set_pending(-1)

    async def reload(self):
        """Повторная загрузка с последним использованным фильтром"""
        await self.load(self._last_filter)

    def _replace_items(self, items: List[Any]):
        self._items = items
        self._on_items_replaced()
        self.items_changed.emit(list(items))
        logger.debug(f"{type(self).__name__}: загружено {len(items)} записей")

    def _on_items_replaced(self):
        pass

    # ========== Мутации ==========

    async def create(self, item):
        await self.client.call(self.add_method, item.to_dict())
        await self.reload()

    async def update(self, item):
        await self.client.call(self.update_method, item.to_dict())
        await self.reload()

    async def delete(self, ids: Iterable[str]):
        ids = list(ids)
        if self.bulk_delete_method:
            await self.client.call(self.bulk_delete_method, ids)
        else:
            for resource_id in ids:
                await self.client.call(self.delete_method, resource_id)

        self._on_deleted(ids)
        await self.reload()

    def _on_deleted(self, ids: List[str]):
        pass

    async def set_active(self, resource_id: str):
        """Активная запись хранится в конфигурации приложения, коллекция не перезагружается"""
        await self.client.call(self.set_active_method, resource_id)
        logger.info(f"✅ {type(self).__name__}: активна запись {resource_id}")
