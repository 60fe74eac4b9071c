# core/stores/profile_store.py
import logging
from typing import Iterable, List, Optional

from PySide6.QtCore import Signal

from core.models import ProfileItem, SpeedTestResult
from core.stores.base import ResourceStore
from core.stores.result_cache import ResultCache
from core.stores.selection import ALL_SUBSCRIPTIONS, SelectionController

logger = logging.getLogger(__name__)


class ProfileStore(ResourceStore):
    """Профили (узлы) + выбор/фильтры + кэш результатов тестов скорости"""

    speed_results_changed = Signal(object)  # list обновленных id

    item_type = ProfileItem
    list_method = "GetProfiles"
    add_method = "AddProfile"
    update_method = "UpdateProfile"
    bulk_delete_method = "DeleteProfiles"
    set_active_method = "SetActiveProfile"

    def __init__(self, client, parent=None):
        super().__init__(client, parent)
        self.selection = SelectionController(self)
        self.speed_results = ResultCache()

    def _list_args(self, sub_id: Optional[str]) -> list:
        # "all" на стороне backend'а - пустая строка
        if not sub_id or sub_id == ALL_SUBSCRIPTIONS:
            return [""]
        return [sub_id]

    def _on_items_replaced(self):
        self.selection.retain(self.ids())

    def _on_deleted(self, ids: List[str]):
        self.selection.discard(ids)

    async def apply_filter(self, sub_id: Optional[str]):
        """Меняет фильтр по подписке и перезагружает список"""
        self.selection.set_filter(sub_id)
        await self.load(self.selection.filter_sub_id)

    def visible_profiles(self) -> List[ProfileItem]:
        return self.selection.visible(self._items)

    def toggle_select_all(self):
        self.selection.toggle_select_all(p.id for p in self.visible_profiles())

    # ========== Импорт / экспорт ==========

    async def import_from_text(self, text: str) -> int:
        """Импортирует ссылки/подписку из текста, возвращает число профилей"""
        count = await self.client.call("ImportFromText", text)
        await self.reload()
        logger.info(f"📥 Импортировано профилей: {count or 0}")
        return int(count or 0)

    async def export_share_link(self, profile_id: str) -> str:
        link = await self.client.call("ExportShareLink", profile_id)
        return link or ""

    # ========== Тесты скорости ==========

    def _apply_speed_results(self, raw: Optional[list]) -> List[SpeedTestResult]:
        results = []
        for record in raw or []:
            try:
                results.append(SpeedTestResult.from_dict(record))
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning(f"⚠️ Пропущен результат теста {record!r:.80}: {e}")
        updated = self.speed_results.apply_batch(results)
        self.speed_results_changed.emit(updated)
        return results

    async def test_profiles(self, ids: Iterable[str]) -> List[SpeedTestResult]:
        raw = await self.client.call("TestProfiles", list(ids))
        return self._apply_speed_results(raw)

    async def test_all_profiles(self) -> List[SpeedTestResult]:
        raw = await self.client.call("TestAllProfiles")
        return self._apply_speed_results(raw)
