# core/stores/subscription_store.py
import logging
from typing import Dict

from core.models import SubItem
from core.stores.base import ResourceStore
from core.stores.tracker import OperationTracker

logger = logging.getLogger(__name__)


class SubscriptionStore(ResourceStore):
    """Источники подписок и синхронизация их содержимого"""

    item_type = SubItem
    list_method = "GetSubscriptions"
    add_method = "AddSubscription"
    update_method = "UpdateSubscription"
    delete_method = "DeleteSubscription"

    def __init__(self, client, parent=None):
        super().__init__(client, parent)
        self.syncing = OperationTracker(self)

    async def sync_subscription(self, sub_id: str) -> int:
        """Обновляет одну подписку, возвращает число импортированных профилей"""
        async with self.syncing.track([sub_id]):
            count = await self.client.call("SyncSubscription", sub_id)
            await self.reload()

        logger.info(f"🔄 Подписка {sub_id} обновлена: {count or 0} профилей")
        return int(count or 0)

    async def sync_all_subscriptions(self) -> Dict[str, int]:
        """Обновляет все подписки, возвращает {id подписки: число профилей}"""
        async with self.syncing.track(self.ids()):
            results = await self.client.call("SyncAllSubscriptions")
            await self.reload()

        results = {sub_id: int(count) for sub_id, count in (results or {}).items()}
        logger.info(f"🔄 Обновлено подписок: {len(results)}")
        return results
