# core/stores/dns_store.py
import logging

from PySide6.QtCore import QObject, Signal

from core.models import DNSItem

logger = logging.getLogger(__name__)


class DNSStore(QObject):
    """DNS настройки - одна запись, перезагружаемая после каждого сохранения"""

    dns_changed = Signal(object)
    loading_changed = Signal(bool)

    def __init__(self, client, parent=None):
        super().__init__(parent)
        self.client = client
        self.dns = DNSItem()
        self._pending_loads = 0

    @property
    def loading(self) -> bool:
        return self._pending_loads > 0

    def _set_pending(self, delta: int):
        was_loading = self.loading
        self._pending_loads += delta
        if self.loading != was_loading:
            self.loading_changed.emit(self.loading)

    async def load(self):
        self._set_pending(1)
        try:
            raw = await self.client.call("GetDNSConfig")
            # null от backend'а - значения по умолчанию
            self.dns = DNSItem.from_dict(raw)
            self.dns_changed.emit(self.dns)
        finally:
            self._set_pending(-1)

    async def update(self, dns: DNSItem):
        await self.client.call("UpdateDNSConfig", dns.to_dict())
        logger.info("✅ DNS настройки сохранены")
        await self.load()
