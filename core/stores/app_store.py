# core/stores/app_store.py
import logging
from typing import Optional

from PySide6.QtCore import QObject, Signal

from core.event_bus import iter_payload
from core.models import (
    AppConfig, CoreStatus, Notification, ProxyMode, TrafficStats, UpdateProgress,
)
from core.stores.mirror import Mirror

logger = logging.getLogger(__name__)


class AppStore(QObject):
    """Конфигурация приложения и живое состояние ядра"""

    config_changed = Signal(object)
    notification = Signal(object)

    def __init__(self, client, parent=None):
        super().__init__(parent)
        self.client = client
        self.config: Optional[AppConfig] = None

        # зеркала push-событий
        self.core_status = Mirror(None, self)
        self.traffic = Mirror(TrafficStats(), self)
        self.update_progress = Mirror(None, self)

    @property
    def active_profile_id(self) -> str:
        return self.config.active_profile_id if self.config else ""

    @property
    def active_routing_id(self) -> str:
        return self.config.active_routing_id if self.config else ""

    @property
    def is_core_running(self) -> bool:
        status = self.core_status.value
        return bool(status and status.running)

    # ========== Конфигурация ==========

    async def load_config(self):
        raw = await self.client.call("GetConfig")
        self.config = AppConfig.from_dict(raw)
        self.config_changed.emit(self.config)

    async def update_config(self, config: AppConfig):
        await self.client.call("UpdateConfig", config.to_dict())
        await self.load_config()

    async def set_proxy_mode(self, mode: ProxyMode):
        await self.client.call("SetProxyMode", int(mode))
        logger.info(f"🔀 Режим прокси: {ProxyMode(mode).name.lower()}")
        await self.load_config()

    # ========== Управление ядром ==========

    async def load_core_status(self):
        raw = await self.client.call("GetCoreStatus")
        self.core_status.set(CoreStatus.from_dict(raw) if raw else None)

    async def start_core(self):
        logger.info("🚀 Запуск ядра...")
        await self.client.call("StartCore")
        await self.load_core_status()

    async def stop_core(self):
        logger.info("🛑 Остановка ядра...")
        await self.client.call("StopCore")
        await self.load_core_status()

    async def restart_core(self):
        logger.info("🔄 Перезапуск ядра...")
        await self.client.call("RestartCore")
        await self.load_core_status()

    async def toggle_core(self):
        if self.is_core_running:
            await self.stop_core()
        else:
            await self.start_core()

    # ========== Обработчики push-событий ==========

    def on_core_status_event(self, payload):
        for data in iter_payload(payload):
            self.core_status.set(CoreStatus.from_dict(data))

    def on_traffic_event(self, payload):
        for data in iter_payload(payload):
            self.traffic.set(TrafficStats.from_dict(data))

    def on_update_progress_event(self, payload):
        for data in iter_payload(payload):
            self.update_progress.set(UpdateProgress.from_dict(data))

    def on_notification_event(self, payload):
        for data in iter_payload(payload):
            note = Notification.from_dict(data)
            logger.info(f"🔔 [{note.type}] {note.title}: {note.message}")
            self.notification.emit(note)
