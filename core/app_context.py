# core/app_context.py
import asyncio
import logging
from typing import Optional

from core.command_client import CommandClient
from core.event_bus import EventBus
from core.push_channel import PushChannel
from core.stores.app_store import AppStore
from core.stores.bindings import bind_all
from core.stores.dns_store import DNSStore
from core.stores.log_store import DEFAULT_LOAD_LIMIT, MAX_LOG_LINES, LogStore
from core.stores.profile_store import ProfileStore
from core.stores.routing_store import RoutingStore
from core.stores.subscription_store import SubscriptionStore

logger = logging.getLogger(__name__)


class AppContext:
    """
    Корень композиции: клиент команд, реестр событий, сторы и push-канал

    Реестр событий создается здесь и передается по ссылке; у каждого
    контекста (и у каждого теста) он свой.
    """

    def __init__(self, client, bus: Optional[EventBus] = None,
                 push_channel: Optional[PushChannel] = None,
                 max_log_lines: int = MAX_LOG_LINES,
                 log_load_limit: int = DEFAULT_LOAD_LIMIT):
        self.client = client
        self.bus = bus or EventBus()
        self.push_channel = push_channel
        self.log_load_limit = log_load_limit

        self.app_store = AppStore(client)
        self.profiles = ProfileStore(client)
        self.subscriptions = SubscriptionStore(client)
        self.routings = RoutingStore(client)
        self.dns = DNSStore(client)
        self.logs = LogStore(client, max_lines=max_log_lines)

        self._bindings = None
        self._push_task: Optional[asyncio.Task] = None

    @classmethod
    def from_config(cls, config) -> "AppContext":
        """Собирает контекст по настройкам ConfigManager"""
        backend = config.get_backend_config()
        client = CommandClient(backend.get('command_url'), timeout=backend.get('timeout', 30))
        bus = EventBus()

        push_channel = None
        if backend.get('events_url'):
            push_channel = PushChannel(
                backend['events_url'], bus,
                reconnect_delay=backend.get('reconnect_delay', 3),
            )

        return cls(
            client, bus, push_channel,
            max_log_lines=config.get('logs.max_lines', MAX_LOG_LINES),
            log_load_limit=config.get('logs.load_limit', DEFAULT_LOAD_LIMIT),
        )

    def bind_events(self):
        if self._bindings is None:
            self._bindings = bind_all(self.bus, self.app_store, self.logs)

    def unbind_events(self):
        if self._bindings is not None:
            self._bindings.close()
            self._bindings = None

    async def start(self):
        """Подписывается на события, открывает push-канал и загружает данные"""
        self.bind_events()
        if self.push_channel and self._push_task is None:
            self._push_task = asyncio.create_task(self.push_channel.run())
        await self.initial_load()

    async def initial_load(self) -> bool:
        """Первичная загрузка всех сторов; ошибка одного не мешает остальным"""
        steps = {
            'config': self.app_store.load_config(),
            'core_status': self.app_store.load_core_status(),
            'profiles': self.profiles.load(self.profiles.selection.filter_sub_id),
            'subscriptions': self.subscriptions.load(),
            'routings': self.routings.load(),
            'dns': self.dns.load(),
            'logs': self.logs.load(self.log_load_limit),
        }
        results = await asyncio.gather(*steps.values(), return_exceptions=True)

        ok = True
        for name, result in zip(steps, results):
            if isinstance(result, Exception):
                ok = False
                logger.error(f"❌ Не удалось загрузить {name}: {result}")

        if ok:
            logger.info("✅ Начальная загрузка завершена")
        return ok

    async def shutdown(self):
        """Снимает подписки, останавливает push-канал, закрывает реестр и клиент"""
        logger.info("🛑 Завершение AppContext")
        self.unbind_events()

        if self.push_channel:
            await self.push_channel.stop()
        if self._push_task is not None:
            try:
                await asyncio.wait_for(self._push_task, timeout=5)
            except asyncio.TimeoutError:
                logger.warning("⚠️ Push-канал не остановился вовремя")
            except Exception as e:
                logger.error(f"❌ Push-канал завершился с ошибкой: {e}")
            self._push_task = None

        self.bus.close()
        await self.client.close()
