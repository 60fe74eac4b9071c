# core/push_channel.py
"""
Push-канал: websocket к backend'у, из которого приходят события ядра

Каждый текстовый кадр - JSON {"topic": "...", "data": ...}; он передается
в EventBus как есть. Разорванное соединение восстанавливается до stop().
"""

import asyncio
import json
import logging
from typing import Optional

import aiohttp

from core.event_bus import EventBus

logger = logging.getLogger(__name__)


class PushChannel:
    def __init__(self, events_url: str, bus: EventBus, reconnect_delay: float = 3):
        self.events_url = events_url
        self.bus = bus
        self.reconnect_delay = reconnect_delay

        self.session: Optional[aiohttp.ClientSession] = None
        self.ws: Optional[aiohttp.ClientWebSocketResponse] = None
        self.connected = False
        self._stop_event = asyncio.Event()

    async def run(self):
        """Читает события до вызова stop(), переподключаясь при обрыве"""
        self.session = aiohttp.ClientSession()

        try:
            while not self._stop_event.is_set():
                try:
                    await self._listen()
                except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                    logger.warning(f"⚠️ Push-канал недоступен: {e!r}")

                if self._stop_event.is_set():
                    break

                logger.info(f"🔄 Переподключение push-канала через {self.reconnect_delay}s")
                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=self.reconnect_delay)
                except asyncio.TimeoutError:
                    pass
        finally:
            await self.session.close()
            self.session = None
            logger.info("🛑 Push-канал остановлен")

    async def _listen(self):
        async with self.session.ws_connect(self.events_url, heartbeat=30) as ws:
            self.ws = ws
            self.connected = True
            logger.info(f"✅ Push-канал подключен: {self.events_url}")

            try:
                async for msg in ws:
                    if msg.type == aiohttp.WSMsgType.TEXT:
                        self._dispatch(msg.data)
                    elif msg.type == aiohttp.WSMsgType.ERROR:
                        logger.warning(f"⚠️ Ошибка push-канала: {ws.exception()}")
                        break
            finally:
                self.ws = None
                self.connected = False

    def _dispatch(self, raw: str):
        try:
            frame = json.loads(raw)
        except ValueError:
            logger.warning(f"Пропущен некорректный кадр: {raw[:100]!r}")
            return

        topic = frame.get('topic') if isinstance(frame, dict) else None
        if not topic:
            logger.warning(f"Кадр без topic: {raw[:100]!r}")
            return

        self.bus.emit(topic, frame.get('data'))

    async def stop(self):
        """Останавливает чтение и закрывает соединение"""
        self._stop_event.set()
        if self.ws is not None:
            await self.ws.close()
