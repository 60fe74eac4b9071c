# core/command_client.py
"""
Клиент командной поверхности локального backend'а

Каждая команда - POST {"args": [...]} на /api/v1/commands/<Method>.
Ответ 200 {"result": ...} возвращается как есть (в т.ч. null),
всё остальное превращается в исключение из иерархии CommandError.
"""

import asyncio
import logging
from typing import Any, Optional

import aiohttp

logger = logging.getLogger(__name__)


class CommandError(Exception):
    """Базовая ошибка удаленной команды"""

    def __init__(self, method: str, message: str):
        super().__init__(f"{method}: {message}")
        self.method = method
        self.message = message


class CommandTransportError(CommandError):
    """Backend недоступен или не ответил вовремя"""


class CommandRejectedError(CommandError):
    """Backend ответил, но команда завершилась ошибкой"""

    def __init__(self, method: str, message: str, status: int = 200):
        super().__init__(method, message)
        self.status = status


class CommandClient:
    """Вызов команд backend'а через один переиспользуемый aiohttp.ClientSession"""

    def __init__(self, base_url: str, timeout: float = 30):
        """
        Args:
            base_url: адрес backend'а (например, http://127.0.0.1:47816)
            timeout: общий таймаут одной команды в секундах
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(timeout=self.timeout)
        return self.session

    async def call(self, method: str, *args: Any) -> Any:
        """
        Выполняет команду и возвращает поле result ответа

        Raises:
            CommandTransportError: нет соединения / таймаут
            CommandRejectedError: backend вернул ошибку
        """
        url = f"{self.base_url}/api/v1/commands/{method}"
        session = await self._get_session()
        logger.debug(f"➡️ {method} {list(args)!r:.200}")

        try:
            async with session.post(url, json={'args': list(args)}) as response:
                status = response.status
                try:
                    data = await response.json(content_type=None)
                except ValueError:
                    data = None

        except aiohttp.ClientError as e:
            logger.warning(f"❌ Backend недоступен ({method}): {e}")
            raise CommandTransportError(method, f"Cannot connect to backend: {e}") from e

        except asyncio.TimeoutError as e:
            logger.warning(f"❌ Таймаут команды {method}")
            raise CommandTransportError(method, "Request timed out") from e

        if not isinstance(data, dict):
            data = {}

        error = data.get('error')
        if status != 200 or error:
            message = error or f"HTTP {status}"
            logger.warning(f"❌ Команда {method} отклонена: {message}")
            raise CommandRejectedError(method, message, status)

        return data.get('result')

    async def close(self):
        """Закрывает HTTP сессию"""
        if self.session:
            await self.session.close()
            self.session = None
