# core/async_runner.py
import asyncio
import concurrent.futures
import logging
import threading
from typing import Any, Callable, Coroutine, Optional

logger = logging.getLogger(__name__)


class AsyncRunner:
    """
    Event loop в фоновом потоке

    Все сторы живут в этом loop; GUI поток только отправляет в него
    корутины через submit() и получает результат через Qt сигналы.
    """

    def __init__(self, name: str = "store-loop"):
        self.name = name
        self.loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._ready = threading.Event()

    @property
    def is_running(self) -> bool:
        return self.loop is not None and self.loop.is_running()

    def start(self, timeout: float = 5) -> bool:
        """Запускает поток с event loop и ждет его готовности"""
        if self._thread and self._thread.is_alive():
            logger.warning("⚠️ Event loop уже запущен")
            return True

        self._ready.clear()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()

        if not self._ready.wait(timeout):
            logger.error("❌ Event loop не запустился за отведенное время")
            return False

        logger.info(f"✅ Event loop запущен в потоке {self.name}")
        return True

    def _run(self):
        """Выполняется в фоновом потоке"""
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self.loop = loop
        loop.call_soon(self._ready.set)

        try:
            loop.run_forever()
        finally:
            pending = asyncio.all_tasks(loop)
            for task in pending:
                task.cancel()
            if pending:
                loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            loop.close()
            self.loop = None
            logger.debug("Event loop закрыт")

    def submit(self, coro: Coroutine) -> concurrent.futures.Future:
        """Планирует корутину в loop, возвращает потокобезопасный Future"""
        if not self.is_running:
            coro.close()
            raise RuntimeError("Event loop is not running")
        return asyncio.run_coroutine_threadsafe(coro, self.loop)

    def call_soon(self, callback: Callable[..., Any], *args: Any):
        """Вызывает обычную функцию внутри loop"""
        if not self.is_running:
            raise RuntimeError("Event loop is not running")
        self.loop.call_soon_threadsafe(callback, *args)

    def stop(self, timeout: float = 5):
        """Останавливает loop и дожидается завершения потока"""
        if not self._thread:
            return

        if self.loop is not None:
            self.loop.call_soon_threadsafe(self.loop.stop)
        self._thread.join(timeout)

        if self._thread.is_alive():
            logger.error("❌ Поток event loop не завершился")
        else:
            logger.info("✅ Event loop остановлен")
        self._thread = None
