# core/stores/log_store.py
import logging
from collections import deque
from typing import Iterable, List

from PySide6.QtCore import QObject, Signal

from core.event_bus import iter_payload

logger = logging.getLogger(__name__)

MAX_LOG_LINES = 2000
DEFAULT_LOAD_LIMIT = 500

LEVEL_ALL = "all"
LOG_LEVELS = (LEVEL_ALL, "debug", "info", "warning", "error")


def log_level(line: str) -> str:
    """Определяет уровень строки лога ядра по маркерам xray / sing-box"""
    lower = line.lower()
    if "[error]" in lower or "level=error" in lower:
        return "error"
    if "[warn" in lower or "level=warn" in lower:
        return "warning"
    if "[debug]" in lower or "level=debug" in lower:
        return "debug"
    return "info"


class LogBuffer:
    """Строки лога с ограничением длины; при переполнении вытесняются самые старые"""

    def __init__(self, max_lines: int = MAX_LOG_LINES):
        self.max_lines = max(1, int(max_lines))
        self._lines = deque(maxlen=self.max_lines)

    def append(self, line: str):
        self._lines.append(line)

    def replace(self, lines: Iterable[str]):
        self._lines = deque(lines, maxlen=self.max_lines)

    def clear(self):
        self._lines.clear()

    def lines(self) -> List[str]:
        return list(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self):
        return iter(self._lines)


class LogStore(QObject):
    """Лог ядра: буфер из push-событий + фильтры отображения"""

    logs_changed = Signal()
    line_appended = Signal(str)
    filter_changed = Signal()

    def __init__(self, client, max_lines: int = MAX_LOG_LINES, parent=None):
        super().__init__(parent)
        self.client = client
        self.buffer = LogBuffer(max_lines)
        self.filter_level = LEVEL_ALL
        self.search_query = ""
        self.auto_scroll = True

    @property
    def logs(self) -> List[str]:
        return self.buffer.lines()

    def append(self, line: str):
        self.buffer.append(line)
        self.line_appended.emit(line)

    def on_log_event(self, payload):
        for line in iter_payload(payload):
            self.append(str(line))

    async def load(self, limit: int = DEFAULT_LOAD_LIMIT):
        """Заменяет буфер последними limit строками с backend'а"""
        lines = await self.client.call("GetLogs", limit) or []
        if limit > 0:
            lines = lines[-limit:]
        self.buffer.replace(lines)
        self.logs_changed.emit()

    async def clear(self):
        """Очищает лог на backend'е; локальный буфер - только при успехе"""
        await self.client.call("ClearLogs")
        self.buffer.clear()
        self.logs_changed.emit()
        logger.info("🧹 Лог ядра очищен")

    # ========== Фильтры отображения ==========

    def set_filter_level(self, level: str):
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {level}")
        self.filter_level = level
        self.filter_changed.emit()

    def set_search_query(self, query: str):
        self.search_query = query or ""
        self.filter_changed.emit()

    def set_auto_scroll(self, enabled: bool):
        self.auto_scroll = bool(enabled)

    def filtered(self) -> List[str]:
        """Строки под текущими фильтрами; сам буфер не изменяется"""
        lines = self.buffer.lines()
        if self.filter_level != LEVEL_ALL:
            lines = [line for line in lines if log_level(line) == self.filter_level]
        if self.search_query:
            query = self.search_query.lower()
            lines = [line for line in lines if query in line.lower()]
        return lines
