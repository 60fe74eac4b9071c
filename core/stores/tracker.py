# core/stores/tracker.py
import logging
from contextlib import asynccontextmanager
from typing import FrozenSet, Iterable

from PySide6.QtCore import QObject, Signal

logger = logging.getLogger(__name__)


class OperationTracker(QObject):
    """
    Набор id ресурсов, над которыми идет долгая удаленная операция

    Повторная операция над уже отслеживаемым id не блокируется: первая
    завершившаяся снимает отметку, остальные снимают её повторно.
    """

    changed = Signal(object)  # frozenset id

    def __init__(self, parent=None):
        super().__init__(parent)
        self._ids = set()

    @property
    def in_flight(self) -> FrozenSet[str]:
        return frozenset(self._ids)

    def is_busy(self, resource_id: str) -> bool:
        return resource_id in self._ids

    def __contains__(self, resource_id) -> bool:
        return resource_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def begin(self, ids: Iterable[str]):
        self._ids.update(ids)
        self.changed.emit(self.in_flight)

    def end(self, ids: Iterable[str]):
        self._ids.difference_update(ids)
        self.changed.emit(self.in_flight)

    @asynccontextmanager
    async def track(self, ids: Iterable[str]):
        """Отмечает id на время блока; отметка снимается и при ошибке"""
        ids = list(ids)
        self.begin(ids)
        try:
            yield ids
        finally:
            self.end(ids)
            logger.debug(f"Операция завершена для {len(ids)} id, в работе: {len(self._ids)}")
