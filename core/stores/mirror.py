# core/stores/mirror.py
from typing import Any

from PySide6.QtCore import QObject, Signal


class Mirror(QObject):
    """Одно текущее значение, целиком заменяемое каждым событием (без истории)"""

    changed = Signal(object)

    def __init__(self, initial: Any = None, parent=None):
        super().__init__(parent)
        self._value = initial

    @property
    def value(self) -> Any:
        return self._value

    def set(self, value: Any):
        self._value = value
        self.changed.emit(value)
