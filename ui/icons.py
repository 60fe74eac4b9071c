# ui/icons.py
from pathlib import Path
from PySide6.QtGui import QIcon, QPixmap, QColor, Qt

ICON_CORE_RUNNING = "core_running.png"
ICON_CORE_STOPPED = "core_stopped.png"
ICON_APP = "app.png"

# Цвет заглушки, если файла иконки нет
FALLBACK_COLORS = {
    ICON_CORE_RUNNING: "#2ecc71",
    ICON_CORE_STOPPED: "#e74c3c",
}
DEFAULT_FALLBACK = "#3498db"


class IconManager:
    def __init__(self, resources_dir=None):
        self.resources_dir = Path(resources_dir or "resources").absolute()

    def _fallback(self, icon_name, size):
        pixmap = QPixmap(size, size)
        pixmap.fill(QColor(FALLBACK_COLORS.get(icon_name, DEFAULT_FALLBACK)))
        return pixmap

    def get_pixmap(self, icon_name, size=16):
        """Возвращает QPixmap по имени файла"""
        icon_path = self.resources_dir / icon_name
        if icon_path.exists():
            pixmap = QPixmap(str(icon_path))
            return pixmap.scaled(size, size, Qt.KeepAspectRatio, Qt.SmoothTransformation)
        return self._fallback(icon_name, size)

    def get_icon(self, icon_name):
        icon_path = self.resources_dir / icon_name
        if icon_path.exists():
            return QIcon(str(icon_path))
        return QIcon(self._fallback(icon_name, 16))

    def core_status_icon(self, running: bool):
        return self.get_icon(ICON_CORE_RUNNING if running else ICON_CORE_STOPPED)


# Синглтон
_icon_manager = None


def get_icon_manager():
    global _icon_manager
    if _icon_manager is None:
        _icon_manager = IconManager()
    return _icon_manager
