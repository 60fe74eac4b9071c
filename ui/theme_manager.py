# ui/theme_manager.py
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)

THEME_SYSTEM = "system"
THEME_LIGHT = "light"
THEME_DARK = "dark"
THEME_ORDER = (THEME_SYSTEM, THEME_LIGHT, THEME_DARK)

# Единственный флаг, который тема выставляет на корневом объекте
DARK_PROPERTY = "dark"


class QtPreferenceSource:
    """Системная светлая/темная схема из QStyleHints (Qt 6.5+)"""

    def __init__(self):
        from PySide6.QtGui import QGuiApplication
        self.hints = QGuiApplication.styleHints()

    def is_dark(self) -> bool:
        from PySide6.QtCore import Qt
        return self.hints.colorScheme() == Qt.ColorScheme.Dark

    def add_listener(self, callback: Callable):
        self.hints.colorSchemeChanged.connect(callback)

    def remove_listener(self, callback: Callable):
        self.hints.colorSchemeChanged.disconnect(callback)


class ThemeManager:
    def __init__(self, root, source=None, config=None):
        """
        Args:
            root: корневой объект отрисовки (QApplication / окно), получает флаг dark
            source: источник системной схемы (по умолчанию QtPreferenceSource)
            config: ConfigManager для сохранения выбранного режима
        """
        self.root = root
        self.source = source if source is not None else QtPreferenceSource()
        self.config = config
        self.current_mode = config.get('application.theme', THEME_SYSTEM) if config else THEME_SYSTEM
        self.dark = False

    def resolve(self, mode: str) -> str:
        """system -> текущая схема платформы, остальное как есть"""
        if mode == THEME_SYSTEM:
            return THEME_DARK if self.source.is_dark() else THEME_LIGHT
        return mode

    def apply_theme(self, mode: Optional[str] = None) -> bool:
        """Выставляет флаг dark на корневом объекте, возвращает его значение"""
        mode = mode or self.current_mode
        self.dark = self.resolve(mode) == THEME_DARK
        self.root.setProperty(DARK_PROPERTY, self.dark)
        logger.debug(f"🎨 Тема {mode} -> {'dark' if self.dark else 'light'}")
        return self.dark

    def watch(self, mode: Optional[str] = None) -> Callable[[], None]:
        """
        Следит за системной схемой, если режим system

        Всегда возвращает функцию очистки; для light/dark она ничего не делает,
        так что вызывать её можно безусловно.
        """
        mode = mode or self.current_mode
        if mode != THEME_SYSTEM:
            return lambda: None

        def handler(*_):
            self.apply_theme(THEME_SYSTEM)

        self.source.add_listener(handler)
        logger.debug("👀 Подписка на смену системной темы")

        def cleanup():
            self.source.remove_listener(handler)

        return cleanup

    def set_mode(self, mode: str) -> str:
        """Сохраняет режим в конфиг и применяет его"""
        if mode not in THEME_ORDER:
            raise ValueError(f"Unknown theme: {mode}")
        self.current_mode = mode
        if self.config:
            self.config.set('application.theme', mode, save=True)
        self.apply_theme(mode)
        logger.info(f"🔄 Переключена тема: {mode}")
        return mode

    def cycle_mode(self) -> str:
        """system -> light -> dark -> system"""
        index = THEME_ORDER.index(self.current_mode) if self.current_mode in THEME_ORDER else -1
        return self.set_mode(THEME_ORDER[(index + 1) % len(THEME_ORDER)])
