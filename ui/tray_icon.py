# ui/tray_icon.py
import logging
from PySide6.QtWidgets import QSystemTrayIcon, QMenu
from PySide6.QtGui import QAction

from ui.icons import get_icon_manager
from ui.theme_manager import THEME_DARK, THEME_LIGHT
from utils.format import format_speed

logger = logging.getLogger(__name__)

APP_TITLE = "RayUI"

THEME_TITLES = {
    THEME_LIGHT: "Светлая",
    THEME_DARK: "Тёмная",
}

NOTIFICATION_ICONS = {
    'error': QSystemTrayIcon.Critical,
    'warning': QSystemTrayIcon.Warning,
}


class TrayIcon(QSystemTrayIcon):
    """
    Иконка в трее: статус ядра, скорость, управление ядром и темой

    Сигналы сторов приходят из потока event loop; слоты этого объекта
    Qt доставляет в GUI поток через очередь.
    """

    def __init__(self, app, context, runner, theme_manager):
        super().__init__()
        self.app = app
        self.context = context
        self.runner = runner
        self.theme_manager = theme_manager

        self.setup_ui()
        self.connect_store()
        self.update_status()

    def setup_ui(self):
        self.setIcon(get_icon_manager().core_status_icon(False))
        self.setToolTip(f"{APP_TITLE} - ядро остановлено")

        menu = QMenu()

        self.core_action = QAction("Запустить ядро", self)
        self.core_action.triggered.connect(self.toggle_core)

        theme_action = QAction("Переключить тему", self)
        theme_action.triggered.connect(self.cycle_theme)

        exit_action = QAction("Выход", self)
        exit_action.triggered.connect(self.exit_app)

        menu.addAction(self.core_action)
        menu.addSeparator()
        menu.addAction(theme_action)
        menu.addSeparator()
        menu.addAction(exit_action)

        # QMenu без родителя, ссылку держим сами
        self.menu = menu
        self.setContextMenu(menu)

    def connect_store(self):
        app_store = self.context.app_store
        app_store.core_status.changed.connect(self.on_core_status)
        app_store.traffic.changed.connect(self.on_traffic)
        app_store.notification.connect(self.on_notification)

    def on_core_status(self, _status):
        self.update_status()

    def on_traffic(self, _traffic):
        self.update_status()

    def update_status(self):
        """Обновляет иконку, подсказку и пункт меню по состоянию ядра"""
        app_store = self.context.app_store
        running = app_store.is_core_running

        self.setIcon(get_icon_manager().core_status_icon(running))
        self.core_action.setText("Остановить ядро" if running else "Запустить ядро")

        if running:
            traffic = app_store.traffic.value
            tooltip = (f"{APP_TITLE} - ядро запущено\n"
                       f"↑ {format_speed(traffic.upload)}  ↓ {format_speed(traffic.download)}")
        else:
            tooltip = f"{APP_TITLE} - ядро остановлено"
        self.setToolTip(tooltip)

    def on_notification(self, note):
        icon = NOTIFICATION_ICONS.get(note.type, QSystemTrayIcon.Information)
        self.showMessage(note.title or APP_TITLE, note.message, icon, 5000)

    def _report_failure(self, future):
        error = future.exception()
        if error is not None:
            logger.error(f"❌ Ошибка управления ядром: {error}")

    def toggle_core(self):
        future = self.runner.submit(self.context.app_store.toggle_core())
        future.add_done_callback(self._report_failure)

    def cycle_theme(self):
        mode = self.theme_manager.cycle_mode()
        title = THEME_TITLES.get(mode, "Системная")
        self.showMessage(APP_TITLE, f"Тема переключена: {title}", QSystemTrayIcon.Information, 2000)

    def exit_app(self):
        logger.info("Выход по команде из трея")
        self.app.quit()
