# main.py
import sys
import logging
import concurrent.futures
from PySide6.QtWidgets import QApplication, QMessageBox


def setup_logging():
    """Настраивает логирование ДО всех операций с ротацией"""
    from core.config_manager import get_app_data_dir
    from logging.handlers import RotatingFileHandler

    app_data_dir = get_app_data_dir()
    logs_dir = app_data_dir / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)

    log_file = logs_dir / "rayui_shell.log"

    # Ротирующий обработчик: макс 5MB, 5 резервных копий
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=5 * 1024 * 1024,  # 5MB
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setFormatter(
        logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(
        logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    )

    logging.basicConfig(
        level=logging.INFO,
        handlers=[console_handler, file_handler]
    )


# НАСТРАИВАЕМ ЛОГИРОВАНИЕ САМЫМ ПЕРВЫМ ДЕЛОМ
setup_logging()
logger = logging.getLogger(__name__)


def setup_exception_handler():
    """Настраивает глобальный обработчик исключений"""

    def exception_handler(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return

        logger.critical("Необработанное исключение:",
                        exc_info=(exc_type, exc_value, exc_traceback))

        if QApplication.instance():
            QMessageBox.critical(
                None,
                "Критическая ошибка",
                f"Произошла критическая ошибка:\n{exc_value}\n\n"
                "Подробности в лог-файле."
            )

    sys.excepthook = exception_handler


def main():
    """Основная функция приложения"""
    from core.async_runner import AsyncRunner
    from core.app_context import AppContext
    from core.config_manager import get_config
    from ui.theme_manager import ThemeManager
    from ui.tray_icon import TrayIcon

    app = QApplication(sys.argv)
    app.setApplicationName("RayUI")
    app.setApplicationVersion("1.0.0")
    app.setQuitOnLastWindowClosed(False)

    setup_exception_handler()
    logger.info("🚀 Запуск RayUI")

    config = get_config()

    runner = AsyncRunner()
    if not runner.start():
        QMessageBox.critical(None, "Ошибка инициализации", "Не удалось запустить event loop")
        return 1

    context = AppContext.from_config(config)
    runner.submit(context.start())

    theme_manager = ThemeManager(app, config=config)
    theme_manager.apply_theme()
    stop_watching_theme = theme_manager.watch()

    tray_icon = TrayIcon(app, context, runner, theme_manager)
    tray_icon.show()

    def cleanup():
        logger.info("🛑 Завершение работы приложения")
        stop_watching_theme()
        tray_icon.hide()
        try:
            runner.submit(context.shutdown()).result(timeout=10)
        except concurrent.futures.TimeoutError:
            logger.error("❌ AppContext не завершился за 10 секунд")
        except Exception as e:
            logger.error(f"❌ Ошибка при завершении AppContext: {e}")
        runner.stop()

    app.aboutToQuit.connect(cleanup)

    logger.info("✅ Приложение запущено успешно")
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
