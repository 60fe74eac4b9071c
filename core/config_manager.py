import json
import sys
import logging
from pathlib import Path
from typing import Dict, Any, Optional
import os

logger = logging.getLogger(__name__)


def get_app_data_dir():
    """Возвращает путь для хранения данных приложения"""
    if getattr(sys, 'frozen', False):
        if os.name == 'nt':  # Windows
            appdata_dir = Path(os.getenv('LOCALAPPDATA', Path.home() / 'AppData' / 'Local'))
            app_data_dir = appdata_dir / 'RayUI'
        else:  # Linux/Mac
            app_data_dir = Path.home() / '.config' / 'rayui'
    else:
        # Dev режим
        app_data_dir = Path(__file__).parent.parent / 'app_data'

    app_data_dir.mkdir(parents=True, exist_ok=True)
    return app_data_dir


class ConfigManager:
    """Локальные настройки оболочки (адрес backend, лимиты логов, тема)"""

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = Path(config_path) if config_path else self._get_config_path()
        self.config = self._load_config()

    def _get_config_path(self) -> Path:
        """Возвращает путь к файлу конфигурации"""
        return get_app_data_dir() / 'shell_config.json'

    def _get_default_config(self) -> dict:
        """Возвращает конфигурацию по умолчанию"""
        return {
            'backend': {
                'command_url': 'http://127.0.0.1:47816',
                'events_url': 'ws://127.0.0.1:47816/api/v1/events',
                'timeout': 30,  # секунды на одну команду
                'reconnect_delay': 3,  # пауза перед переподключением push-канала
            },

            'logs': {
                'max_lines': 2000,
                'load_limit': 500,
            },

            'application': {
                'theme': 'system',
                'start_minimized': False,
            },
        }

    def _load_config(self) -> Dict[str, Any]:
        """Загружает конфигурацию из файла"""
        default_config = self._get_default_config()

        try:
            if self.config_path.exists():
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    loaded_config = json.load(f)
                    # Объединяем с дефолтными значениями
                    return self._deep_merge(default_config, loaded_config)
        except (OSError, ValueError) as e:
            logger.error(f"Ошибка загрузки конфига: {e}")

        return default_config

    def _deep_merge(self, base: Dict[str, Any], update: Dict[str, Any]) -> Dict[str, Any]:
        """Рекурсивное объединение словарей"""
        result = base.copy()

        for key, value in update.items():
            if (key in result and
                    isinstance(result[key], dict) and
                    isinstance(value, dict)):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def save(self) -> bool:
        """Сохраняет конфигурацию в файл"""
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, 'w', encoding='utf-8') as f:
                json.dump(self.config, f, indent=2, ensure_ascii=False)
            logger.info("Конфигурация сохранена")
            return True
        except OSError as e:
            logger.error(f"Ошибка сохранения конфига: {e}")
            return False

    def get(self, key: str, default: Any = None) -> Any:
        """Получает значение по ключу (dot notation)"""
        value = self.config

        for k in key.split('.'):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any, save: bool = False) -> bool:
        """Устанавливает значение по ключу (dot notation)"""
        keys = key.split('.')
        config_ref = self.config

        for k in keys[:-1]:
            if k not in config_ref or not isinstance(config_ref[k], dict):
                config_ref[k] = {}
            config_ref = config_ref[k]

        config_ref[keys[-1]] = value

        if save:
            return self.save()
        return True

    def get_backend_config(self) -> Dict[str, Any]:
        """Возвращает настройки подключения к backend"""
        return self.get('backend', {})

    def reset_to_defaults(self) -> bool:
        """Сбрасывает настройки к значениям по умолчанию"""
        self.config = self._get_default_config()
        return self.save()


# Синглтон для глобального доступа
_config_instance = None


def get_config() -> ConfigManager:
    """Возвращает глобальный экземпляр ConfigManager"""
    global _config_instance
    if _config_instance is None:
        _config_instance = ConfigManager()
    return _config_instance
