import pytest

from core.config_manager import ConfigManager
from ui.theme_manager import THEME_DARK, THEME_LIGHT, THEME_SYSTEM, ThemeManager


class FakeRoot:
    def __init__(self):
        self.properties = {}

    def setProperty(self, name, value):
        self.properties[name] = value


class FakePreferenceSource:
    def __init__(self, dark=False):
        self.dark = dark
        self.listeners = []

    def is_dark(self):
        return self.dark

    def add_listener(self, callback):
        self.listeners.append(callback)

    def remove_listener(self, callback):
        self.listeners.remove(callback)

    def flip(self, dark):
        self.dark = dark
        for callback in list(self.listeners):
            callback()


@pytest.fixture
def root():
    return FakeRoot()


@pytest.fixture
def source():
    return FakePreferenceSource()


def test_apply_explicit_modes(root, source):
    manager = ThemeManager(root, source)
    assert manager.apply_theme(THEME_DARK) is True
    assert root.properties == {"dark": True}
    assert manager.apply_theme(THEME_LIGHT) is False
    assert root.properties == {"dark": False}


def test_system_mode_follows_preference(root, source):
    source.dark = True
    manager = ThemeManager(root, source)
    manager.apply_theme(THEME_SYSTEM)
    assert root.properties["dark"] is True


def test_watch_system_tracks_changes(root, source):
    manager = ThemeManager(root, source)
    manager.apply_theme(THEME_SYSTEM)
    cleanup = manager.watch(THEME_SYSTEM)

    source.flip(True)
    assert root.properties["dark"] is True

    cleanup()
    source.flip(False)
    assert root.properties["dark"] is True
    assert source.listeners == []


def test_watch_explicit_mode_registers_nothing(root, source):
    manager = ThemeManager(root, source)
    cleanup = manager.watch(THEME_DARK)
    assert source.listeners == []
    cleanup()


def test_set_mode_persists(root, source, tmp_path):
    config = ConfigManager(tmp_path / "shell_config.json")
    manager = ThemeManager(root, source, config)

    manager.set_mode(THEME_DARK)

    assert ConfigManager(tmp_path / "shell_config.json").get("application.theme") == THEME_DARK
    assert root.properties["dark"] is True


def test_cycle_mode_rotates(root, source):
    manager = ThemeManager(root, source)
    assert [manager.cycle_mode() for _ in range(3)] == [THEME_LIGHT, THEME_DARK, THEME_SYSTEM]


def test_set_mode_rejects_unknown(root, source):
    with pytest.raises(ValueError):
        ThemeManager(root, source).set_mode("sepia")
