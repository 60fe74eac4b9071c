"""
Общие фикстуры тестов.

Сторы - QObject'ы, поэтому на всю сессию поднимается QCoreApplication.
Backend подменяется FakeCommandClient: ответы задаются по имени команды,
все вызовы записываются.
"""

import inspect

import pytest
from PySide6.QtCore import QCoreApplication


# ── Qt (one per test session) ─────────────────────────────────────────────────


@pytest.fixture(scope="session", autouse=True)
def qt_app():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


# ── Fake backend ──────────────────────────────────────────────────────────────


class FakeCommandClient:
    """
    handlers: {имя команды: значение | исключение | функция(*args)}

    Функция может быть корутиной. Команда без обработчика возвращает None.
    """

    def __init__(self, handlers=None):
        self.handlers = dict(handlers or {})
        self.calls = []
        self.closed = False

    def on(self, method, handler):
        self.handlers[method] = handler

    async def call(self, method, *args):
        self.calls.append((method, args))
        handler = self.handlers.get(method)

        if isinstance(handler, Exception):
            raise handler
        if callable(handler):
            result = handler(*args)
            if inspect.isawaitable(result):
                result = await result
            return result
        return handler

    def methods(self):
        return [method for method, _ in self.calls]

    def count(self, method):
        return self.methods().count(method)

    async def close(self):
        self.closed = True


@pytest.fixture
def client():
    return FakeCommandClient()


# ── Wire records ──────────────────────────────────────────────────────────────


def profile_record(profile_id, remarks="", address="example.com", port=443,
                   config_type=5, sub_id="", network="tcp"):
    return {
        "id": profile_id,
        "configType": config_type,
        "remarks": remarks or profile_id,
        "address": address,
        "port": port,
        "subId": sub_id,
        "uuid": f"uuid-{profile_id}",
        "network": network,
    }


def sub_record(sub_id, remarks=""):
    return {"id": sub_id, "remarks": remarks or sub_id, "url": f"https://example.com/{sub_id}"}


def routing_record(routing_id, remarks=""):
    return {"id": routing_id, "remarks": remarks or routing_id, "rules": []}
