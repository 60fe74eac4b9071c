import pytest

from conftest import FakeCommandClient, profile_record, sub_record
from core.app_context import AppContext
from core.command_client import CommandClient, CommandTransportError
from core.config_manager import ConfigManager
from core.event_bus import TOPIC_CORE_LOG, TOPIC_TRAFFIC
from core.push_channel import PushChannel

pytestmark = pytest.mark.asyncio


def backend(**overrides):
    handlers = {
        "GetConfig": {"activeProfileId": "a"},
        "GetCoreStatus": {"running": False},
        "GetProfiles": [profile_record("a")],
        "GetSubscriptions": [sub_record("s1")],
        "GetRoutings": None,
        "GetDNSConfig": None,
        "GetLogs": ["boot"],
    }
    handlers.update(overrides)
    return FakeCommandClient(handlers)


async def test_start_loads_everything_and_binds_events():
    client = backend()
    context = AppContext(client)

    await context.start()

    assert context.app_store.active_profile_id == "a"
    assert context.profiles.ids() == {"a"}
    assert context.subscriptions.ids() == {"s1"}
    assert context.routings.items == []
    assert context.logs.logs == ["boot"]
    assert ("GetLogs", (500,)) in client.calls

    context.bus.emit(TOPIC_CORE_LOG, "live")
    assert context.logs.logs == ["boot", "live"]


async def test_initial_load_survives_one_failure():
    context = AppContext(backend(GetRoutings=CommandTransportError("GetRoutings", "down")))

    assert await context.initial_load() is False
    assert context.profiles.ids() == {"a"}
    assert context.routings.loading is False


async def test_shutdown_unbinds_and_closes_client():
    client = backend()
    context = AppContext(client)
    await context.start()

    await context.shutdown()

    assert client.closed
    assert context.bus.subscriber_count(TOPIC_TRAFFIC) == 0
    context.bus.emit(TOPIC_CORE_LOG, "after shutdown")
    assert "after shutdown" not in context.logs.logs


async def test_from_config(tmp_path):
    config = ConfigManager(tmp_path / "shell_config.json")
    config.set("logs.load_limit", 50)

    context = AppContext.from_config(config)
    try:
        assert isinstance(context.client, CommandClient)
        assert isinstance(context.push_channel, PushChannel)
        assert context.push_channel.bus is context.bus
        assert context.log_load_limit == 50
    finally:
        await context.client.close()
