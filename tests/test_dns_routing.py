import asyncio

import pytest

from conftest import FakeCommandClient, routing_record
from core.models import DNSItem
from core.stores.dns_store import DNSStore
from core.stores.routing_store import RoutingStore

pytestmark = pytest.mark.asyncio


# ── DNS ───────────────────────────────────────────────────────────────────────


async def test_dns_null_gives_defaults():
    store = DNSStore(FakeCommandClient({"GetDNSConfig": None}))
    await store.load()
    assert store.dns == DNSItem()
    assert store.loading is False


async def test_dns_loading_stays_set_while_any_load_pending():
    gates = [asyncio.Event(), asyncio.Event()]
    calls = []

    async def get_dns():
        gate = gates[len(calls)]
        calls.append(gate)
        await gate.wait()
        return None

    store = DNSStore(FakeCommandClient({"GetDNSConfig": get_dns}))
    seen = []
    store.loading_changed.connect(seen.append)

    first = asyncio.create_task(store.load())
    second = asyncio.create_task(store.load())
    await asyncio.sleep(0)
    assert store.loading is True

    gates[0].set()
    await first
    assert store.loading is True

    gates[1].set()
    await second
    assert store.loading is False
    assert seen == [True, False]


async def test_dns_update_reloads():
    client = FakeCommandClient({"GetDNSConfig": {"remoteDns": "1.1.1.1", "fakeIP": True}})
    store = DNSStore(client)

    await store.update(DNSItem(remote_dns="1.1.1.1", fake_ip=True))

    assert client.methods() == ["UpdateDNSConfig", "GetDNSConfig"]
    assert client.calls[0][1][0]["fakeIP"] is True
    assert store.dns.remote_dns == "1.1.1.1"


# ── Routing ───────────────────────────────────────────────────────────────────


async def test_routing_load_and_rules():
    record = routing_record("r1")
    record["rules"] = [{"id": "rule-1", "outboundTag": "direct", "domain": ["geosite:cn"]}]
    store = RoutingStore(FakeCommandClient({"GetRoutings": [record]}))

    await store.load()

    rule = store.get("r1").rules[0]
    assert rule.outbound_tag == "direct"
    assert rule.matchers == {"domain": ["geosite:cn"]}


async def test_routing_set_active_does_not_reload():
    client = FakeCommandClient({"GetRoutings": [routing_record("r1")]})
    store = RoutingStore(client)
    await store.set_active("r1")
    assert client.methods() == ["SetActiveRouting"]


async def test_routing_delete_one_call_per_id():
    client = FakeCommandClient({"GetRoutings": []})
    store = RoutingStore(client)
    await store.delete(["r1", "r2"])
    assert client.methods() == ["DeleteRouting", "DeleteRouting", "GetRoutings"]
