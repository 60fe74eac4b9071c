import asyncio

import pytest

from conftest import FakeCommandClient, profile_record
from core.command_client import CommandRejectedError
from core.models import ConfigType, ProfileItem
from core.stores.profile_store import ProfileStore

pytestmark = pytest.mark.asyncio


def make_store(profiles=None, **handlers):
    client = FakeCommandClient({"GetProfiles": profiles, **handlers})
    return ProfileStore(client), client


# ── Load ──────────────────────────────────────────────────────────────────────


async def test_load_replaces_items():
    store, _ = make_store([profile_record("a"), profile_record("b")])
    seen = []
    store.items_changed.connect(seen.append)

    await store.load()

    assert [p.id for p in store.items] == ["a", "b"]
    assert isinstance(store.items[0], ProfileItem)
    assert len(seen) == 1


async def test_load_null_response_means_empty():
    store, _ = make_store(None)
    await store.load()
    assert store.items == []
    assert store.loading is False


async def test_load_all_filter_sends_empty_subscription():
    store, client = make_store([])
    await store.load("all")
    await store.load("sub-1")
    assert client.calls == [("GetProfiles", ("",)), ("GetProfiles", ("sub-1",))]


async def test_load_skips_undecodable_records():
    store, _ = make_store([profile_record("a"), profile_record("bad", config_type=99)])
    await store.load()
    assert store.ids() == {"a"}


async def test_loading_flag_stays_set_while_any_load_pending():
    gates = [asyncio.Event(), asyncio.Event()]
    calls = []

    async def get_profiles(_sub_id):
        gate = gates[len(calls)]
        calls.append(gate)
        await gate.wait()
        return []

    store, _ = make_store(get_profiles)
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


async def test_loading_flag_cleared_after_failure():
    store, _ = make_store(CommandRejectedError("GetProfiles", "boom"))
    with pytest.raises(CommandRejectedError):
        await store.load()
    assert store.loading is False


# ── Mutations ─────────────────────────────────────────────────────────────────


async def test_create_sends_wire_record_and_reloads():
    store, client = make_store([profile_record("a")])
    profile = ProfileItem.from_dict(profile_record("a", remarks="Tokyo"))

    await store.create(profile)

    assert client.methods() == ["AddProfile", "GetProfiles"]
    sent = client.calls[0][1][0]
    assert sent["remarks"] == "Tokyo"
    assert sent["configType"] == int(ConfigType.VLESS)


async def test_failed_mutation_does_not_reload():
    store, client = make_store(
        [profile_record("a")],
        AddProfile=CommandRejectedError("AddProfile", "duplicate"),
    )
    await store.load()
    profile = ProfileItem.from_dict(profile_record("b"))

    with pytest.raises(CommandRejectedError):
        await store.create(profile)

    assert client.count("GetProfiles") == 1
    assert store.ids() == {"a"}


async def test_update_reloads_with_last_filter():
    store, client = make_store([profile_record("a", sub_id="s1")])
    await store.load("s1")

    await store.update(store.get("a"))

    assert client.calls[-1] == ("GetProfiles", ("s1",))


async def test_delete_prunes_selection_before_reload():
    selection_at_reload = []
    store, client = make_store([profile_record("a"), profile_record("b")])
    await store.load()
    store.selection.set_selected(["a", "b"])

    def get_profiles(_sub_id):
        selection_at_reload.append(store.selection.selected_ids)
        return [profile_record("a")]

    client.on("GetProfiles", get_profiles)
    await store.delete(["b"])

    assert client.calls[-2] == ("DeleteProfiles", (["b"],))
    assert selection_at_reload == [frozenset({"a"})]
    assert store.selection.selected_ids == {"a"}


async def test_reload_drops_vanished_ids_from_selection():
    store, client = make_store([profile_record("a"), profile_record("b"), profile_record("c")])
    await store.load()
    store.selection.set_selected(["a", "b", "c"])

    client.on("GetProfiles", [profile_record("a"), profile_record("c")])
    await store.reload()

    assert store.selection.selected_ids == {"a", "c"}


async def test_set_active_does_not_reload():
    store, client = make_store([])
    await store.set_active("a")
    assert client.calls == [("SetActiveProfile", ("a",))]


# ── Filters ───────────────────────────────────────────────────────────────────


async def test_apply_filter_reloads_for_subscription():
    store, client = make_store([])
    await store.apply_filter("s1")
    assert store.selection.filter_sub_id == "s1"
    assert client.calls == [("GetProfiles", ("s1",))]

    await store.apply_filter(None)
    assert store.selection.filter_sub_id == "all"
    assert client.calls[-1] == ("GetProfiles", ("",))


async def test_visible_profiles_do_not_reorder_collection():
    store, _ = make_store([
        profile_record("a", remarks="zulu"),
        profile_record("b", remarks="Alpha"),
    ])
    await store.load()

    assert [p.id for p in store.visible_profiles()] == ["b", "a"]
    assert [p.id for p in store.items] == ["a", "b"]


async def test_toggle_select_all_uses_visible_profiles():
    store, _ = make_store([
        profile_record("a", remarks="tokyo-1"),
        profile_record("b", remarks="tokyo-2"),
        profile_record("c", remarks="berlin"),
    ])
    await store.load()
    store.selection.set_search("tokyo")

    store.toggle_select_all()
    assert store.selection.selected_ids == {"a", "b"}

    store.toggle_select_all()
    assert store.selection.selected_ids == frozenset()


# ── Import / export ───────────────────────────────────────────────────────────


async def test_import_from_text_reloads_and_returns_count():
    store, client = make_store([profile_record("a")], ImportFromText=3)
    count = await store.import_from_text("vless://...")
    assert count == 3
    assert client.methods() == ["ImportFromText", "GetProfiles"]


async def test_export_share_link_null_is_empty_string():
    store, _ = make_store([], ExportShareLink=None)
    assert await store.export_share_link("a") == ""


# ── Speed tests ───────────────────────────────────────────────────────────────


async def test_speed_results_merge_partially():
    store, client = make_store([], TestProfiles=[
        {"profileId": "a", "latency": 120, "speed": 1000},
        {"profileId": "b", "latency": -1},
    ])
    updated = []
    store.speed_results_changed.connect(updated.append)

    await store.test_profiles(["a", "b"])
    client.on("TestProfiles", [{"profileId": "a", "latency": 80}])
    results = await store.test_profiles(["a"])

    assert [r.id for r in results] == ["a"]
    assert store.speed_results.get("a").latency == 80
    assert store.speed_results.get("b").latency == -1
    assert updated == [["a", "b"], ["a"]]


async def test_test_all_profiles_null_response():
    store, _ = make_store([], TestAllProfiles=None)
    assert await store.test_all_profiles() == []
    assert len(store.speed_results) == 0


async def test_speed_results_skip_malformed_entries():
    store, _ = make_store([], TestProfiles=[
        None,
        {"profileId": "a", "latency": None},
        {"profileId": "b", "latency": "n/a"},
        {"profileId": "c", "latency": 40},
    ])

    results = await store.test_profiles(["a", "b", "c"])

    assert [r.id for r in results] == ["a", "c"]
    assert store.speed_results.get("a").latency == -1
    assert "b" not in store.speed_results
