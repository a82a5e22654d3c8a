import json

import pytest

from scrapgo.core.errors import EngineError, Result
from scrapgo.core.states import PickupStatus
from scrapgo.models.identity import Identity
from scrapgo.models.pickup import PickupDraft, advance
from scrapgo.repos.inmemory import InMemoryRepo
from scrapgo.repos.jsonfile import JsonFileRepo
from scrapgo.services.lifecycle import PickupLifecycle

pytestmark = pytest.mark.anyio

def _draft(customer_id="customer_c", address="123 Main St"):
    return PickupDraft(
        customer_id=customer_id, customer_name="C", customer_phone="+1",
        address=address, pickup_date="2025-06-01", time_slot="9:00 AM - 10:00 AM",
    )

async def test_insert_and_list_in_insertion_order(repo):
    ids = [await repo.insert(_draft(address=f"{n} Main St")) for n in range(5)]
    listed = await repo.list_all()
    assert [p.id for p in listed] == ids
    assert len(set(ids)) == 5
    first = await repo.get(ids[0])
    assert first.state == PickupStatus.PENDING
    assert first.created_at == first.updated_at

async def test_get_missing_returns_none(repo):
    assert await repo.get("pickup_nope") is None

async def test_update_missing_is_not_found(repo):
    res = await repo.update("pickup_nope", lambda p: Result.success(p))
    assert res.error == EngineError.NOT_FOUND

async def test_update_stamps_time_and_version(repo):
    pid = await repo.insert(_draft())
    before = await repo.get(pid)
    res = await repo.update(pid, lambda p: Result.success(
        advance(p, PickupStatus.ACCEPTED, partner_id="partner_p", partner_name="P", pickup_code="111111")))
    assert res.ok
    assert res.value.version == before.version + 1
    assert res.value.updated_at >= before.updated_at
    assert res.value.created_at == before.created_at
    assert await repo.get(pid) == res.value

async def test_failed_mutator_leaves_record(repo):
    pid = await repo.insert(_draft())
    before = await repo.get(pid)
    res = await repo.update(pid, lambda p: Result.failure(EngineError.INVALID_TRANSITION))
    assert res.error == EngineError.INVALID_TRANSITION
    assert await repo.get(pid) == before

async def test_sessions(repo):
    ident = Identity(id="customer_c", phone="+1", role="customer")
    assert await repo.load_session("device") is None
    await repo.save_session("device", ident)
    assert await repo.load_session("device") == ident
    await repo.delete_session("device")
    await repo.delete_session("device")
    assert await repo.load_session("device") is None

async def test_json_file_survives_restart(tmp_path, customer, partner):
    path = tmp_path / "store.json"
    first = JsonFileRepo(path)
    await first.open()
    lifecycle = PickupLifecycle(first, code_factory=lambda: "482193")
    pickup = (await lifecycle.create(customer, address="123 Main St", pickup_date="2025-06-01",
                                     time_slot="9:00 AM - 10:00 AM")).value
    await lifecycle.accept(pickup.id, partner)
    await lifecycle.start(pickup.id, partner, "482193")
    await lifecycle.submit_items(pickup.id, partner, [{"name": "Copper Wire", "quantity": 3, "price": "2.50"}], "7.50")
    await first.save_session("device", customer)
    saved = await first.get(pickup.id)
    await first.close()

    raw = json.loads(path.read_text())
    assert raw["pickups"][0]["status"] == "pending-approval"

    second = JsonFileRepo(path)
    await second.open()
    restored = await second.get(pickup.id)
    assert restored == saved
    assert await second.load_session("device") == customer

    res = await PickupLifecycle(second).approve(pickup.id, customer)
    assert res.ok and res.value.state == PickupStatus.COMPLETED

async def test_json_file_requires_open(tmp_path):
    store = JsonFileRepo(tmp_path / "store.json")
    with pytest.raises(RuntimeError):
        await store.insert(_draft())
    with pytest.raises(RuntimeError):
        await store.list_all()

async def test_memory_repo_needs_no_file():
    store = InMemoryRepo()
    await store.open()
    assert await store.list_all() == []

async def test_build_repo_picks_backend(tmp_path, settings):
    from scrapgo.deps import build_repo
    from scrapgo.repos.mongo import MongoRepo

    assert isinstance(build_repo(settings), InMemoryRepo)
    file_repo = build_repo(settings.model_copy(update={"store_backend": "file", "data_path": str(tmp_path / "s.json")}))
    assert isinstance(file_repo, JsonFileRepo)
    mongo_repo = build_repo(settings.model_copy(update={"store_backend": "mongo"}))
    assert isinstance(mongo_repo, MongoRepo)
    # no connection is made until open()
    with pytest.raises(RuntimeError):
        await mongo_repo.get("pickup_1")

async def test_unknown_ids_do_not_allocate_locks(repo, partner):
    lifecycle = PickupLifecycle(repo)
    pid = await repo.insert(_draft())
    for n in range(50):
        res = await lifecycle.accept(f"pickup_nope_{n}", partner)
        assert res.error == EngineError.NOT_FOUND
    assert list(repo._locks) == [pid]

async def _failing_file_repo(tmp_path, monkeypatch):
    store = JsonFileRepo(tmp_path / "store.json")
    await store.open()

    async def disk_full():
        raise OSError("disk full")

    return store, lambda: monkeypatch.setattr(store, "_persist", disk_full)

async def test_failed_write_rolls_back_update(tmp_path, monkeypatch, customer, partner):
    store, break_disk = await _failing_file_repo(tmp_path, monkeypatch)
    lifecycle = PickupLifecycle(store)
    pickup = (await lifecycle.create(customer, address="1 St", pickup_date="2025-06-01", time_slot="9")).value
    break_disk()
    with pytest.raises(OSError):
        await lifecycle.accept(pickup.id, partner)
    assert await store.get(pickup.id) == pickup

    # the on-disk copy still agrees with memory after a reload
    reloaded = JsonFileRepo(store.path)
    await reloaded.open()
    assert await reloaded.get(pickup.id) == pickup

async def test_failed_write_rolls_back_insert_and_sessions(tmp_path, monkeypatch, customer):
    store, break_disk = await _failing_file_repo(tmp_path, monkeypatch)
    await store.save_session("device", customer)
    break_disk()
    with pytest.raises(OSError):
        await store.insert(_draft())
    assert await store.list_all() == []
    assert store._locks == {}

    with pytest.raises(OSError):
        await store.delete_session("device")
    assert await store.load_session("device") == customer
    with pytest.raises(OSError):
        await store.save_session("other", customer)
    assert await store.load_session("other") is None

async def test_reopened_file_store_accepts_updates(tmp_path, customer, partner):
    first = JsonFileRepo(tmp_path / "store.json")
    await first.open()
    pid = (await PickupLifecycle(first).create(customer, address="1 St", pickup_date="2025-06-01",
                                               time_slot="9")).value.id
    await first.close()

    second = JsonFileRepo(tmp_path / "store.json")
    await second.open()
    res = await PickupLifecycle(second).accept(pid, partner)
    assert res.ok
