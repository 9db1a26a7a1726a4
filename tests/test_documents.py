import asyncio

import pytest

from checkout_engine.database.documents import DocumentNotFoundError, DocumentStore


@pytest.fixture
def store():
    return DocumentStore()


async def test_get_returns_copies(store):
    await store.set("orders", "o1", {"status": "pending", "items": [1]})
    doc = await store.get("orders", "o1")
    doc["items"].append(2)

    assert (await store.get("orders", "o1"))["items"] == [1]


async def test_update_requires_existing(store):
    with pytest.raises(DocumentNotFoundError):
        await store.update("orders", "missing", {"status": "paid"})


async def test_subscriber_gets_snapshot_then_writes(store):
    await store.set("orders", "o1", {"status": "pending"})
    received = []
    unsubscribe = store.subscribe("orders", "o1", received.append)

    # Delivery is never inline with subscribe or the write
    assert received == []
    await asyncio.sleep(0)
    await store.update("orders", "o1", {"status": "paid"})
    assert len(received) == 1
    await asyncio.sleep(0)

    unsubscribe()
    await store.delete("orders", "o1")
    await asyncio.sleep(0)

    assert [doc["status"] for doc in received] == ["pending", "paid"]


async def test_missing_document_snapshot_is_none(store):
    received = []
    store.subscribe("orders", "nope", received.append)
    await asyncio.sleep(0)
    assert received == [None]
