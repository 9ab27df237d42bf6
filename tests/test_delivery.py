"""Tests for the outbound delivery queue."""

import pytest

from kickdex.exceptions import TransportError
from kickdex.kick.client import SendResult, SendStatus, TokenGrant
from kickdex.kick.delivery import DeliveryQueue
from kickdex.kick.tokens import CredentialManager

OK = SendResult(SendStatus.OK, status_code=200)
FAILED = SendResult(SendStatus.FAILED, status_code=500)
UNAUTHORIZED = SendResult(SendStatus.UNAUTHORIZED, status_code=401)


def rate_limited(retry_after):
    return SendResult(SendStatus.RATE_LIMITED, status_code=429, retry_after=retry_after)


class ScriptedClient:
    """Stands in for ``KickClient``; replays scripted send results."""

    def __init__(self, results):
        self.results = list(results)
        self.calls = []
        self.refreshes = 0

    async def send_chat_message(self, token, chatroom_id, text):
        self.calls.append((token, chatroom_id, text))
        result = self.results.pop(0) if self.results else OK
        if isinstance(result, Exception):
            raise result
        return result

    async def refresh_access_token(self, refresh_token):
        self.refreshes += 1
        return TokenGrant(f"fresh-{self.refreshes}", "refresh-next", 3600)


@pytest.fixture
def client():
    return ScriptedClient([])


@pytest.fixture
async def credentials(client, kv_store):
    manager = CredentialManager(kv_store, client)
    await manager.store_initial_credential("access-1", "refresh-1", 3600)
    await manager.set_chat_routing(4242)
    return manager


@pytest.fixture
def queue(client, credentials, timer):
    return DeliveryQueue(
        client,
        credentials,
        sleep=timer.sleep,
        monotonic=timer.monotonic,
    )


async def test_delivers_with_token_and_chatroom(queue, client):
    assert await queue.deliver("hello chat") is True

    assert client.calls == [("access-1", 4242, "hello chat")]
    assert queue.sent == 1


async def test_rate_limit_waits_retry_after_then_succeeds(queue, client, timer):
    client.results = [rate_limited(3.0), rate_limited(3.0), OK]

    assert await queue.deliver("hi") is True

    assert len(client.calls) == 3
    assert timer.sleeps == [3.0, 3.0]


async def test_retry_after_is_clamped(queue, client, timer):
    client.results = [rate_limited(60.0), rate_limited(0.0), OK]

    assert await queue.deliver("hi") is True
    assert timer.sleeps == [10.0, 1.0]


async def test_unauthorized_forces_refresh(queue, client, timer):
    client.results = [UNAUTHORIZED, OK]

    assert await queue.deliver("hi") is True

    assert client.refreshes == 1
    assert [call[0] for call in client.calls] == ["access-1", "fresh-1"]
    assert timer.sleeps == [1.0]


async def test_drops_after_max_attempts(queue, client, timer):
    client.results = [FAILED, FAILED, FAILED, OK]

    assert await queue.deliver("doomed") is False

    assert len(client.calls) == 3
    assert timer.sleeps == [1.0, 2.0]
    assert queue.dropped == 1
    assert queue.sent == 0


async def test_transport_error_is_retried(queue, client):
    client.results = [TransportError("connection reset"), OK]

    assert await queue.deliver("hi") is True
    assert len(client.calls) == 2


async def test_missing_chatroom_counts_as_failure(client, kv_store, timer):
    manager = CredentialManager(kv_store, client)
    await manager.store_initial_credential("access-1", "refresh-1", 3600)
    queue = DeliveryQueue(client, manager, sleep=timer.sleep, monotonic=timer.monotonic)

    assert await queue.deliver("nowhere") is False
    assert client.calls == []
    assert queue.dropped == 1


async def test_sends_are_spaced(queue, client, timer):
    await queue.deliver("one")
    await queue.deliver("two")

    assert timer.sleeps == [pytest.approx(0.35)]
    assert [call[2] for call in client.calls] == ["one", "two"]


async def test_queue_worker_truncates_and_preserves_order(queue, client):
    long_text = "x" * 500

    assert queue.send("first")
    assert queue.send(long_text)
    assert queue.send("") is False
    await queue.join()
    await queue.stop()

    texts = [call[2] for call in client.calls]
    assert texts[0] == "first"
    assert len(texts[1]) == 300
    assert len(texts) == 2


async def test_failed_message_does_not_block_next(queue, client):
    client.results = [FAILED, FAILED, FAILED, OK]

    queue.send("bad")
    queue.send("good")
    await queue.join()
    await queue.stop()

    assert [call[2] for call in client.calls] == ["bad", "bad", "bad", "good"]
    assert (queue.sent, queue.dropped) == (1, 1)


class FlakyStore:
    """Key/value store whose reads fail a set number of times."""

    def __init__(self, inner, failures):
        self.inner = inner
        self.failures = failures

    async def get_value(self, key):
        if self.failures:
            self.failures -= 1
            raise ConnectionResetError("db connection dropped")
        return await self.inner.get_value(key)

    async def set_value(self, key, value):
        await self.inner.set_value(key, value)


async def test_store_error_is_retried(client, credentials, kv_store, timer):
    credentials.store = FlakyStore(kv_store, failures=1)
    queue = DeliveryQueue(client, credentials, sleep=timer.sleep, monotonic=timer.monotonic)

    queue.send("hello")
    await queue.join()
    await queue.stop()

    assert [call[2] for call in client.calls] == ["hello"]
    assert timer.sleeps == [1.0]
    assert (queue.sent, queue.dropped) == (1, 0)


async def test_persistent_store_error_drops_after_retries(client, credentials, kv_store, timer):
    credentials.store = FlakyStore(kv_store, failures=100)
    queue = DeliveryQueue(client, credentials, sleep=timer.sleep, monotonic=timer.monotonic)

    assert await queue.deliver("hello") is False

    assert client.calls == []
    assert timer.sleeps == [1.0, 2.0]
    assert queue.dropped == 1
