"""
Shared fixtures and test doubles for the translation cache tests.
"""

import asyncio
import fnmatch

import pytest
import redis

from translation_cache.entities import InferenceRequest, InferenceResult
from translation_cache.repositories import InMemoryEntryRepository
from translation_cache.services import (
    CacheKeyCodec,
    CacheOrchestrator,
    RetryPolicy,
    TierOneCache,
    TierTwoCache,
)

SCHEMA_VERSION = "test-v1"


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleeper:
    """Async sleep replacement that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class StubInferenceClient:
    """Scriptable InferenceClient.

    ``script`` holds exceptions to raise on the next calls, in order; once it
    is exhausted calls succeed with ``"<target>:<input>"``. ``failures`` maps
    a target variant to an exception raised on every call for it.
    """

    def __init__(self, delay: float = 0.0) -> None:
        self.delay = delay
        self.script: list[Exception] = []
        self.failures: dict[str, Exception] = {}
        self.calls: list[InferenceRequest] = []
        self.in_flight = 0
        self.max_in_flight = 0

    @property
    def model_name(self) -> str:
        return "stub-model"

    async def invoke(self, request: InferenceRequest) -> InferenceResult:
        self.calls.append(request)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.script:
                raise self.script.pop(0)
            if request.target_variant in self.failures:
                raise self.failures[request.target_variant]
            return InferenceResult(
                output=f"{request.target_variant}:{request.input}",
                provider_metadata={"model": self.model_name},
                elapsed_ms=1.0,
            )
        finally:
            self.in_flight -= 1


class FakePipeline:
    """Queued-command pipeline for FakeRedis."""

    def __init__(self, client: "FakeRedis") -> None:
        self._redis = client
        self._commands: list = []

    def delete(self, *keys):
        self._commands.append(lambda: self._redis.delete(*keys))
        return self

    def hset(self, name, key=None, value=None, mapping=None):
        self._commands.append(lambda: self._redis.hset(name, key, value, mapping))
        return self

    def hincrby(self, name, key, amount=1):
        self._commands.append(lambda: self._redis.hincrby(name, key, amount))
        return self

    def expire(self, name, seconds):
        self._commands.append(lambda: self._redis.expire(name, seconds))
        return self

    def execute(self):
        results = [command() for command in self._commands]
        self._commands = []
        return results


class FakeScript:
    """Registered script; runs the entry-touch logic the repository registers."""

    def __init__(self, client: "FakeRedis", source: str) -> None:
        self._redis = client
        self.source = source

    def __call__(self, keys=(), args=(), client=None):
        fields = self._redis.hashes.get(keys[0])
        if fields is None:
            return 0
        fields["accessCount"] = str(int(fields.get("accessCount", "0")) + 1)
        if float(args[0]) > float(fields.get("lastAccessedAt", "0")):
            fields["lastAccessedAt"] = str(args[0])
        return 1


class FakeRedis:
    """Just enough of redis.Redis (decode_responses=True) for the repository."""

    def __init__(self) -> None:
        self.hashes: dict[str, dict[str, str]] = {}
        self.expirations: dict[str, int] = {}
        self.available = True

    def hgetall(self, name):
        return dict(self.hashes.get(name, {}))

    def hset(self, name, key=None, value=None, mapping=None):
        fields = self.hashes.setdefault(name, {})
        if key is not None:
            fields[key] = str(value)
        for field, field_value in (mapping or {}).items():
            fields[field] = str(field_value)
        return 1

    def hincrby(self, name, key, amount=1):
        fields = self.hashes.setdefault(name, {})
        fields[key] = str(int(fields.get(key, "0")) + amount)
        return int(fields[key])

    def expire(self, name, seconds):
        if name not in self.hashes:
            return False
        self.expirations[name] = seconds
        return True

    def delete(self, *names):
        deleted = 0
        for name in names:
            if self.hashes.pop(name, None) is not None:
                deleted += 1
            self.expirations.pop(name, None)
        return deleted

    def scan_iter(self, match=None):
        for name in list(self.hashes):
            if match is None or fnmatch.fnmatchcase(name, match):
                yield name

    def pipeline(self):
        return FakePipeline(self)

    def register_script(self, script):
        return FakeScript(self, script)

    def ping(self):
        if not self.available:
            raise redis.ConnectionError("connection refused")
        return True


@pytest.fixture
def clock():
    """Wall clock shared by tier two and the orchestrator."""
    return FakeClock()


@pytest.fixture
def sleeper():
    """Recording replacement for asyncio.sleep."""
    return RecordingSleeper()


@pytest.fixture
def stub_client():
    """Scriptable inference client."""
    return StubInferenceClient()


@pytest.fixture
def store():
    """In-memory durable store."""
    return InMemoryEntryRepository()


@pytest.fixture
def make_orchestrator(clock, sleeper, store, stub_client):
    """Build an orchestrator over the fixtures; keyword arguments override parts."""

    def _make(**overrides) -> CacheOrchestrator:
        parts = {
            "codec": CacheKeyCodec(),
            "tier_one": TierOneCache(ttl=600, clock=clock),
            "tier_two": TierTwoCache(store=store, ttl=30 * 86400, clock=clock),
            "client": stub_client,
            "retry_policy": RetryPolicy(max_attempts=3, base_delay=1.0, sleeper=sleeper),
            "schema_version": SCHEMA_VERSION,
            "clock": clock,
        }
        parts.update(overrides)
        return CacheOrchestrator(**parts)

    return _make


@pytest.fixture
def fake_redis():
    """In-process stand-in for a Redis server."""
    return FakeRedis()
