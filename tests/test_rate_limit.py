import pytest

from ghosthuman.core.rate_limit import enforce_sliding_window


class FakePipeline:
    def __init__(self, store: dict) -> None:
        self.store = store
        self.ops: list[tuple] = []

    def zremrangebyscore(self, key, low, high):
        self.ops.append(("zremrangebyscore", key, low, high))

    def zcard(self, key):
        self.ops.append(("zcard", key))

    def zadd(self, key, mapping):
        self.ops.append(("zadd", key, mapping))

    def expire(self, key, seconds):
        self.ops.append(("expire", key, seconds))

    async def execute(self):
        results = []
        for op in self.ops:
            name, key = op[0], op[1]
            members = self.store.setdefault(key, {})
            if name == "zremrangebyscore":
                stale = [m for m, score in members.items() if op[2] <= score <= op[3]]
                for m in stale:
                    del members[m]
                results.append(len(stale))
            elif name == "zcard":
                results.append(len(members))
            elif name == "zadd":
                members.update(op[2])
                results.append(len(op[2]))
            else:
                results.append(True)
        return results


class FakeRedis:
    def __init__(self) -> None:
        self.store: dict = {}

    def pipeline(self):
        return FakePipeline(self.store)


@pytest.mark.asyncio
async def test_sliding_window_allows_up_to_limit():
    redis = FakeRedis()

    outcomes = [
        await enforce_sliding_window(redis, key="rl:humanize:1.2.3.4", limit=3, window_seconds=60)
        for _ in range(4)
    ]

    assert [o.allowed for o in outcomes] == [True, True, True, False]
    assert [o.remaining for o in outcomes] == [2, 1, 0, 0]
    assert outcomes[0].reset_seconds == 60


@pytest.mark.asyncio
async def test_sliding_window_keys_are_independent():
    redis = FakeRedis()

    first = await enforce_sliding_window(redis, key="rl:humanize:a", limit=1, window_seconds=60)
    second = await enforce_sliding_window(redis, key="rl:humanize:b", limit=1, window_seconds=60)

    assert first.allowed and second.allowed
