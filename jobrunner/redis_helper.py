import json
from typing import Any, Dict, Optional, List, Tuple

from . import config

TESTING = config.TESTING

if not TESTING:
    import redis.asyncio as redis  # type: ignore
    RedisClient = redis.Redis
else:
    RedisClient = None

# Simple key names
JOBS_HASH = "jobs"
READY_ZSET = "ready_zset"
SCHEDULED_ZSET = "scheduled_zset"

READY_SEQUENCE = "ready_seq"

# ready score = -priority * SEQUENCE_SPAN + sequence. With |priority| <= MAX_PRIORITY
# every score is an integer below 2**53, so float scores stay exact and equal
# priorities pop in the order they entered the ready set.
SEQUENCE_SPAN = 2 ** 40


class AsyncInMemoryRedis:
    def __init__(self):
        self._hashes: Dict[str, Dict[str, str]] = {}
        self._zsets: Dict[str, Dict[str, float]] = {}
        self._counters: Dict[str, int] = {}

    async def hset(self, name: str, key: str, value: str):
        h = self._hashes.setdefault(name, {})
        h[key] = value
        return 1

    async def hget(self, name: str, key: str) -> Optional[str]:
        h = self._hashes.get(name, {})
        return h.get(key)

    async def hgetall(self, name: str) -> Dict[str, str]:
        return dict(self._hashes.get(name, {}))

    # zset methods
    async def zadd(self, name: str, mapping: Dict[str, float]):
        z = self._zsets.setdefault(name, {})
        added = 0
        for member, score in mapping.items():
            if member not in z:
                added += 1
            z[member] = score
        return added

    async def zcard(self, name: str) -> int:
        return len(self._zsets.get(name, {}))

    async def zpopmin(self, name: str, count: int = 1) -> List[Tuple[str, float]]:
        z = self._zsets.get(name, {})
        if not z:
            return []
        # Get members sorted by score
        items = sorted(z.items(), key=lambda kv: kv[1])
        popped = items[:count]
        for m, _ in popped:
            del z[m]
        return popped

    async def incr(self, name: str) -> int:
        value = int(self._counters.get(name, 0)) + 1
        self._counters[name] = value
        return value

    def pipeline(self, transaction: bool = True) -> "AsyncInMemoryPipeline":
        return AsyncInMemoryPipeline(self)

    async def aclose(self):
        return None


class AsyncInMemoryPipeline:
    """Buffers commands and applies them together on execute(), like MULTI/EXEC."""

    def __init__(self, client: AsyncInMemoryRedis):
        self._client = client
        self._commands: List[Tuple[str, tuple]] = []

    def hset(self, *args):
        self._commands.append(("hset", args))
        return self

    def zadd(self, *args):
        self._commands.append(("zadd", args))
        return self

    async def execute(self) -> list:
        commands, self._commands = self._commands, []
        return [await getattr(self._client, name)(*args) for name, args in commands]

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        self._commands = []


# Singleton in-memory client for testing
_inmemory_client: Optional[AsyncInMemoryRedis] = None


async def get_redis():
    global _inmemory_client
    if TESTING:
        if _inmemory_client is None:
            _inmemory_client = AsyncInMemoryRedis()
        return _inmemory_client
    else:
        return RedisClient.from_url(config.REDIS_URL, decode_responses=True)  # type: ignore


def check_priority(priority) -> int:
    if isinstance(priority, bool) or not isinstance(priority, int):
        raise ValueError(f"priority must be an integer, got {priority!r}")
    if abs(priority) > config.MAX_PRIORITY:
        raise ValueError(f"priority must be between -{config.MAX_PRIORITY} and {config.MAX_PRIORITY}, got {priority}")
    return priority


def ready_score(priority: int, sequence: int) -> int:
    return -check_priority(priority) * SEQUENCE_SPAN + sequence % SEQUENCE_SPAN


async def _store(redis_client, job_id: str, payload: Dict[str, Any], zset: str, score: float):
    # The record and its index entry land together or not at all
    record = json.dumps(payload)
    async with redis_client.pipeline(transaction=True) as pipe:
        pipe.hset(JOBS_HASH, job_id, record)
        pipe.zadd(zset, {job_id: score})
        await pipe.execute()


# Basic helpers
async def enqueue_job(redis_client, job_id: str, payload: Dict[str, Any]):
    # Store job metadata and add to the ready set, highest priority first
    priority = check_priority(payload.get("priority", 0))
    sequence = await redis_client.incr(READY_SEQUENCE)
    await _store(redis_client, job_id, payload, READY_ZSET, ready_score(priority, sequence))


async def schedule_job(redis_client, job_id: str, payload: Dict[str, Any], score: float):
    # Store job metadata and add to scheduled zset with timestamp score
    check_priority(payload.get("priority", 0))
    await _store(redis_client, job_id, payload, SCHEDULED_ZSET, score)


async def pop_due_jobs(redis_client, max_score: float, count: int = 100) -> List[str]:
    """Pop up to `count` jobs from scheduled_zset with score <= max_score.
    Returns a list of job_ids removed from the zset.
    """
    # redis-py returns list of (member, score)
    pairs = await redis_client.zpopmin(SCHEDULED_ZSET, count)
    due = [m for m, s in pairs if s <= max_score]
    # push back any with score > max_score
    for m, s in pairs:
        if s > max_score:
            await redis_client.zadd(SCHEDULED_ZSET, {m: s})
    return due


async def get_job(redis_client, job_id: str) -> Optional[Dict[str, Any]]:
    raw = await redis_client.hget(JOBS_HASH, job_id)
    if raw is None:
        return None
    return json.loads(raw)


async def list_jobs(redis_client) -> List[Dict[str, Any]]:
    all_items = await redis_client.hgetall(JOBS_HASH)
    return [json.loads(v) for v in all_items.values()]


async def set_job(redis_client, job_id: str, payload: Dict[str, Any]):
    await redis_client.hset(JOBS_HASH, job_id, json.dumps(payload))


async def pop_ready(redis_client) -> Optional[str]:
    pairs = await redis_client.zpopmin(READY_ZSET, 1)
    if not pairs:
        return None
    return pairs[0][0]
