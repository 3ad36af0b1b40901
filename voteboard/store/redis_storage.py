"""Redis-backed storage adapter."""

from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager

import redis
import structlog

from voteboard.errors import StorageError, StorageUnavailableError
from voteboard.observability.metrics import EngineMetrics
from voteboard.settings import EngineSettings
from voteboard.store.adapter import Aggregate


logger = structlog.get_logger()


class RedisStorage:
    """Storage adapter over a redis-py client.

    Each primitive maps to a single Redis command, so atomicity comes from
    Redis itself. The group cache rebuild runs ZINTERSTORE and EXPIRE inside
    one MULTI/EXEC pipeline.
    """

    def __init__(
        self,
        client: redis.Redis,
        metrics: EngineMetrics | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            client: Connected redis client created with decode_responses=True.
            metrics: Optional metrics instance.
        """
        self._client = client
        self._metrics = metrics or EngineMetrics.get_instance()
        self._log = logger.bind(component="store", backend="redis")

    @classmethod
    def from_settings(
        cls,
        settings: EngineSettings,
        metrics: EngineMetrics | None = None,
    ) -> "RedisStorage":
        """Create an adapter from engine settings.

        Args:
            settings: Engine settings with Redis connection parameters.
            metrics: Optional metrics instance.

        Returns:
            Adapter bound to a new client. The connection is opened lazily.
        """
        client = redis.from_url(
            settings.redis_url,
            db=settings.redis_db,
            decode_responses=True,
            socket_timeout=settings.socket_timeout_seconds,
            socket_connect_timeout=settings.socket_timeout_seconds,
        )
        return cls(client, metrics=metrics)

    @contextmanager
    def _command(self, operation: str) -> Iterator[None]:
        """Translate redis-py failures into storage errors.

        Args:
            operation: Name of the adapter operation for logging.
        """
        try:
            yield
        except (redis.ConnectionError, redis.TimeoutError) as exc:
            self._metrics.record_storage_error(operation)
            self._log.error("storage_unavailable", op=operation, error=str(exc))
            raise StorageUnavailableError(operation, str(exc)) from exc
        except redis.RedisError as exc:
            self._metrics.record_storage_error(operation)
            self._log.error("storage_command_failed", op=operation, error=str(exc))
            msg = f"{operation} failed: {exc}"
            raise StorageError(msg) from exc

    def ping(self) -> bool:
        """Check that Redis answers."""
        with self._command("ping"):
            return bool(self._client.ping())

    def close(self) -> None:
        """Close the client's connection pool."""
        self._client.close()

    def next_id(self, counter: str) -> int:
        """INCR a counter."""
        with self._command("next_id"):
            return int(self._client.incr(counter))

    def set_add(self, key: str, member: str) -> bool:
        """SADD one member; True when it was newly added."""
        with self._command("set_add"):
            return self._client.sadd(key, member) == 1

    def set_contains(self, key: str, member: str) -> bool:
        """SISMEMBER."""
        with self._command("set_contains"):
            return bool(self._client.sismember(key, member))

    def hash_write(self, key: str, mapping: Mapping[str, str | int | float]) -> None:
        """HSET with a field mapping."""
        with self._command("hash_write"):
            self._client.hset(key, mapping=dict(mapping))

    def hash_read(self, key: str) -> dict[str, str]:
        """HGETALL."""
        with self._command("hash_read"):
            return dict(self._client.hgetall(key))

    def hash_get(self, key: str, field: str) -> str | None:
        """HGET."""
        with self._command("hash_get"):
            return self._client.hget(key, field)

    def hash_increment(self, key: str, field: str, delta: int) -> int:
        """HINCRBY."""
        with self._command("hash_increment"):
            return int(self._client.hincrby(key, field, delta))

    def ordered_insert(self, name: str, member: str, score: float) -> None:
        """ZADD one member."""
        with self._command("ordered_insert"):
            self._client.zadd(name, {member: score})

    def ordered_increment(self, name: str, member: str, delta: float) -> float:
        """ZINCRBY."""
        with self._command("ordered_increment"):
            return float(self._client.zincrby(name, delta, member))

    def ordered_score(self, name: str, member: str) -> float | None:
        """ZSCORE."""
        with self._command("ordered_score"):
            score = self._client.zscore(name, member)
        return None if score is None else float(score)

    def ordered_range_desc(self, name: str, start: int, stop: int) -> list[str]:
        """ZREVRANGE with an inclusive stop index."""
        with self._command("ordered_range_desc"):
            return list(self._client.zrevrange(name, start, stop))

    def intersect_ordered(
        self,
        dest: str,
        sources: Sequence[str],
        aggregate: Aggregate = "MAX",
        ttl: int | None = None,
    ) -> int:
        """ZINTERSTORE, followed by EXPIRE in the same transaction."""
        with self._command("intersect_ordered"):
            pipe = self._client.pipeline(transaction=True)
            pipe.zinterstore(dest, list(sources), aggregate=aggregate)
            if ttl is not None:
                pipe.expire(dest, ttl)
            results = pipe.execute()
        return int(results[0])

    def exists(self, key: str) -> bool:
        """EXISTS."""
        with self._command("exists"):
            return self._client.exists(key) > 0

    def expire(self, key: str, seconds: int) -> bool:
        """EXPIRE."""
        with self._command("expire"):
            return bool(self._client.expire(key, seconds))
