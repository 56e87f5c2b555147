"""Redis read-through cache for progress reads.

Every progress write invalidates the entry, so a cached value is at most one
write behind only for the duration of a single in-flight request.
"""

from typing import TYPE_CHECKING

import orjson
import structlog
from redis.exceptions import RedisError

from learnermax.core.redis import progress_cache_key

from .models import ProgressRecord


if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = structlog.get_logger(__name__)


class ProgressCache:
    """Cache wrapper that degrades to a pass-through without Redis."""

    def __init__(self, redis: "Redis | None", ttl_seconds: int = 300):
        self.redis = redis
        self.ttl_seconds = ttl_seconds

    async def get(self, student_id: str, course_id: str) -> ProgressRecord | None:
        if not self.redis:
            return None
        try:
            cached = await self.redis.get(progress_cache_key(student_id, course_id))
        except RedisError as e:
            logger.warning("progress_cache_read_failed", error=str(e))
            return None
        if cached is None:
            return None
        return ProgressRecord.from_dict(orjson.loads(cached))

    async def set(self, record: ProgressRecord) -> None:
        if not self.redis:
            return
        try:
            await self.redis.setex(
                progress_cache_key(record.student_id, record.course_id),
                self.ttl_seconds,
                orjson.dumps(record.to_dict()),
            )
        except RedisError as e:
            logger.warning("progress_cache_write_failed", error=str(e))

    async def invalidate(self, student_id: str, course_id: str) -> None:
        if not self.redis:
            return
        try:
            await self.redis.delete(progress_cache_key(student_id, course_id))
        except RedisError as e:
            logger.warning("progress_cache_invalidate_failed", error=str(e))
