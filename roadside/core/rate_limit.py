import logging
from fastapi import HTTPException
from roadside.core.redis import get_redis
from roadside.core.config import settings
from roadside.core.metrics import rate_limit_exceeded

logger = logging.getLogger(__name__)

async def check_rate_limit(user_id: str):
    redis = get_redis()
    if redis is None:
        logger.debug("Redis unavailable, skipping rate limit check")
        return
    key = f"rl:{user_id}"
    current = await redis.get(key)
    if current is None:
        await redis.set(key, "1", ex=settings.RATE_LIMIT_WINDOW)
        return
    count = int(current)
    if count >= settings.RATE_LIMIT:
        rate_limit_exceeded.labels(user_id=user_id).inc()
        raise HTTPException(status_code=429, detail="Rate limit exceeded")
    await redis.incr(key)
