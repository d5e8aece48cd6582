import os

import redis
from django.conf import settings

_r = redis.Redis.from_url(settings.RATELIMIT_REDIS_URL)


class RateLimitExceeded(Exception): ...


def _bucket(key: str, window_sec: int, max_count: int):
    p = _r.pipeline()
    p.incr(key, 1)
    p.expire(key, window_sec)
    count, _ = p.execute()
    if int(count) > max_count:
        raise RateLimitExceeded(f"Rate limit exceeded for {key}")


def check_global_per_min():
    cap = int(os.getenv("INVITE_RATE_GLOBAL_PER_MIN", "60"))
    _bucket("rl:invite:global:1m", 60, cap)


def check_per_address_daily(email: str):
    cap = int(os.getenv("INVITE_RATE_PER_ADDRESS_PER_DAY", "3"))
    _bucket(f"rl:invite:{email.lower()}:1d", 24 * 3600, cap)
