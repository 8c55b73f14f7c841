"""Per-IP, per-path sliding window limiter for the auth and upload endpoints."""
import math
import time
from collections import defaultdict, deque
from fastapi import Request
from hercycle.core.config import settings
from hercycle.utils.errors import TooManyRequestsError
from hercycle.utils.helpers import get_client_ip

# key -> deque[timestamps]
_buckets = defaultdict(deque)


def reset_rate_limits() -> None:
    _buckets.clear()


def _client_key(request: Request) -> str:
    return f"{get_client_ip(request)}:{request.url.path}"


async def rate_limit(request: Request):
    if not settings.RATE_LIMIT_ENABLED:
        return True

    now = time.time()
    window = settings.RATE_LIMIT_PERIOD_SECONDS
    bucket = _buckets[_client_key(request)]

    while bucket and bucket[0] <= now - window:
        bucket.popleft()

    if len(bucket) >= settings.RATE_LIMIT_REQUESTS:
        retry_after = math.ceil(bucket[0] + window - now)
        raise TooManyRequestsError(retry_after=max(retry_after, 1))

    bucket.append(now)
    return True
