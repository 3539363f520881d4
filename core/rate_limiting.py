"""
Redis-based rate limiting for API endpoints.
Implements a fixed window counter keyed by view and client IP.
"""
import logging

import redis
from django.conf import settings
from django.http import JsonResponse
from rest_framework import status

logger = logging.getLogger(__name__)

_redis_client = None
_redis_checked = False


def get_redis_client():
    """
    Return a connected Redis client, or None if Redis is unreachable.

    The connection is attempted once per process.
    """
    global _redis_client, _redis_checked
    if _redis_checked:
        return _redis_client

    _redis_checked = True
    try:
        client = redis.Redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=5
        )
        client.ping()
        _redis_client = client
    except (redis.ConnectionError, redis.TimeoutError) as e:
        logger.warning(f"Redis connection failed: {e}. Rate limiting will be disabled.")
        _redis_client = None
    return _redis_client


def get_client_ip(request):
    """Extract client IP address from request."""
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR', 'unknown')
    return ip


class RateLimitMixin:
    """
    Mixin class for class-based views to add rate limiting.

    Usage:
        class MyView(RateLimitMixin, APIView):
            rate_limit_max_requests = 20
            rate_limit_window_seconds = 60
    """
    rate_limit_max_requests = 20
    rate_limit_window_seconds = 60

    def dispatch(self, request, *args, **kwargs):
        if not getattr(settings, 'RATE_LIMIT_ENABLED', True):
            return super().dispatch(request, *args, **kwargs)

        redis_client = get_redis_client()
        if redis_client is None:
            return super().dispatch(request, *args, **kwargs)

        try:
            client_ip = get_client_ip(request)
            key = f"rate_limit:{self.__class__.__name__}:{client_ip}"

            current_count = redis_client.incr(key)

            if current_count == 1:
                redis_client.expire(key, self.rate_limit_window_seconds)

            ttl = redis_client.ttl(key)
        except redis.RedisError as e:
            logger.error(f"Redis error in rate limiting: {e}")
            return super().dispatch(request, *args, **kwargs)

        if current_count > self.rate_limit_max_requests:
            logger.warning(f"Rate limit exceeded for {client_ip} on {self.__class__.__name__}")
            response = JsonResponse(
                {
                    'error': 'Rate limit exceeded',
                    'detail': f'Maximum {self.rate_limit_max_requests} requests per {self.rate_limit_window_seconds} seconds allowed.',
                    'retry_after': ttl
                },
                status=status.HTTP_429_TOO_MANY_REQUESTS,
                headers={
                    'X-RateLimit-Limit': str(self.rate_limit_max_requests),
                    'X-RateLimit-Remaining': '0',
                    'X-RateLimit-Reset': str(ttl),
                    'Retry-After': str(ttl)
                }
            )
            return response

        response = super().dispatch(request, *args, **kwargs)
        response['X-RateLimit-Limit'] = str(self.rate_limit_max_requests)
        response['X-RateLimit-Remaining'] = str(max(0, self.rate_limit_max_requests - current_count))
        response['X-RateLimit-Reset'] = str(ttl)

        return response
