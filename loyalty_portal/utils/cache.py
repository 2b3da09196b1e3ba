"""
Cache utilities for the loyalty portal.

Redis-backed when REDIS_URL is reachable, in-process SimpleCache otherwise.
Exchange rate tables are the main tenant: one entry per base currency.

Usage:
    from loyalty_portal.utils.cache import cache, cache_key

    key = cache_key('exchange_rates', base='GBP')
    cache.set(key, rates, timeout=2400)
    rates = cache.get(key)

Environment Variables:
    REDIS_URL: Redis connection URL (e.g., redis://localhost:6379/0)
"""
import os
import logging
from flask_caching import Cache

logger = logging.getLogger(__name__)

cache = Cache()

DEFAULT_CACHE_TIMEOUT = 300


def init_cache(app):
    """
    Initialize Flask-Caching with Redis or fall back to simple cache.

    Args:
        app: Flask application instance

    Returns:
        bool: True if Redis connected, False if using fallback
    """
    redis_url = os.getenv('REDIS_URL')

    if redis_url and not app.config.get('TESTING'):
        try:
            import redis
            r = redis.from_url(redis_url, socket_connect_timeout=2)
            r.ping()

            app.config['CACHE_TYPE'] = 'RedisCache'
            app.config['CACHE_REDIS_URL'] = redis_url
            app.config['CACHE_DEFAULT_TIMEOUT'] = DEFAULT_CACHE_TIMEOUT
            app.config['CACHE_KEY_PREFIX'] = 'loyalty_portal:'

            cache.init_app(app)
            logger.info('Redis cache connected: %s', redis_url.split('@')[-1])
            return True

        except Exception as e:
            logger.warning('Redis unavailable (%s), using simple cache', str(e))

    app.config['CACHE_TYPE'] = 'SimpleCache'
    app.config['CACHE_DEFAULT_TIMEOUT'] = DEFAULT_CACHE_TIMEOUT

    cache.init_app(app)
    logger.info('Using simple in-memory cache (no Redis)')
    return False


def cache_key(*args, **kwargs):
    """
    Generate a cache key from arguments.

        cache_key('exchange_rates', base='GBP') -> 'exchange_rates:base=GBP'
    """
    parts = list(args)
    for k, v in sorted(kwargs.items()):
        parts.append(f'{k}={v}')
    return ':'.join(str(p) for p in parts)
