"""Client modules for the database and the response cache."""
from .cache_client import CachedResponse, CacheMissError, ResponseCache
from .database_client import DatabaseClient, SubQuery

__all__ = [
    'CachedResponse',
    'CacheMissError',
    'DatabaseClient',
    'ResponseCache',
    'SubQuery',
]
