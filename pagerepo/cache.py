import logging
from threading import Lock
from typing import Generic, Hashable, Iterable, Optional, TypeVar

from cachetools import LRUCache

from pagerepo.conf import ENTITY_CACHE_SIZE

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EntityCache(Generic[T]):
    """Caller-owned cache of previously fetched entities, keyed by entity ID.

    Nothing in this package invalidates the cache on its own. After a bulk write the caller is
    expected to :meth:`evict` the affected IDs or :meth:`clear` the whole cache before reading again.
    """

    def __init__(self, maxsize: int = ENTITY_CACHE_SIZE):
        """Initialize an empty cache.

        :param maxsize: Maximum number of entities kept before the least recently used are dropped,
            defaults to ``PAGEREPO_ENTITY_CACHE_SIZE``.
        """
        self._cache: LRUCache = LRUCache(maxsize=maxsize)
        self._lock = Lock()

    def get(self, entity_id: Hashable) -> Optional[T]:
        """Retrieve a cached entity.

        :param entity_id: ID of the entity.
        :return: The cached entity or `None` if not present.
        """
        with self._lock:
            return self._cache.get(entity_id)

    def put(self, entity_id: Hashable, entity: T):
        """Add or replace an entity in the cache.

        :param entity_id: ID of the entity.
        :param entity: The entity to cache.
        """
        with self._lock:
            self._cache[entity_id] = entity

    def evict(self, entity_id: Hashable) -> bool:
        """Remove a single entity from the cache.

        :param entity_id: ID of the entity.
        :return: True if the entity was cached.
        """
        with self._lock:
            return self._cache.pop(entity_id, None) is not None

    def evict_all(self, entity_ids: Iterable[Hashable]) -> int:
        """Remove several entities from the cache.

        :param entity_ids: IDs of the entities.
        :return: Number of entities that were actually evicted.
        """
        with self._lock:
            evicted = sum(1 for entity_id in entity_ids if self._cache.pop(entity_id, None) is not None)
        logger.debug(f"Evicted {evicted} entities from cache.")
        return evicted

    def clear(self):
        with self._lock:
            self._cache.clear()

    def __contains__(self, entity_id: Hashable) -> bool:
        with self._lock:
            return entity_id in self._cache

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)
