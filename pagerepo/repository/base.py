import logging
from typing import Any, Dict, Generic, Hashable, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import ColumnElement, func, inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from pagerepo.cache import EntityCache
from pagerepo.exceptions import InvalidArgumentError, ObjectStorageError
from pagerepo.repository.pagination import Direction, Page, Slice, Sort

logger = logging.getLogger(__name__)

T = TypeVar("T")

Criteria = Optional[Sequence[ColumnElement[bool]]]


class PagedRepository(Generic[T]):
    """Generic repository returning pages or slices of one mapped entity type.

    The data query and the count query of a page are built independently. Subclasses whose data query
    joins other tables override :meth:`_data_query` (or pass ``data_query=`` per call) and keep the count
    query free of those joins, since the count only needs a scalar.

    The repository runs inside a unit of work owned by the caller and never commits.
    """

    def __init__(self, session: Session, entity: Type[T], cache: Optional[EntityCache[T]] = None):
        """Initializes the repository.

        :param session: The SQLAlchemy session of the current unit of work.
        :param entity: The mapped entity class.
        :param cache: Optional caller-owned entity cache consulted by :meth:`find_by_id`, defaults to None.
        """
        self.session = session
        self.entity = entity
        self.cache = cache

    def _data_query(self) -> Query:
        return self.session.query(self.entity)

    def _count_query(self) -> Query:
        return self.session.query(func.count()).select_from(self.entity)

    def fetch_page(
        self,
        criteria: Criteria,
        page_index: int,
        page_size: int,
        sort: Optional[Sort] = None,
        data_query: Optional[Query] = None,
        count_query: Optional[Query] = None,
    ) -> Page[T]:
        """Retrieves one page of entities matching the criteria together with the total count.

        :param criteria: Filter expressions, combined with AND. None or empty matches everything.
        :param page_index: Zero-based page index.
        :param page_size: Maximum number of entities on the page.
        :param sort: Ordering of the data query, defaults to None (data source order).
        :param data_query: Base query for the content, defaults to :meth:`_data_query`.
        :param count_query: Base scalar count query, defaults to :meth:`_count_query`.
        :raises InvalidArgumentError: If page_index < 0, page_size <= 0 or a sort property is unknown.
        :return: The requested page.
        """
        self._validate_paging(page_index, page_size)
        sort = sort or Sort.unsorted()
        order_by = self._order_by(sort)
        criteria = list(criteria or [])

        count_query = count_query if count_query is not None else self._count_query()
        data_query = data_query if data_query is not None else self._data_query()
        offset = page_index * page_size
        try:
            total_count = count_query.filter(*criteria).scalar() or 0
            if total_count == 0 or offset >= total_count:
                logger.debug(f"No content for page {page_index} of {self.entity.__name__}, total {total_count}.")
                return Page(content=[], number=page_index, size=page_size, total_elements=total_count, sort=sort)
            content = data_query.filter(*criteria).order_by(*order_by).offset(offset).limit(page_size).all()
        except SQLAlchemyError:
            logger.exception(f"Fetching page {page_index} of {self.entity.__name__} failed.")
            raise
        logger.debug(f"Fetched page {page_index} of {self.entity.__name__}: {len(content)}/{total_count}.")
        return Page(content=content, number=page_index, size=page_size, total_elements=total_count, sort=sort)

    def fetch_slice(
        self,
        criteria: Criteria,
        page_index: int,
        page_size: int,
        sort: Optional[Sort] = None,
        data_query: Optional[Query] = None,
    ) -> Slice[T]:
        """Retrieves one slice of entities matching the criteria without counting them.

        One row more than ``page_size`` is requested; its presence tells whether a next slice exists.

        :param criteria: Filter expressions, combined with AND. None or empty matches everything.
        :param page_index: Zero-based slice index.
        :param page_size: Maximum number of entities in the slice.
        :param sort: Ordering of the data query, defaults to None (data source order).
        :param data_query: Base query for the content, defaults to :meth:`_data_query`.
        :raises InvalidArgumentError: If page_index < 0, page_size <= 0 or a sort property is unknown.
        :return: The requested slice.
        """
        self._validate_paging(page_index, page_size)
        sort = sort or Sort.unsorted()
        order_by = self._order_by(sort)

        data_query = data_query if data_query is not None else self._data_query()
        try:
            rows = (
                data_query.filter(*(criteria or []))
                .order_by(*order_by)
                .offset(page_index * page_size)
                .limit(page_size + 1)
                .all()
            )
        except SQLAlchemyError:
            logger.exception(f"Fetching slice {page_index} of {self.entity.__name__} failed.")
            raise
        has_next = len(rows) > page_size
        logger.debug(f"Fetched slice {page_index} of {self.entity.__name__}: {len(rows)} rows, has_next={has_next}.")
        return Slice(content=rows[:page_size], number=page_index, size=page_size, has_next=has_next, sort=sort)

    def bulk_update(self, criteria: Criteria, values: Dict[Any, Any]) -> int:
        """Updates all rows matching the criteria with a single UPDATE statement.

        Neither the session identity map nor the entity cache is synchronised. Entities loaded before the
        update keep their old values until the caller invalidates them, e.g. with :meth:`clear`.

        :param criteria: Filter expressions, combined with AND. None or empty matches everything.
        :param values: Column to new value or SQL expression, e.g. ``{Member.age: Member.age + 1}``.
        :return: Number of rows modified. Zero is a valid outcome.
        """
        try:
            affected = (
                self.session.query(self.entity)
                .filter(*(criteria or []))
                .update(values, synchronize_session=False)
            )
        except SQLAlchemyError:
            logger.exception(f"Bulk update of {self.entity.__name__} failed.")
            raise
        logger.info(f"Bulk update modified {affected} {self.entity.__name__} rows.")
        return affected

    def save(self, entity: T) -> T:
        """Adds the entity to the unit of work and flushes it, assigning generated IDs.

        :param entity: The entity to store.
        :raises ObjectStorageError: If the entity cannot be flushed (e.g., due to constraint violations).
        :return: The stored entity.
        """
        try:
            self.session.add(entity)
            self.session.flush()
        except SQLAlchemyError as e:
            logger.exception("Failed to store object.")
            raise ObjectStorageError("Failed to store object in the database.", e)
        if self.cache is not None:
            self.cache.put(self._entity_id(entity), entity)
        return entity

    def save_all(self, entities: Sequence[T]) -> List[T]:
        return [self.save(entity) for entity in entities]

    def find_by_id(self, entity_id: Hashable) -> Optional[T]:
        """Retrieves an entity by its ID, consulting the entity cache first when one is configured.

        :param entity_id: ID of the entity.
        :return: The entity or None if it does not exist.
        """
        if self.cache is not None:
            cached = self.cache.get(entity_id)
            if cached is not None:
                return cached
        entity = self.session.get(self.entity, entity_id)
        if entity is not None and self.cache is not None:
            self.cache.put(entity_id, entity)
        return entity

    def find_all(self, sort: Optional[Sort] = None) -> List[T]:
        return self._data_query().order_by(*self._order_by(sort or Sort.unsorted())).all()

    def count(self) -> int:
        return self._count_query().scalar() or 0

    def delete(self, entity: T):
        """Deletes the entity and evicts it from the entity cache."""
        entity_id = self._entity_id(entity)
        self.session.delete(entity)
        self.session.flush()
        if self.cache is not None:
            self.cache.evict(entity_id)

    def flush(self):
        self.session.flush()

    def clear(self):
        """Detaches every entity from the session and empties the entity cache.

        Pending changes that were not flushed are discarded. Call :meth:`flush` first to keep them.
        """
        self.session.expunge_all()
        if self.cache is not None:
            self.cache.clear()

    def _order_by(self, sort: Sort) -> List[ColumnElement]:
        mapper = inspect(self.entity)
        clauses = []
        for order in sort:
            if order.property not in mapper.column_attrs:
                raise InvalidArgumentError(f"No property {order.property!r} found for type {self.entity.__name__}")
            column = getattr(self.entity, order.property)
            clauses.append(column.desc() if order.direction == Direction.DESC else column.asc())
        return clauses

    def _entity_id(self, entity: T) -> Hashable:
        identity = inspect(entity).identity
        if identity is None:
            raise InvalidArgumentError(f"{self.entity.__name__} has no identity yet, save it first")
        return identity[0] if len(identity) == 1 else identity

    @staticmethod
    def _validate_paging(page_index: int, page_size: int):
        if page_index < 0:
            raise InvalidArgumentError(f"Page index must not be less than zero, got {page_index}")
        if page_size <= 0:
            raise InvalidArgumentError(f"Page size must be greater than zero, got {page_size}")
