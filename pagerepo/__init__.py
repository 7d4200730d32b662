from ._version import __version__
from .cache import EntityCache
from .exceptions import DataSourceError, InvalidArgumentError, NonUniqueResultError, ObjectStorageError

# Importing submodules to expose their attributes if needed
from .repository import (
    Direction,
    Member,
    MemberDto,
    MemberRepository,
    Order,
    Page,
    PagedRepository,
    Slice,
    Sort,
    Team,
    TeamRepository,
    base,
    member,
    model,
    pagination,
    session,
)

__all__ = [
    "__version__",
    "base",
    "member",
    "model",
    "pagination",
    "session",
    "EntityCache",
    "DataSourceError",
    "InvalidArgumentError",
    "NonUniqueResultError",
    "ObjectStorageError",
    "Direction",
    "Member",
    "MemberDto",
    "MemberRepository",
    "Order",
    "Page",
    "PagedRepository",
    "Slice",
    "Sort",
    "Team",
    "TeamRepository",
]
