import math
from enum import Enum
from typing import Callable, Generic, Iterator, List, Sequence, Tuple, TypeVar

T = TypeVar("T")
R = TypeVar("R")


class Direction(str, Enum):
    ASC = "asc"
    DESC = "desc"


class Order:
    """A single sort instruction: an entity property and the direction to order it by."""

    def __init__(self, property: str, direction: Direction = Direction.ASC):
        self.property = property
        self.direction = Direction(direction)

    def __eq__(self, other):
        return isinstance(other, Order) and (self.property, self.direction) == (other.property, other.direction)

    def __repr__(self):
        return f"Order({self.property!r}, {self.direction.value})"


class Sort:
    """
    An ordered sequence of sort instructions. Applied to data queries only, never to count queries.

    Attributes:
        orders (Tuple[Order, ...]): The sort instructions, most significant first.
    """

    def __init__(self, orders: Sequence[Order] = ()):
        self.orders: Tuple[Order, ...] = tuple(orders)

    @classmethod
    def by(cls, direction: Direction, *properties: str) -> "Sort":
        """Create a sort ordering all given properties in the same direction."""
        return cls([Order(p, direction) for p in properties])

    @classmethod
    def unsorted(cls) -> "Sort":
        return cls()

    def and_(self, other: "Sort") -> "Sort":
        """Combine with another sort; the other sort's orders break ties left by this one."""
        return Sort(self.orders + other.orders)

    def is_sorted(self) -> bool:
        return bool(self.orders)

    def __iter__(self) -> Iterator[Order]:
        return iter(self.orders)

    def __eq__(self, other):
        return isinstance(other, Sort) and self.orders == other.orders

    def __repr__(self):
        return f"Sort({list(self.orders)})"


class Slice(Generic[T]):
    """
    A chunk of results that only knows whether another chunk follows, not how many results exist in total.

    Attributes:
        content (List[T]): The retrieved objects.
        number (int): The zero-based index of this slice.
        size (int): The requested number of items per slice.
        sort (Sort): The sort applied to the data query.
    """

    def __init__(self, content: List[T], number: int, size: int, has_next: bool, sort: Sort = Sort()):
        self.content = content
        self.number = number
        self.size = size
        self.sort = sort
        self._has_next = has_next

    @property
    def offset(self) -> int:
        return self.number * self.size

    def has_next(self) -> bool:
        """Check if there is a next slice of results."""
        return self._has_next

    def has_previous(self) -> bool:
        """Check if there is a previous slice of results."""
        return self.number > 0

    def is_first(self) -> bool:
        return not self.has_previous()

    def is_last(self) -> bool:
        return not self.has_next()

    def map(self, converter: Callable[[T], R]) -> "Slice[R]":
        """Convert the content, keeping the paging information.

        :param converter: Function applied to every item, e.g. an entity to DTO conversion.
        :return: A new slice holding the converted items.
        """
        return Slice([converter(item) for item in self.content], self.number, self.size, self._has_next, self.sort)

    def __iter__(self) -> Iterator[T]:
        return iter(self.content)

    def __len__(self) -> int:
        return len(self.content)

    def __repr__(self):
        return (
            f"Slice(number={self.number}, size={self.size}, "
            f"has_next={self._has_next}, items_count={len(self.content)})"
        )


class Page(Slice[T]):
    """
    A slice that additionally carries the total number of matching objects.

    Attributes:
        total_elements (int): The total number of objects matching the query filter.
        total_pages (int): ``ceil(total_elements / size)``.
    """

    def __init__(self, content: List[T], number: int, size: int, total_elements: int, sort: Sort = Sort()):
        self.total_elements = total_elements
        self.total_pages = math.ceil(total_elements / size) if size else 0
        super().__init__(content, number, size, number + 1 < self.total_pages, sort)

    def map(self, converter: Callable[[T], R]) -> "Page[R]":
        """Convert the content, keeping the paging information.

        :param converter: Function applied to every item, e.g. an entity to DTO conversion.
        :return: A new page holding the converted items.
        """
        return Page([converter(item) for item in self.content], self.number, self.size, self.total_elements, self.sort)

    def __repr__(self):
        return (
            f"Page(number={self.number}, size={self.size}, total_elements={self.total_elements}, "
            f"total_pages={self.total_pages}, items_count={len(self.content)})"
        )
