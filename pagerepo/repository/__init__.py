from .base import PagedRepository
from .member import MemberRepository, TeamRepository
from .model import Member, MemberDto, Team
from .pagination import Direction, Order, Page, Slice, Sort

__all__ = [
    "PagedRepository",
    "MemberRepository",
    "TeamRepository",
    "Member",
    "MemberDto",
    "Team",
    "Direction",
    "Order",
    "Page",
    "Slice",
    "Sort",
]
