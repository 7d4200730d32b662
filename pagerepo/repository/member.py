from typing import List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.orm import Query, Session, joinedload

from pagerepo.cache import EntityCache
from pagerepo.conf import DEFAULT_PAGE_SIZE
from pagerepo.exceptions import NonUniqueResultError
from pagerepo.repository.base import PagedRepository
from pagerepo.repository.model import Member, MemberDto, Team
from pagerepo.repository.pagination import Page, Slice, Sort


class TeamRepository(PagedRepository[Team]):
    def __init__(self, session: Session, cache: Optional[EntityCache[Team]] = None):
        super().__init__(session, Team, cache)


class MemberRepository(PagedRepository[Member]):
    def __init__(self, session: Session, cache: Optional[EntityCache[Member]] = None):
        super().__init__(session, Member, cache)

    def find_by_username_and_age_greater_than(self, username: str, age: int) -> List[Member]:
        return self._data_query().filter(Member.username == username, Member.age > age).all()

    def find_by_username(self, username: str) -> List[Member]:
        return self._data_query().filter(Member.username == username).all()

    def find_user(self, username: str, age: int) -> List[Member]:
        return self._data_query().filter(Member.username == username, Member.age == age).all()

    def find_username_list(self) -> List[str]:
        return [username for username, in self.session.query(Member.username).all()]

    def find_member_dto(self) -> List[MemberDto]:
        """Projects every member that belongs to a team onto a :class:`MemberDto`.

        Members without a team are not part of the result (inner join).
        """
        rows = self.session.query(Member.id, Member.username, Team.name).join(Member.team).all()
        return [
            MemberDto(id=member_id, username=username, team_name=team_name) for member_id, username, team_name in rows
        ]

    def find_by_names(self, names: Sequence[str]) -> List[Member]:
        if not names:
            return []
        return self._data_query().filter(Member.username.in_(names)).all()

    def find_list_by_username(self, username: str) -> List[Member]:
        """Never returns None. No match yields an empty list."""
        return self.find_by_username(username)

    def find_member_by_username(self, username: str) -> Optional[Member]:
        """Retrieves the single member with the given username.

        :param username: Username to look up.
        :raises NonUniqueResultError: If more than one member has that username.
        :return: The member or None if there is no match.
        """
        members = self._data_query().filter(Member.username == username).limit(2).all()
        if len(members) > 1:
            raise NonUniqueResultError(f"More than one Member found with username: {username}")
        return members[0] if members else None

    def find_optional_by_username(self, username: str) -> Optional[Member]:
        return self.find_member_by_username(username)

    def find_by_age(
        self, age: int, page_index: int = 0, page_size: int = DEFAULT_PAGE_SIZE, sort: Optional[Sort] = None
    ) -> Page[Member]:
        """Retrieves a page of members of the given age.

        The content query LEFT JOINs the team while the count query counts usernames on the member table
        alone, so the total does not pay for the join.

        :param age: Age to filter by.
        :param page_index: Zero-based page index, defaults to 0.
        :param page_size: Number of members per page, defaults to ``PAGEREPO_DEFAULT_PAGE_SIZE``.
        :param sort: Ordering of the content, defaults to None.
        :return: A page of members with the total count.
        """
        data_query: Query = self.session.query(Member).outerjoin(Member.team)
        count_query: Query = self.session.query(func.count(Member.username))
        return self.fetch_page(
            [Member.age == age], page_index, page_size, sort, data_query=data_query, count_query=count_query
        )

    def find_slice_by_age(
        self, age: int, page_index: int = 0, page_size: int = DEFAULT_PAGE_SIZE, sort: Optional[Sort] = None
    ) -> Slice[Member]:
        return self.fetch_slice([Member.age == age], page_index, page_size, sort)

    def bulk_age_plus(self, age: int) -> int:
        """Increments the age of every member at least ``age`` years old.

        Members already loaded keep their old age until the caller clears the repository.

        :param age: Inclusive lower bound of the ages to increment.
        :return: Number of members updated.
        """
        return self.bulk_update([Member.age >= age], {Member.age: Member.age + 1})

    def find_member_fetch_join(self) -> List[Member]:
        """Retrieves all members with their team, if any, loaded in the same statement (LEFT OUTER JOIN)."""
        return self._data_query().options(joinedload(Member.team)).all()

    def find_all_with_team(self, sort: Optional[Sort] = None) -> List[Member]:
        """Like :meth:`find_all`, with the team relationship eagerly loaded."""
        return (
            self._data_query()
            .options(joinedload(Member.team))
            .order_by(*self._order_by(sort or Sort.unsorted()))
            .all()
        )
