import unittest
from typing import List

from sqlalchemy import event

from pagerepo.repository import MemberRepository, TeamRepository
from pagerepo.repository.session import create_session_factory, create_sqlite_engine


class BaseRepositoryTestSetup(unittest.TestCase):
    """Fresh in-memory database per test, with every emitted SQL statement recorded."""

    def setUp(self):
        self.engine = create_sqlite_engine("memory")
        self.statements: List[str] = []
        event.listen(self.engine, "before_cursor_execute", self._record_statement)
        self.session = create_session_factory(self.engine)()
        self.member_repository = MemberRepository(self.session)
        self.team_repository = TeamRepository(self.session)

    def tearDown(self):
        self.session.close()
        self.engine.dispose()

    def _record_statement(self, conn, cursor, statement, parameters, context, executemany):
        self.statements.append(statement)

    def selects(self) -> List[str]:
        return [s for s in self.statements if s.lstrip().upper().startswith("SELECT")]

    def count_statements(self) -> List[str]:
        return [s for s in self.selects() if "count(" in s.lower()]
