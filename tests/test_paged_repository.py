import math

from sqlalchemy import text

from pagerepo.exceptions import DataSourceError, InvalidArgumentError, ObjectStorageError
from pagerepo.repository import Direction, Member, PagedRepository, Sort
from tests.base_repository_test_setup import BaseRepositoryTestSetup


class TestPagedRepository(BaseRepositoryTestSetup):

    def setUp(self):
        super().setUp()
        self.repository = PagedRepository(self.session, Member)
        self.repository.save_all([Member(f"member{i}", 10) for i in range(1, 7)])
        self.repository.save(Member("other", 30))
        self.statements.clear()

    def test_fetch_page(self):
        page = self.repository.fetch_page([Member.age == 10], 0, 3, Sort.by(Direction.DESC, "username"))

        self.assertEqual(len(page.content), 3)
        self.assertEqual([m.username for m in page], ["member6", "member5", "member4"])
        self.assertEqual(page.total_elements, 6)
        self.assertEqual(page.number, 0)
        self.assertEqual(page.total_pages, 2)
        self.assertTrue(page.is_first())
        self.assertTrue(page.has_next())

    def test_fetch_last_page(self):
        page = self.repository.fetch_page([Member.age == 10], 1, 3, Sort.by(Direction.DESC, "username"))

        self.assertEqual([m.username for m in page], ["member3", "member2", "member1"])
        self.assertFalse(page.has_next())
        self.assertTrue(page.is_last())

    def test_page_past_the_end_is_empty(self):
        page = self.repository.fetch_page([Member.age == 10], 5, 3)

        self.assertEqual(page.content, [])
        self.assertEqual(page.total_elements, 6)
        self.assertFalse(page.has_next())
        self.assertEqual(len(self.selects()), 1)
        self.assertEqual(len(self.count_statements()), 1)

    def test_page_sizes(self):
        for page_size in range(1, 8):
            expected_pages = math.ceil(6 / page_size)
            for page_index in range(expected_pages + 1):
                page = self.repository.fetch_page([Member.age == 10], page_index, page_size)
                self.assertLessEqual(len(page.content), page_size)
                self.assertEqual(page.total_pages, expected_pages)
                self.assertEqual(page.has_next(), page_index + 1 < expected_pages)

    def test_pages_cover_all_rows_once(self):
        sort = Sort.by(Direction.ASC, "username")
        seen = []
        for page_index in range(3):
            seen.extend(m.username for m in self.repository.fetch_page([Member.age == 10], page_index, 2, sort))
        self.assertEqual(seen, [f"member{i}" for i in range(1, 7)])

    def test_no_matches(self):
        page = self.repository.fetch_page([Member.age == 99], 0, 3)

        self.assertEqual(page.content, [])
        self.assertEqual(page.total_elements, 0)
        self.assertEqual(page.total_pages, 0)
        self.assertTrue(page.is_first())
        self.assertFalse(page.has_next())
        self.assertEqual(len(self.selects()), 1)
        self.assertEqual(len(self.count_statements()), 1)

    def test_without_criteria(self):
        page = self.repository.fetch_page(None, 0, 5)
        self.assertEqual(page.total_elements, 7)
        self.assertEqual(len(page), 5)

    def test_fetch_page_issues_one_count_query(self):
        self.repository.fetch_page([Member.age == 10], 0, 3, Sort.by(Direction.DESC, "username"))

        self.assertEqual(len(self.count_statements()), 1)
        self.assertNotIn("ORDER BY", self.count_statements()[0])
        self.assertEqual(len(self.selects()), 2)

    def test_invalid_arguments_are_rejected_before_querying(self):
        with self.assertRaises(InvalidArgumentError):
            self.repository.fetch_page([Member.age == 10], -1, 3)
        with self.assertRaises(InvalidArgumentError):
            self.repository.fetch_page([Member.age == 10], 0, 0)
        with self.assertRaises(InvalidArgumentError):
            self.repository.fetch_slice([Member.age == 10], 0, -2)
        with self.assertRaises(InvalidArgumentError):
            self.repository.fetch_page([Member.age == 10], 0, 3, Sort.by(Direction.ASC, "nickname"))
        self.assertEqual(self.statements, [])

    def test_invalid_argument_is_a_value_error(self):
        with self.assertRaises(ValueError):
            self.repository.fetch_slice(None, -1, 3)

    def test_fetch_slice(self):
        sliced = self.repository.fetch_slice([Member.age == 10], 0, 3, Sort.by(Direction.DESC, "username"))

        self.assertEqual(len(sliced.content), 3)
        self.assertEqual(sliced.number, 0)
        self.assertTrue(sliced.is_first())
        self.assertTrue(sliced.has_next())
        self.assertEqual(self.count_statements(), [])
        self.assertEqual(len(self.selects()), 1)

    def test_fetch_slice_exactly_at_the_end(self):
        sliced = self.repository.fetch_slice([Member.age == 10], 1, 3)

        self.assertEqual(len(sliced.content), 3)
        self.assertFalse(sliced.has_next())

    def test_fetch_slice_has_next(self):
        for page_size in range(1, 8):
            for page_index in range(4):
                remaining = 6 - page_index * page_size
                sliced = self.repository.fetch_slice([Member.age == 10], page_index, page_size)
                self.assertEqual(len(sliced.content), max(0, min(page_size, remaining)))
                self.assertEqual(sliced.has_next(), remaining > page_size)
        self.assertEqual(self.count_statements(), [])

    def test_bulk_update(self):
        affected = self.repository.bulk_update([Member.username.in_(["member1", "member2"])], {Member.age: 11})
        self.assertEqual(affected, 2)

        self.repository.clear()
        self.assertEqual(self.repository.fetch_page([Member.age == 11], 0, 10).total_elements, 2)

    def test_bulk_update_without_matches(self):
        self.assertEqual(self.repository.bulk_update([Member.age > 100], {Member.age: Member.age + 1}), 0)

    def test_count_and_find_all(self):
        self.assertEqual(self.repository.count(), 7)
        members = self.repository.find_all(Sort.by(Direction.DESC, "age"))
        self.assertEqual(members[0].username, "other")

    def test_data_source_errors_propagate(self):
        self.session.execute(text("DROP TABLE member"))

        with self.assertLogs("pagerepo.repository.base", "ERROR") as logs:
            with self.assertRaises(DataSourceError):
                self.repository.fetch_page(None, 0, 3)
        self.assertIn("Fetching page 0 of Member failed.", logs.output[0])

        with self.assertLogs("pagerepo.repository.base", "ERROR") as logs:
            with self.assertRaises(DataSourceError):
                self.repository.fetch_slice(None, 0, 3)
        self.assertIn("Fetching slice 0 of Member failed.", logs.output[0])

    def test_failed_save(self):
        with self.assertRaises(ObjectStorageError) as context:
            self.repository.save(Member(None, 10))
        self.assertIsInstance(context.exception.original_exception, DataSourceError)
        self.session.rollback()
