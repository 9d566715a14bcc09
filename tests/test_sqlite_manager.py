import tempfile
import unittest
from datetime import date
from decimal import Decimal
from pathlib import Path

from fx_bnr.db import DEFAULT_SQLITE_DB_PATH, default_sqlite_path
from fx_bnr.db.base_backend import PersistenceResult
from fx_bnr.db.sqlite_backend import SQLiteBackend
from fx_bnr.db.sqlite_manager import SQLiteManager
from fx_bnr.ingestion.models import Observation


class SQLiteManagerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.db_path = Path(self.temp_dir.name) / "test.db"
        self.manager = SQLiteManager(self.db_path)

    def tearDown(self) -> None:
        self.manager.close()
        self.temp_dir.cleanup()

    def test_append_keeps_every_row_in_insertion_order(self) -> None:
        first = [
            Observation("USD", Decimal("4.97"), date(2024, 1, 10)),
            Observation("EUR", Decimal("5.40"), date(2024, 1, 10)),
        ]
        second = [Observation("USD", Decimal("4.98"), date(2024, 1, 10))]

        result = self.manager.insert_observations(first)
        self.manager.insert_observations(second)

        self.assertIsInstance(result, PersistenceResult)
        self.assertEqual(result.inserted, 2)
        self.assertEqual(self.manager.fetch_observations(), first + second)

    def test_rates_keep_their_published_precision(self) -> None:
        self.manager.insert_observations([Observation("HUF", Decimal("1.3000"), date(2024, 1, 10))])

        stored = self.manager.fetch_observations()[0]

        self.assertEqual(str(stored.rate), "1.3000")

    def test_empty_batch_is_a_no_op(self) -> None:
        self.assertEqual(self.manager.insert_observations([]).total, 0)
        self.assertEqual(self.manager.fetch_observations(), [])

    def test_replace_currencies_discards_previous_configuration(self) -> None:
        self.manager.replace_currencies(["USD", "EUR"])
        self.manager.replace_currencies(["GBP"])

        self.assertEqual(self.manager.load_currencies(), {"GBP"})

    def test_configuration_survives_a_new_manager(self) -> None:
        self.manager.replace_currencies(["USD"])
        reopened = SQLiteManager(self.db_path)
        try:
            self.assertEqual(reopened.load_currencies(), {"USD"})
        finally:
            reopened.close()


class SQLiteBackendTests(unittest.TestCase):
    def test_backend_delegates_to_manager(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            backend = SQLiteBackend(db_path=Path(temp_dir) / "backend.db")
            try:
                self.assertIsNone(backend.ensure_schema())
                backend.insert_observations([Observation("USD", Decimal("4.97"), date(2024, 1, 10))])
                backend.replace_currencies(["USD"])

                self.assertEqual(len(backend.fetch_observations()), 1)
                self.assertEqual(backend.load_currencies(), {"USD"})
            finally:
                backend.close()


class DatabaseModuleTests(unittest.TestCase):
    def test_default_sqlite_path_is_absolute(self) -> None:
        self.assertTrue(default_sqlite_path().is_absolute())
        self.assertEqual(default_sqlite_path().name, DEFAULT_SQLITE_DB_PATH.name)


if __name__ == "__main__":
    unittest.main()
