from __future__ import annotations

import unittest

from sqlalchemy import DateTime, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID

from db.base import NAMING_CONVENTION, Base
from db.models import Inspection, ProcessedFile
from db.models.inspection import NATURAL_KEY_CONSTRAINT


class TestInspectionTables(unittest.TestCase):
    def test_both_tables_share_the_declarative_metadata(self) -> None:
        self.assertIn("inspections", Base.metadata.tables)
        self.assertIn("processed_files", Base.metadata.tables)
        self.assertEqual(Base.metadata.naming_convention["uq"], NAMING_CONVENTION["uq"])

    def test_primary_keys_are_application_generated_uuids(self) -> None:
        for model in (Inspection, ProcessedFile):
            column = model.__table__.c.id
            self.assertTrue(column.primary_key, model.__name__)
            self.assertIsInstance(column.type, UUID)
            self.assertIsNotNone(column.default)

    def test_timestamps_are_timezone_aware(self) -> None:
        for column in (
            Inspection.__table__.c.created_at,
            Inspection.__table__.c.processed_at,
            ProcessedFile.__table__.c.created_at,
        ):
            self.assertIsInstance(column.type, DateTime)
            self.assertTrue(column.type.timezone, column.name)
        self.assertIsNotNone(Inspection.__table__.c.created_at.server_default)

    def test_natural_key_excludes_shift(self) -> None:
        constraints = {
            constraint.name: [column.name for column in constraint.columns]
            for constraint in Inspection.__table__.constraints
            if isinstance(constraint, UniqueConstraint)
        }

        self.assertEqual(
            constraints[NATURAL_KEY_CONSTRAINT],
            ["inspection_date", "driver_name", "vehicle_plate"],
        )

    def test_completed_hash_index_skips_reprocessed_files(self) -> None:
        indexes = {index.name: index for index in ProcessedFile.__table__.indexes}
        completed_hash = indexes["uq_processed_files_completed_hash"]

        self.assertTrue(completed_hash.unique)
        where = str(completed_hash.dialect_options["postgresql"]["where"])
        self.assertIn("NOT is_reprocess", where)


if __name__ == "__main__":
    unittest.main()
