from __future__ import annotations

import pytest

from app.config import InspectionIngestionSettings
from app.services.inspection_ingestion_service import InspectionIngestionService
from tests.factories import InMemoryInspectionStore, fixed_clock


@pytest.fixture()
def store() -> InMemoryInspectionStore:
    return InMemoryInspectionStore()


@pytest.fixture()
def settings() -> InspectionIngestionSettings:
    return InspectionIngestionSettings(batch_size=2, log_validation_errors=False)


@pytest.fixture()
def service(
    store: InMemoryInspectionStore,
    settings: InspectionIngestionSettings,
) -> InspectionIngestionService:
    return InspectionIngestionService(store=store, settings=settings, clock=fixed_clock)
