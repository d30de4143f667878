import pytest

from agenda.appointments.adapters.fake import FakeAppointmentStore
from agenda.appointments.service import AppointmentService


@pytest.fixture
def fake_store() -> FakeAppointmentStore:
    return FakeAppointmentStore()


@pytest.fixture
def service(fake_store: FakeAppointmentStore) -> AppointmentService:
    return AppointmentService(store=fake_store)
