import datetime as dt

from agenda.domain.models import Appointment, ClinicHours
from agenda.scheduling.slots import generate_time_slots, slot_starts

DAY = dt.date(2024, 3, 15)


def _appointment(appointment_id: str, time: dt.time, duration: int = 60) -> Appointment:
    return Appointment(
        appointment_id=appointment_id,
        date=DAY,
        time=time,
        duration_minutes=duration,
        title="Cleaning",
        client_id="c1",
        client_name="Ana Souza",
        value=150.0,
    )


def _availability(slots: list) -> dict[dt.time, bool]:
    return {slot.time: slot.available for slot in slots}


class TestSlotStarts:
    def test_covers_opening_to_closing_inclusive(self) -> None:
        starts = list(slot_starts(DAY))

        assert starts[0] == dt.time(7, 0)
        assert starts[1] == dt.time(7, 15)
        assert starts[-1] == dt.time(22, 0)
        assert len(starts) == 61

    def test_uses_custom_grid(self) -> None:
        hours = ClinicHours(
            opening_time=dt.time(9, 0), closing_time=dt.time(10, 0), slot_minutes=30
        )

        assert list(slot_starts(DAY, hours)) == [dt.time(9, 0), dt.time(9, 30), dt.time(10, 0)]


class TestGenerateTimeSlots:
    def test_empty_day_is_fully_available(self) -> None:
        slots = list(generate_time_slots(DAY, []))

        assert len(slots) == 61
        assert all(slot.available for slot in slots)

    def test_reflects_a_booking(self) -> None:
        availability = _availability(
            list(generate_time_slots(DAY, [_appointment("a", dt.time(9, 0))]))
        )

        assert availability[dt.time(8, 0)] is True
        assert availability[dt.time(8, 15)] is False
        assert availability[dt.time(8, 45)] is False
        assert availability[dt.time(9, 0)] is False
        assert availability[dt.time(9, 45)] is False
        assert availability[dt.time(10, 0)] is True

    def test_probes_with_requested_duration(self) -> None:
        booked = [_appointment("a", dt.time(9, 0))]

        availability = _availability(list(generate_time_slots(DAY, booked, duration_minutes=15)))

        assert availability[dt.time(8, 30)] is True
        assert availability[dt.time(8, 45)] is True
        assert availability[dt.time(9, 0)] is False

    def test_long_probe_blocks_earlier_slots(self) -> None:
        booked = [_appointment("a", dt.time(12, 0))]

        availability = _availability(list(generate_time_slots(DAY, booked, duration_minutes=120)))

        assert availability[dt.time(9, 45)] is True
        assert availability[dt.time(10, 0)] is True
        assert availability[dt.time(10, 15)] is False

    def test_excluded_appointment_frees_its_slots(self) -> None:
        booked = [_appointment("a", dt.time(9, 0))]

        availability = _availability(list(generate_time_slots(DAY, booked, exclude_id="a")))

        assert availability[dt.time(9, 0)] is True

    def test_is_lazy_and_restartable(self) -> None:
        booked = [_appointment("a", dt.time(7, 0))]

        generator = generate_time_slots(DAY, booked)
        first = next(generator)

        assert first.time == dt.time(7, 0)
        assert first.available is False
        assert list(generate_time_slots(DAY, booked)) == list(generate_time_slots(DAY, booked))
