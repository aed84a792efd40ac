from datetime import date, datetime, time, timedelta

import pytest

from app.core.exceptions import NotFoundError, ValidationError
from app.core.security import AuthorizationError
from app.models.appointment_slot import AppointmentSlot, SlotStatus
from app.models.availability import ProviderAvailability
from app.repositories.availability_repository import AvailabilityRepository
from app.services.availability_service import AvailabilityService
from app.services.recurrence import active_cohort
from tests.conftest import FUTURE_DATE, availability_request


def slots_of(db, window_id):
    return AvailabilityRepository.find_slots_by_window_id(db, window_id)


def test_create_persists_window_and_slots(db_session, provider):
    window = AvailabilityService(db_session).create_availability(
        provider.id, availability_request(date="2030-01-15", start_time="09:00", end_time="10:00",
                                          break_duration=0)
    )

    assert window.id is not None
    assert window.provider_id == provider.id
    slots = slots_of(db_session, window.id)
    assert len(slots) == 2
    assert all(slot.status == SlotStatus.AVAILABLE for slot in slots)
    assert all(slot.provider_id == provider.id for slot in slots)
    # 09:00 New York in January is 14:00 UTC
    assert slots[0].slot_start_time.replace(tzinfo=None) == datetime(2030, 1, 15, 14, 0)
    assert slots[1].slot_end_time.replace(tzinfo=None) == datetime(2030, 1, 15, 15, 0)


def test_create_with_break_uses_step(db_session, provider):
    window = AvailabilityService(db_session).create_availability(
        provider.id, availability_request(start_time="09:00", end_time="17:00",
                                          slot_duration=30, break_duration=15)
    )

    slots = slots_of(db_session, window.id)
    assert len(slots) == 11
    for slot in slots:
        assert slot.slot_end_time - slot.slot_start_time == timedelta(minutes=30)


@pytest.mark.parametrize("start,end", [("10:00", "10:00"), ("11:00", "10:00")])
def test_create_rejects_bad_time_order(db_session, provider, start, end):
    with pytest.raises(ValidationError) as exc:
        AvailabilityService(db_session).create_availability(
            provider.id, availability_request(start_time=start, end_time=end)
        )

    assert exc.value.status_code == 400
    assert exc.value.detail == "End time must be after start time"
    assert db_session.query(ProviderAvailability).count() == 0


def test_create_rejects_unknown_provider(db_session):
    with pytest.raises(NotFoundError) as exc:
        AvailabilityService(db_session).create_availability(9999, availability_request())

    assert exc.value.detail == "Provider not found"


def test_create_rejects_overlap_and_writes_nothing(db_session, provider):
    service = AvailabilityService(db_session)
    service.create_availability(provider.id, availability_request(start_time="09:00", end_time="12:00"))

    with pytest.raises(ValidationError) as exc:
        service.create_availability(provider.id, availability_request(start_time="11:00", end_time="13:00"))

    assert exc.value.detail == "Time slot overlaps with existing availability"
    assert db_session.query(ProviderAvailability).count() == 1


def test_adjacent_windows_are_allowed(db_session, provider):
    service = AvailabilityService(db_session)
    service.create_availability(provider.id, availability_request(start_time="09:00", end_time="11:00"))
    service.create_availability(provider.id, availability_request(start_time="11:00", end_time="13:00"))

    assert db_session.query(ProviderAvailability).count() == 2


def test_update_regenerates_slots(db_session, provider):
    service = AvailabilityService(db_session)
    window = service.create_availability(
        provider.id, availability_request(start_time="09:00", end_time="10:00", break_duration=0)
    )
    old_ids = {slot.id for slot in slots_of(db_session, window.id)}

    updated = service.update_availability(
        window.id,
        availability_request(start_time="14:00", end_time="16:00", slot_duration=60,
                             break_duration=0, pricing=None),
        provider_id=provider.id,
    )

    assert updated.start_time == time(14, 0)
    assert updated.slot_duration == 60
    # Pricing is kept when the update carries none
    assert updated.base_fee is not None
    slots = slots_of(db_session, window.id)
    assert len(slots) == 2
    assert all(s.slot_end_time - s.slot_start_time == timedelta(minutes=60) for s in slots)
    assert db_session.query(AppointmentSlot).count() == 2
    assert len(old_ids) == 2


def test_update_keeps_own_range_without_self_conflict(db_session, provider):
    service = AvailabilityService(db_session)
    window = service.create_availability(provider.id, availability_request(start_time="09:00", end_time="12:00"))

    updated = service.update_availability(
        window.id, availability_request(start_time="10:00", end_time="12:00")
    )

    assert updated.start_time == time(10, 0)


def test_overlapping_update_leaves_window_and_slots_untouched(db_session, provider):
    service = AvailabilityService(db_session)
    service.create_availability(provider.id, availability_request(start_time="09:00", end_time="12:00"))
    second = service.create_availability(
        provider.id, availability_request(start_time="13:00", end_time="15:00")
    )
    second_id = second.id
    slot_ids = [slot.id for slot in slots_of(db_session, second_id)]

    with pytest.raises(ValidationError):
        service.update_availability(
            second_id, availability_request(start_time="11:00", end_time="14:00")
        )

    reloaded = AvailabilityRepository.get_by_id(db_session, second_id)
    assert reloaded.start_time == time(13, 0)
    assert reloaded.end_time == time(15, 0)
    assert [slot.id for slot in slots_of(db_session, second_id)] == slot_ids


def test_update_missing_window(db_session, provider):
    with pytest.raises(NotFoundError) as exc:
        AvailabilityService(db_session).update_availability(12345, availability_request())

    assert exc.value.detail == "Availability not found"


def test_update_of_another_providers_window_is_forbidden(db_session, make_provider):
    owner = make_provider(1)
    other = make_provider(2)
    service = AvailabilityService(db_session)
    window = service.create_availability(owner.id, availability_request())

    with pytest.raises(AuthorizationError):
        service.update_availability(window.id, availability_request(), provider_id=other.id)


def test_delete_single_window_removes_only_its_slots(db_session, provider):
    service = AvailabilityService(db_session)
    keep = service.create_availability(provider.id, availability_request(start_time="13:00", end_time="15:00"))
    drop = service.create_availability(provider.id, availability_request(start_time="09:00", end_time="11:00"))
    keep_id, drop_id = keep.id, drop.id
    kept_slots = len(slots_of(db_session, keep_id))

    deleted = service.delete_availability(drop_id, reason="Vacation")

    assert deleted == 1
    assert AvailabilityRepository.get_by_id(db_session, drop_id) is None
    assert slots_of(db_session, drop_id) == []
    assert len(slots_of(db_session, keep_id)) == kept_slots


def test_delete_recurring_removes_active_cohort(db_session, provider):
    service = AvailabilityService(db_session)
    expired = service.create_availability(provider.id, availability_request(
        date="2030-01-01", is_recurring=True, recurrence_pattern="WEEKLY",
        recurrence_end_date="2030-01-05",
    ))
    target = service.create_availability(provider.id, availability_request(
        date="2030-01-02", is_recurring=True, recurrence_pattern="WEEKLY",
        recurrence_end_date="2030-06-30",
    ))
    sibling = service.create_availability(provider.id, availability_request(
        date="2030-01-03", is_recurring=True, recurrence_pattern="DAILY",
        recurrence_end_date="2030-06-30",
    ))
    single = service.create_availability(provider.id, availability_request(date="2030-01-04"))
    ids = {"expired": expired.id, "target": target.id, "sibling": sibling.id, "single": single.id}
    as_of = date(2030, 1, 10)

    assert active_cohort(db_session, provider.id, as_of) == {ids["target"], ids["sibling"]}

    deleted = service.delete_availability(
        ids["target"], delete_recurring=True, reason="Leaving clinic", today=as_of
    )

    assert deleted == 2
    assert AvailabilityRepository.get_by_id(db_session, ids["target"]) is None
    assert AvailabilityRepository.get_by_id(db_session, ids["sibling"]) is None
    assert slots_of(db_session, ids["target"]) == []
    assert slots_of(db_session, ids["sibling"]) == []
    assert AvailabilityRepository.get_by_id(db_session, ids["expired"]) is not None
    assert AvailabilityRepository.get_by_id(db_session, ids["single"]) is not None
    assert len(slots_of(db_session, ids["single"])) > 0


def test_delete_recurring_flag_on_single_window_deletes_one(db_session, provider):
    service = AvailabilityService(db_session)
    window = service.create_availability(provider.id, availability_request())

    assert service.delete_availability(window.id, delete_recurring=True) == 1


def test_delete_missing_window(db_session):
    with pytest.raises(NotFoundError):
        AvailabilityService(db_session).delete_availability(4242)


def failing_save_slots(db, slots):
    raise RuntimeError("slot storage unavailable")


def test_create_rolls_back_window_when_slots_fail(db_session, provider, monkeypatch):
    monkeypatch.setattr(AvailabilityRepository, "save_slots", staticmethod(failing_save_slots))

    with pytest.raises(RuntimeError):
        AvailabilityService(db_session).create_availability(provider.id, availability_request())

    assert db_session.query(ProviderAvailability).count() == 0
    assert db_session.query(AppointmentSlot).count() == 0


def test_update_rolls_back_when_slots_fail(db_session, provider, monkeypatch):
    service = AvailabilityService(db_session)
    window = service.create_availability(
        provider.id, availability_request(start_time="09:00", end_time="10:00", break_duration=0)
    )
    window_id = window.id
    slot_ids = [slot.id for slot in slots_of(db_session, window_id)]
    monkeypatch.setattr(AvailabilityRepository, "save_slots", staticmethod(failing_save_slots))

    with pytest.raises(RuntimeError):
        service.update_availability(
            window_id, availability_request(start_time="14:00", end_time="16:00", slot_duration=60)
        )

    reloaded = AvailabilityRepository.get_by_id(db_session, window_id)
    assert reloaded.start_time == time(9, 0)
    assert reloaded.end_time == time(10, 0)
    assert reloaded.slot_duration == 30
    assert [slot.id for slot in slots_of(db_session, window_id)] == slot_ids
