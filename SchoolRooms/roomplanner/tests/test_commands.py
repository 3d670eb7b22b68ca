import pytest
from django.core.management import call_command

from roomplanner.models import ClassGroup, Classroom, EventReservation, RecurringReservation
from roomplanner.repository import load_snapshot
from roomplanner.services import compute_occupancy


@pytest.mark.django_db
def test_seed_school_is_idempotent():
    call_command('seed_school')
    call_command('seed_school')

    assert Classroom.objects.count() == 8
    assert ClassGroup.objects.count() == 5
    assert RecurringReservation.objects.count() == 1
    assert EventReservation.objects.count() == 1


@pytest.mark.django_db
def test_seeded_data_feeds_the_engine():
    call_command('seed_school', '--flush')

    snapshot = load_snapshot()
    event = snapshot.event_reservations[0]
    occupancy = compute_occupancy(event.date, snapshot.classrooms, snapshot.class_groups,
                                  snapshot.recurring_reservations, snapshot.event_reservations)
    # 11:30-12:30 spans the morning and afternoon shifts
    busy_shifts = {shift for (room_id, shift), items in occupancy.cells.items()
                   if room_id == event.classroom_id and items}
    assert len(busy_shifts) == 2
