import logging
from datetime import date, time

import pytest
from django.core.exceptions import ValidationError

from roomplanner.domain import ClassGroupStatus, Shift, Weekday
from roomplanner.forms import ClassGroupForm, ClassroomForm, EventReservationForm, RecurringReservationForm
from roomplanner.models import ClassGroup, Classroom, EventReservation, RecurringReservation
from roomplanner.repository import ScheduleRepository, load_snapshot
from roomplanner.services import build_availability_grid

from .conftest import MONDAY


# ============= MODELS =============

@pytest.mark.django_db
def test_classroom_in_maintenance_requires_reason():
    room = Classroom(name='Sala 201', is_under_maintenance=True, maintenance_reason='  ')
    with pytest.raises(ValidationError) as excinfo:
        room.full_clean()
    assert 'maintenance_reason' in excinfo.value.message_dict


def test_class_days_are_stored_in_calendar_order(morning_group):
    morning_group.refresh_from_db()
    assert morning_group.class_days == ['Segunda', 'Quarta']


def test_class_group_rejects_reversed_dates(morning_group):
    morning_group.end_date = date(2024, 1, 1)
    with pytest.raises(ValidationError) as excinfo:
        morning_group.full_clean()
    assert 'end_date' in excinfo.value.message_dict


def test_event_end_must_follow_start(room_a):
    event = EventReservation(classroom=room_a, title='Reunião', date=MONDAY,
                             start_time=time(10, 0), end_time=time(10, 0), reserved_by='Direção')
    with pytest.raises(ValidationError):
        event.full_clean()


def test_to_domain(morning_group, room_a):
    group = morning_group.to_domain()
    assert group.id == str(morning_group.pk)
    assert group.shift is Shift.MORNING
    assert group.status is ClassGroupStatus.IN_PROGRESS
    assert group.class_days == frozenset({Weekday.MONDAY, Weekday.WEDNESDAY})
    assert group.assigned_classroom_id == str(room_a.pk)
    assert group.course == 'Informática Básica'

    room = room_a.to_domain()
    assert room.name == 'Sala 101'
    assert room.capacity == 30


def test_event_to_domain_keeps_clock_times(event):
    domain_event = event.to_domain()
    assert domain_event.start_time == time(14, 0)
    assert domain_event.end_time == time(16, 0)
    assert domain_event.classroom_id == str(event.classroom_id)


def test_repository_snapshot(morning_group, evening_group, recurring_reservation, event, room_in_maintenance):
    with ScheduleRepository() as repository:
        snapshot = repository.snapshot()

    assert len(snapshot.classrooms) == 3
    assert {group.name for group in snapshot.class_groups} == {'INF-M1', 'INF-N1'}
    assert snapshot.recurring_reservations[0].purpose == 'Aulas de reforço'
    assert snapshot.event_reservations[0].title == 'Palestra'
    assert load_snapshot() == snapshot


def test_stored_value_outside_choices_does_not_break_the_grid(morning_group, evening_group, caplog):
    # Rows written around the ORM validation, e.g. by a bulk update
    ClassGroup.objects.filter(pk=evening_group.pk).update(shift='Madrugada')
    ClassGroup.objects.filter(pk=morning_group.pk).update(status='Arquivada')

    snapshot = load_snapshot()
    groups = {group.name: group for group in snapshot.class_groups}
    assert groups['INF-N1'].shift is None
    assert groups['INF-M1'].status is None

    with caplog.at_level(logging.WARNING, logger='roomplanner.services'):
        grid = build_availability_grid(snapshot, MONDAY)

    assert all(cell.is_free for row in grid for _, cell in row.cells)
    messages = [record.getMessage() for record in caplog.records]
    assert f"Skipping class group {evening_group.pk}: invalid dates or shift" in messages
    assert f"Skipping class group {morning_group.pk}: unknown status" in messages


# ============= CLASSROOM / CLASS GROUP FORMS =============

@pytest.mark.django_db
def test_classroom_form_validation():
    form = ClassroomForm(data={'name': 'AB', 'capacity': 10})
    assert not form.is_valid()
    assert 'name' in form.errors

    form = ClassroomForm(data={'name': 'Laboratório 1', 'is_under_maintenance': 'on'})
    assert not form.is_valid()
    assert 'maintenance_reason' in form.errors


def test_class_group_form_normalizes_days(room_a, course):
    form = ClassGroupForm(data={
        'name': 'INF-T1', 'course': course.pk, 'year': 2024, 'shift': 'Tarde', 'status': 'Planejada',
        'start_date': '2024-03-01', 'end_date': '2024-07-31', 'assigned_classroom': room_a.pk,
        'class_days': ['Sexta', 'Segunda'],
    })
    assert form.is_valid(), form.errors
    group = form.save()
    group.refresh_from_db()
    assert group.class_days == ['Segunda', 'Sexta']


def test_class_group_form_rejects_reversed_dates(room_a):
    form = ClassGroupForm(data={
        'name': 'INF-T2', 'shift': 'Tarde', 'status': 'Planejada',
        'start_date': '2024-07-31', 'end_date': '2024-03-01', 'class_days': ['Terça'],
    })
    assert not form.is_valid()
    assert 'end_date' in form.errors


# ============= EVENT RESERVATION FORM =============

def _event_data(classroom, start, end, **extra):
    data = {
        'classroom': classroom.pk, 'title': 'Oficina', 'date': MONDAY.isoformat(),
        'start_time': start, 'end_time': end, 'reserved_by': 'Coordenação',
    }
    data.update(extra)
    return data


def test_event_overlapping_another_event_is_rejected(event, room_b):
    form = EventReservationForm(data=_event_data(room_b, '15:00', '17:00'))
    assert not form.is_valid()
    message = form.non_field_errors()[0]
    assert message.startswith('Conflito')
    assert 'Palestra' in message


def test_event_touching_another_event_is_accepted(event, room_b):
    form = EventReservationForm(data=_event_data(room_b, '16:00', '17:00'))
    assert form.is_valid(), form.errors


def test_event_inside_recurring_shift_is_rejected(recurring_reservation, room_b):
    form = EventReservationForm(data=_event_data(room_b, '09:00', '10:00'))
    assert not form.is_valid()
    assert 'Aulas de reforço' in form.non_field_errors()[0]


def test_event_on_day_without_recurring_class_is_accepted(recurring_reservation, room_b):
    tuesday = date(2024, 3, 5)
    form = EventReservationForm(data=_event_data(room_b, '09:00', '10:00', date=tuesday.isoformat()))
    assert form.is_valid(), form.errors


def test_editing_event_does_not_conflict_with_itself(event, room_b):
    form = EventReservationForm(data=_event_data(room_b, '14:30', '16:00', title='Palestra'), instance=event)
    assert form.is_valid(), form.errors


# ============= RECURRING RESERVATION FORM =============

def test_recurring_form_computes_end_date(morning_group, room_a):
    form = RecurringReservationForm(data={
        'class_group': morning_group.pk, 'classroom': room_a.pk,
        'start_date': MONDAY.isoformat(), 'number_of_classes': 10, 'purpose': 'Aulas regulares',
    })
    assert form.is_valid(), form.errors
    reservation = form.save()
    reservation.refresh_from_db()
    assert reservation.end_date == date(2024, 4, 3)


def test_recurring_form_rejects_shared_weekday_in_same_room(recurring_reservation, evening_group, room_b):
    form = RecurringReservationForm(data={
        'class_group': evening_group.pk, 'classroom': room_b.pk,
        'start_date': '2024-03-11', 'number_of_classes': 2, 'purpose': 'Aulas regulares',
    })
    assert not form.is_valid()
    message = form.non_field_errors()[0]
    assert 'INF-M1' in message
    assert 'Segunda' in message
    assert RecurringReservation.objects.count() == 1


def test_recurring_form_without_class_days(room_a):
    group = ClassGroup.objects.create(
        name='Sem dias', shift='Manhã', status='Em Andamento',
        start_date=MONDAY, end_date=date(2024, 6, 30), class_days=[],
    )
    form = RecurringReservationForm(data={
        'class_group': group.pk, 'classroom': room_a.pk,
        'start_date': MONDAY.isoformat(), 'number_of_classes': 3, 'purpose': 'Aulas regulares',
    })
    assert not form.is_valid()
    assert 'data de término' in form.non_field_errors()[0]


@pytest.mark.parametrize("count", [0, 101])
def test_recurring_form_bounds_number_of_classes(morning_group, room_a, count):
    form = RecurringReservationForm(data={
        'class_group': morning_group.pk, 'classroom': room_a.pk,
        'start_date': MONDAY.isoformat(), 'number_of_classes': count, 'purpose': 'Aulas regulares',
    })
    assert not form.is_valid()
    assert 'number_of_classes' in form.errors
