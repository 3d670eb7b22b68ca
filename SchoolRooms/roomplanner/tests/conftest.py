from datetime import date, time

import pytest

from roomplanner.models import Classroom, ClassGroup, Course, EventReservation, RecurringReservation

# 2024-03-04 is a Monday
MONDAY = date(2024, 3, 4)


@pytest.fixture
def room_a(db):
    return Classroom.objects.create(name='Sala 101', capacity=30)


@pytest.fixture
def room_b(db):
    return Classroom.objects.create(name='Sala 102', capacity=40)


@pytest.fixture
def room_in_maintenance(db):
    return Classroom.objects.create(name='Sala 103', capacity=25, is_under_maintenance=True,
                                    maintenance_reason='Pintura')


@pytest.fixture
def course(db):
    return Course.objects.create(name='Informática Básica', code='INF')


@pytest.fixture
def morning_group(room_a, course):
    return ClassGroup.objects.create(
        name='INF-M1', course=course, year=2024, shift='Manhã', status='Em Andamento',
        start_date=date(2024, 2, 1), end_date=date(2024, 6, 30),
        class_days=['Quarta', 'Segunda'], assigned_classroom=room_a,
    )


@pytest.fixture
def evening_group(room_b, course):
    return ClassGroup.objects.create(
        name='INF-N1', course=course, year=2024, shift='Noite', status='Em Andamento',
        start_date=date(2024, 2, 1), end_date=date(2024, 6, 30),
        class_days=['Segunda'], assigned_classroom=room_b,
    )


@pytest.fixture
def recurring_reservation(morning_group, room_b):
    return RecurringReservation.objects.create(
        class_group=morning_group, classroom=room_b,
        start_date=MONDAY, end_date=date(2024, 3, 27), purpose='Aulas de reforço',
    )


@pytest.fixture
def event(room_b):
    return EventReservation.objects.create(
        classroom=room_b, title='Palestra', date=MONDAY,
        start_time=time(14, 0), end_time=time(16, 0), reserved_by='Coordenação',
    )
