import csv
import io
from datetime import date

import pytest
from django.contrib.messages import get_messages
from django.urls import reverse
from openpyxl import load_workbook

from roomplanner.domain import CellStatus, Shift
from roomplanner.models import ClassGroup, Classroom, EventReservation

from .conftest import MONDAY


@pytest.mark.django_db
def test_dashboard(client, morning_group, room_in_maintenance):
    response = client.get(reverse('dashboard'))
    assert response.status_code == 200
    stats = response.context['stats']
    assert stats['total_classrooms'] == 2
    assert stats['classrooms_in_maintenance'] == 1
    assert stats['active_class_groups'] == 1


# ============= ROOM AVAILABILITY =============

def test_room_availability_grid(client, morning_group, event, room_in_maintenance):
    response = client.get(reverse('room_availability'), {'date': MONDAY.isoformat()})
    assert response.status_code == 200

    rows = {row.classroom.name: dict(row.cells) for row in response.context['grid']}
    assert list(rows) == ['Sala 101', 'Sala 102', 'Sala 103']
    assert rows['Sala 101'][Shift.MORNING].items[0].label == 'INF-M1'
    assert rows['Sala 102'][Shift.AFTERNOON].items[0].label == 'Palestra'
    assert rows['Sala 103'][Shift.EVENING].status is CellStatus.MAINTENANCE

    content = response.content.decode()
    assert 'INF-M1' in content
    assert 'Pintura' in content


def test_room_availability_falls_back_to_today(client, room_a):
    response = client.get(reverse('room_availability'), {'date': 'amanhã'})
    assert response.status_code == 200
    assert response.context['selected_date'] == date.today()


def test_export_csv(client, morning_group, room_b):
    response = client.get(reverse('export_availability_csv'), {'date': MONDAY.isoformat()})
    assert response.status_code == 200
    assert 'disponibilidade_2024-03-04.csv' in response['Content-Disposition']

    rows = list(csv.reader(io.StringIO(response.content.decode())))
    assert rows[0] == ['Sala', 'Capacidade', 'Manhã', 'Tarde', 'Noite']
    assert rows[1] == ['Sala 101', '30', 'INF-M1', 'Livre', 'Livre']
    assert rows[2][0] == 'Sala 102'


def test_export_excel(client, morning_group):
    response = client.get(reverse('export_availability_excel'), {'date': MONDAY.isoformat()})
    assert response.status_code == 200

    ws = load_workbook(io.BytesIO(response.content)).active
    assert ws['A1'].value == 'DISPONIBILIDADE DE SALAS'
    assert ws['A2'].value == 'Data: 04/03/2024'
    assert [ws.cell(row=6, column=col).value for col in range(1, 6)] == ['Sala 101', 30, 'INF-M1', 'Livre', 'Livre']


def test_export_pdf(client, morning_group, room_in_maintenance):
    response = client.get(reverse('export_availability_pdf'), {'date': MONDAY.isoformat()})
    assert response.status_code == 200
    assert response['Content-Type'] == 'application/pdf'
    assert response.content.startswith(b'%PDF')


# ============= CRUD =============

@pytest.mark.django_db
def test_create_classroom(client):
    response = client.post(reverse('classroom_create'), {'name': 'Sala 301', 'capacity': 35})
    assert response.status_code == 302
    assert Classroom.objects.filter(name='Sala 301', capacity=35).exists()


@pytest.mark.django_db
def test_create_classroom_invalid(client):
    response = client.post(reverse('classroom_create'), {'name': 'S1'})
    assert response.status_code == 200
    assert 'name' in response.context['form'].errors
    assert not Classroom.objects.exists()


def test_delete_classroom_in_use_is_refused(client, morning_group, room_a):
    response = client.post(reverse('classroom_delete', args=[room_a.pk]))
    assert response.status_code == 302
    assert Classroom.objects.filter(pk=room_a.pk).exists()
    messages = [str(m) for m in get_messages(response.wsgi_request)]
    assert any('Não é possível excluir' in m for m in messages)


def test_delete_free_classroom(client, room_b):
    response = client.post(reverse('classroom_delete', args=[room_b.pk]))
    assert response.status_code == 302
    assert not Classroom.objects.filter(pk=room_b.pk).exists()


def test_create_class_group(client, room_a, course):
    response = client.post(reverse('classgroup_create'), {
        'name': 'INF-T1', 'course': course.pk, 'year': 2024, 'shift': 'Tarde', 'status': 'Em Andamento',
        'start_date': '2024-03-01', 'end_date': '2024-06-30', 'assigned_classroom': room_a.pk,
        'class_days': ['Quinta', 'Terça'],
    })
    assert response.status_code == 302
    group = ClassGroup.objects.get(name='INF-T1')
    assert group.class_days == ['Terça', 'Quinta']


def test_change_classroom(client, morning_group, room_b):
    response = client.post(reverse('classgroup_change_classroom', args=[morning_group.pk]),
                           {'assigned_classroom': room_b.pk})
    assert response.status_code == 302
    morning_group.refresh_from_db()
    assert morning_group.assigned_classroom == room_b


def test_event_conflict_is_reported(client, event, room_b):
    response = client.post(reverse('event_reservation_create'), {
        'classroom': room_b.pk, 'title': 'Reunião de pais', 'date': MONDAY.isoformat(),
        'start_time': '15:00', 'end_time': '18:00', 'reserved_by': 'Direção',
    })
    assert response.status_code == 200
    assert 'Conflito' in response.content.decode()
    assert EventReservation.objects.count() == 1


def test_recurring_reservation_create(client, morning_group, room_a):
    response = client.post(reverse('recurring_reservation_create'), {
        'class_group': morning_group.pk, 'classroom': room_a.pk, 'start_date': '2024-03-04',
        'number_of_classes': 10, 'purpose': 'Aulas regulares',
    })
    assert response.status_code == 302
    reservation = morning_group.recurring_reservations.get()
    assert reservation.end_date == date(2024, 4, 3)


# ============= RECURRING PREVIEW =============

def test_recurring_preview(client, morning_group):
    response = client.get(reverse('recurring_reservation_preview'), {
        'class_group': morning_group.pk, 'start_date': '2024-03-06', 'number_of_classes': 3,
    })
    assert response.status_code == 200
    assert response.json() == {
        'first_date': '2024-03-06',
        'end_date': '2024-03-13',
        'summary': 'A reserva terminará em 13/03/24.',
    }


def test_recurring_preview_invalid(client, morning_group):
    response = client.get(reverse('recurring_reservation_preview'), {
        'class_group': morning_group.pk, 'start_date': '2024-03-06', 'number_of_classes': 0,
    })
    assert response.status_code == 400
    assert 'number_of_classes' in response.json()['errors']


# ============= TV DISPLAY =============

def test_tv_data_in_the_evening(client, morning_group, evening_group):
    response = client.get(reverse('tv_data'), {'at': '2024-03-04T19:00:00'})
    assert response.status_code == 200
    payload = response.json()
    assert [entry['groupName'] for entry in payload['data']] == ['INF-N1']
    assert payload['data'][0]['classroomName'] == 'Sala 102'
    assert payload['publishedDate'] == '2024-03-04T19:00:00'


def test_tv_data_after_midnight_shows_previous_evening(client, evening_group):
    response = client.get(reverse('tv_data'), {'at': '2024-03-05T02:00:00'})
    assert [entry['groupName'] for entry in response.json()['data']] == ['INF-N1']


def test_tv_data_before_dawn_on_monday_is_empty(client, evening_group):
    # 03:00 Monday belongs to Sunday evening
    response = client.get(reverse('tv_data'), {'at': '2024-03-04T03:00:00'})
    assert response.json()['data'] == []


def test_tv_display_page(client, morning_group):
    response = client.get(reverse('tv_display'), {'at': '2024-03-04T09:00:00'})
    assert response.status_code == 200
    assert response.context['shift'] is Shift.MORNING
    assert 'INF-M1' in response.content.decode()


def test_room_availability_renders_date_filter(client, room_a):
    response = client.get(reverse('room_availability'), {'date': '2024-03-04'})
    assert response.context['selected_date'] == MONDAY
    assert response.context['filter_form'].initial['date'] == MONDAY
    assert 'value="2024-03-04"' in response.content.decode()


# ============= ROOM LOOKUP =============

def test_room_lookup_lists_categories(client, morning_group, evening_group):
    response = client.get(reverse('room_lookup'))
    assert response.status_code == 200
    assert response.context['categories'] == ['Outros Cursos']
    assert response.context['result'] is None


def test_room_lookup_shows_assigned_room(client, morning_group):
    response = client.get(reverse('room_lookup'), {
        'category': 'Outros Cursos', 'group': str(morning_group.pk),
    })
    assert response.status_code == 200
    result = response.context['result']
    assert result.group.name == 'INF-M1'
    assert result.classroom.name == 'Sala 101'
    assert 'Sala 101' in response.content.decode()


def test_room_lookup_without_classroom(client, course):
    group = ClassGroup.objects.create(
        name='ENF-T1', course=course, shift='Tarde', status='Planejada',
        start_date=MONDAY, end_date=date(2024, 6, 30), class_days=['Terça'],
    )
    response = client.get(reverse('room_lookup'), {'category': 'Téc. em Enfermagem', 'group': str(group.pk)})
    assert response.context['result'].classroom is None
    assert 'Não Atribuída' in response.content.decode()


def test_room_lookup_ignores_unknown_category(client, morning_group):
    response = client.get(reverse('room_lookup'), {'category': 'Medicina', 'group': str(morning_group.pk)})
    assert response.context['selected_category'] is None
    assert response.context['result'] is None
