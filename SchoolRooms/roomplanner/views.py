# ============= IMPORTS =============
# Django Core
from django.conf import settings
from django.contrib import messages
from django.db.models import ProtectedError
from django.http import HttpResponse, JsonResponse
from django.shortcuts import get_object_or_404, redirect, render
from django.views.decorators.http import require_GET

# Python Standard Library
import csv
import io
import logging
from datetime import datetime

# Excel/PDF Libraries
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from reportlab.lib import colors
from reportlab.lib.pagesizes import landscape, A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

# Local Imports
from .domain import CellStatus, Shift
from .forms import (
    AnnouncementForm, AvailabilityFilterForm, ChangeClassroomForm, ClassGroupForm, ClassroomForm, CourseForm,
    EventReservationForm, OccurrencePreviewForm, RecurringReservationForm,
)
from .models import (
    Announcement, Classroom, ClassGroup, Course, EventReservation, RecurringReservation,
)
from .repository import load_snapshot
from .services import (
    OccurrenceSearchExhausted, build_availability_grid, build_live_display, dashboard_stats,
    find_group_classroom, group_by_course_category, preview_recurring_reservation,
    weekday_occupancy_chart,
)
from .utils import effective_shift_and_date, shift_label

logger = logging.getLogger(__name__)


def _form_page(request, form, title, cancel_url, submit_label='Salvar', template='roomplanner/form.html'):
    return render(request, template, {
        'form': form,
        'title': title,
        'cancel_url': cancel_url,
        'submit_label': submit_label,
    })


def _delete_page(request, obj, cancel_url):
    return render(request, 'roomplanner/confirm_delete.html', {'object': obj, 'cancel_url': cancel_url})


# ============= DASHBOARD =============

def dashboard(request):
    snapshot = load_snapshot()
    stats = dashboard_stats(snapshot.class_groups, snapshot.classrooms)
    chart_labels, chart_data = weekday_occupancy_chart(snapshot.class_groups)

    now = datetime.now()
    live = build_live_display(snapshot.class_groups, snapshot.classrooms, now)

    context = {
        'stats': stats,
        'chart_labels': chart_labels,
        'chart_data': chart_data,
        'live_entries': live,
        'current_date': now.date(),
        'announcements': Announcement.objects.filter(published=True)[:5],
    }
    return render(request, 'roomplanner/dashboard.html', context)


# ============= CLASSROOMS =============

def classroom_list(request):
    classrooms = Classroom.objects.all()
    return render(request, 'roomplanner/classroom_list.html', {'classrooms': classrooms})


def classroom_create(request):
    if request.method == 'POST':
        form = ClassroomForm(request.POST)
        if form.is_valid():
            classroom = form.save()
            logger.info("Created classroom %s (id=%s)", classroom.name, classroom.pk)
            messages.success(request, "Sala de aula criada com sucesso!")
            return redirect('classroom_list')
    else:
        form = ClassroomForm()
    return _form_page(request, form, 'Nova Sala', 'classroom_list')


def classroom_edit(request, classroom_id):
    classroom = get_object_or_404(Classroom, pk=classroom_id)
    if request.method == 'POST':
        form = ClassroomForm(request.POST, instance=classroom)
        if form.is_valid():
            form.save()
            logger.info("Updated classroom %s", classroom.pk)
            messages.success(request, "Sala de aula atualizada com sucesso!")
            return redirect('classroom_list')
    else:
        form = ClassroomForm(instance=classroom)
    return _form_page(request, form, f'Editar Sala: {classroom.name}', 'classroom_list')


def classroom_delete(request, classroom_id):
    classroom = get_object_or_404(Classroom, pk=classroom_id)
    if request.method == 'POST':
        try:
            classroom.delete()
        except ProtectedError:
            messages.error(request, "Não é possível excluir a sala. Ela está atribuída a turmas ou reservas.")
            return redirect('classroom_list')
        logger.info("Deleted classroom %s", classroom_id)
        messages.success(request, "Sala de aula excluída com sucesso!")
        return redirect('classroom_list')
    return _delete_page(request, classroom, 'classroom_list')


# ============= COURSES =============

def course_list(request):
    courses = Course.objects.all()
    return render(request, 'roomplanner/course_list.html', {'courses': courses})


def course_create(request):
    if request.method == 'POST':
        form = CourseForm(request.POST)
        if form.is_valid():
            course = form.save()
            logger.info("Created course %s (id=%s)", course.name, course.pk)
            messages.success(request, "Curso criado com sucesso!")
            return redirect('course_list')
    else:
        form = CourseForm()
    return _form_page(request, form, 'Novo Curso', 'course_list')


def course_delete(request, course_id):
    course = get_object_or_404(Course, pk=course_id)
    if request.method == 'POST':
        try:
            course.delete()
        except ProtectedError:
            messages.error(request, "Não é possível excluir o curso. Ele está vinculado a turmas.")
            return redirect('course_list')
        messages.success(request, "Curso excluído com sucesso!")
        return redirect('course_list')
    return _delete_page(request, course, 'course_list')


# ============= CLASS GROUPS =============

def classgroup_list(request):
    groups = ClassGroup.objects.select_related('course', 'assigned_classroom')
    status = request.GET.get('status')
    if status:
        groups = groups.filter(status=status)
    return render(request, 'roomplanner/classgroup_list.html', {
        'class_groups': groups,
        'selected_status': status,
    })


def classgroup_create(request):
    if request.method == 'POST':
        form = ClassGroupForm(request.POST)
        if form.is_valid():
            group = form.save()
            logger.info("Created class group %s (id=%s)", group.name, group.pk)
            messages.success(request, "Turma criada com sucesso!")
            return redirect('classgroup_list')
    else:
        form = ClassGroupForm()
    return _form_page(request, form, 'Nova Turma', 'classgroup_list')


def classgroup_edit(request, group_id):
    group = get_object_or_404(ClassGroup, pk=group_id)
    if request.method == 'POST':
        form = ClassGroupForm(request.POST, instance=group)
        if form.is_valid():
            form.save()
            logger.info("Updated class group %s", group.pk)
            messages.success(request, "Turma atualizada com sucesso!")
            return redirect('classgroup_list')
    else:
        form = ClassGroupForm(instance=group)
    return _form_page(request, form, f'Editar Turma: {group.name}', 'classgroup_list')


def classgroup_change_classroom(request, group_id):
    group = get_object_or_404(ClassGroup, pk=group_id)
    if request.method == 'POST':
        form = ChangeClassroomForm(request.POST, instance=group)
        if form.is_valid():
            form.save()
            messages.success(request, "Sala atribuída com sucesso.")
            return redirect('classgroup_list')
    else:
        form = ChangeClassroomForm(instance=group)
    return _form_page(request, form, f'Alterar Sala: {group.name}', 'classgroup_list')


def classgroup_delete(request, group_id):
    group = get_object_or_404(ClassGroup, pk=group_id)
    if request.method == 'POST':
        group.delete()
        logger.info("Deleted class group %s", group_id)
        messages.success(request, "Turma excluída com sucesso.")
        return redirect('classgroup_list')
    return _delete_page(request, group, 'classgroup_list')


# ============= RESERVATIONS =============

def reservation_list(request):
    context = {
        'recurring_reservations': RecurringReservation.objects.select_related('class_group', 'classroom'),
        'event_reservations': EventReservation.objects.select_related('classroom'),
    }
    return render(request, 'roomplanner/reservation_list.html', context)


def event_reservation_create(request):
    if request.method == 'POST':
        form = EventReservationForm(request.POST)
        if form.is_valid():
            event = form.save()
            logger.info("Created event reservation %s for classroom %s on %s",
                        event.pk, event.classroom_id, event.date)
            messages.success(request, "Reserva de evento criada com sucesso!")
            return redirect('reservation_list')
    else:
        form = EventReservationForm(initial={'date': request.GET.get('date')})
    return _form_page(request, form, 'Nova Reserva de Evento', 'reservation_list')


def event_reservation_delete(request, reservation_id):
    event = get_object_or_404(EventReservation, pk=reservation_id)
    if request.method == 'POST':
        event.delete()
        messages.success(request, "Reserva de evento excluída com sucesso!")
        return redirect('reservation_list')
    return _delete_page(request, event, 'reservation_list')


def recurring_reservation_create(request):
    if request.method == 'POST':
        form = RecurringReservationForm(request.POST)
        if form.is_valid():
            reservation = form.save()
            logger.info("Created recurring reservation %s (%s to %s)",
                        reservation.pk, reservation.start_date, reservation.end_date)
            messages.success(request, "Reserva recorrente criada com sucesso!")
            return redirect('reservation_list')
    else:
        form = RecurringReservationForm()
    return _form_page(request, form, 'Nova Reserva Recorrente', 'reservation_list',
                      template='roomplanner/recurring_reservation_form.html')


@require_GET
def recurring_reservation_preview(request):
    """Computed end date for the recurring reservation form, as JSON"""
    form = OccurrencePreviewForm(request.GET)
    if not form.is_valid():
        return JsonResponse({'errors': form.errors.get_json_data()}, status=400)

    group = form.cleaned_data['class_group']
    try:
        preview = preview_recurring_reservation(
            form.cleaned_data['start_date'], group.class_days, form.cleaned_data['number_of_classes'],
        )
    except OccurrenceSearchExhausted as exc:
        errors = {'class_group': [{'message': str(exc), 'code': 'no_class_days'}]}
        return JsonResponse({'errors': errors}, status=400)

    return JsonResponse({
        'first_date': preview.first_date.isoformat(),
        'end_date': preview.end_date.isoformat(),
        'summary': preview.summary,
    })


def recurring_reservation_delete(request, reservation_id):
    reservation = get_object_or_404(RecurringReservation, pk=reservation_id)
    if request.method == 'POST':
        reservation.delete()
        messages.success(request, "Reserva recorrente excluída com sucesso!")
        return redirect('reservation_list')
    return _delete_page(request, reservation, 'reservation_list')


# ============= ANNOUNCEMENTS =============

def announcement_list(request):
    return render(request, 'roomplanner/announcement_list.html', {
        'announcements': Announcement.objects.all(),
    })


def announcement_create(request):
    if request.method == 'POST':
        form = AnnouncementForm(request.POST)
        if form.is_valid():
            form.save()
            messages.success(request, "Anúncio criado com sucesso!")
            return redirect('announcement_list')
    else:
        form = AnnouncementForm()
    return _form_page(request, form, 'Novo Anúncio', 'announcement_list')


def announcement_edit(request, announcement_id):
    announcement = get_object_or_404(Announcement, pk=announcement_id)
    if request.method == 'POST':
        form = AnnouncementForm(request.POST, instance=announcement)
        if form.is_valid():
            form.save()
            messages.success(request, "Anúncio atualizado com sucesso!")
            return redirect('announcement_list')
    else:
        form = AnnouncementForm(instance=announcement)
    return _form_page(request, form, 'Editar Anúncio', 'announcement_list')


def announcement_delete(request, announcement_id):
    announcement = get_object_or_404(Announcement, pk=announcement_id)
    if request.method == 'POST':
        announcement.delete()
        messages.success(request, "Anúncio excluído com sucesso!")
        return redirect('announcement_list')
    return _delete_page(request, announcement, 'announcement_list')


# ============= ROOM AVAILABILITY =============

def _selected_date(request):
    # Bad or missing ?date= falls back to today
    form = AvailabilityFilterForm(request.GET)
    if form.is_valid() and form.cleaned_data['date']:
        return form.cleaned_data['date']
    if request.GET.get('date'):
        logger.info("Ignoring invalid 'date' parameter: %r", request.GET['date'])
    return datetime.now().date()


def room_availability(request):
    day = _selected_date(request)
    grid = build_availability_grid(load_snapshot(), day)

    context = {
        'filter_form': AvailabilityFilterForm(initial={'date': day}),
        'selected_date': day,
        'shifts': [(shift, shift_label(shift)) for shift in Shift],
        'grid': grid,
        'free_count': sum(1 for row in grid for _, cell in row.cells if cell.status is CellStatus.FREE),
    }
    return render(request, 'roomplanner/room_availability.html', context)


def _cell_text(cell):
    if cell.status is CellStatus.MAINTENANCE:
        return f"{cell.status.value}: {cell.maintenance_reason}" if cell.maintenance_reason else cell.status.value
    if cell.status is CellStatus.FREE:
        return cell.status.value
    return "; ".join(item.label for item in cell.items)


def export_availability_csv(request):
    day = _selected_date(request)
    grid = build_availability_grid(load_snapshot(), day)

    response = HttpResponse(content_type='text/csv')
    response['Content-Disposition'] = f'attachment; filename="disponibilidade_{day.isoformat()}.csv"'

    writer = csv.writer(response)
    writer.writerow(['Sala', 'Capacidade'] + [shift.value for shift in Shift])
    for row in grid:
        writer.writerow([row.classroom.name, row.classroom.capacity or ''] +
                        [_cell_text(cell) for _, cell in row.cells])
    return response


STATUS_FILLS = {
    CellStatus.FREE: "E2EFDA",
    CellStatus.OCCUPIED: "FFF2CC",
    CellStatus.MAINTENANCE: "F8CBAD",
}


def export_availability_excel(request):
    day = _selected_date(request)
    grid = build_availability_grid(load_snapshot(), day)

    wb = Workbook()
    ws = wb.active
    ws.title = "Disponibilidade"

    ws['A1'] = "DISPONIBILIDADE DE SALAS"
    ws['A1'].font = Font(bold=True, size=16, color="366092")
    ws['A2'] = f"Data: {day:%d/%m/%Y}"
    ws['A3'] = f"Gerado em: {datetime.now():%d/%m/%Y %H:%M}"

    headers = ['Sala', 'Capacidade'] + [shift.value for shift in Shift]
    for col, header in enumerate(headers, start=1):
        cell = ws.cell(row=5, column=col)
        cell.value = header
        cell.font = Font(bold=True)
        cell.fill = PatternFill(start_color="5B9BD5", end_color="5B9BD5", fill_type="solid")
        cell.alignment = Alignment(horizontal='center')

    row_number = 6
    for row in grid:
        ws.cell(row=row_number, column=1, value=row.classroom.name)
        ws.cell(row=row_number, column=2, value=row.classroom.capacity)
        for offset, (_, occupancy) in enumerate(row.cells, start=3):
            cell = ws.cell(row=row_number, column=offset, value=_cell_text(occupancy))
            color = STATUS_FILLS[occupancy.status]
            cell.fill = PatternFill(start_color=color, end_color=color, fill_type="solid")
        row_number += 1

    for column in ws.iter_cols(min_row=5):
        max_length = max((len(str(cell.value)) for cell in column if cell.value), default=0)
        ws.column_dimensions[column[0].column_letter].width = min(max_length + 2, 40)

    response = HttpResponse(content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet')
    response['Content-Disposition'] = f'attachment; filename="disponibilidade_{day.isoformat()}.xlsx"'
    wb.save(response)
    return response


def export_availability_pdf(request):
    day = _selected_date(request)
    grid = build_availability_grid(load_snapshot(), day)

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=landscape(A4))
    styles = getSampleStyleSheet()
    elements = [
        Paragraph("Disponibilidade de Salas", styles['Title']),
        Paragraph(f"Data: {day:%d/%m/%Y}", styles['Normal']),
        Spacer(1, 12),
    ]

    data = [['Sala', 'Capacidade'] + [shift.value for shift in Shift]]
    for row in grid:
        data.append([row.classroom.name, row.classroom.capacity or '-'] +
                    [Paragraph(_cell_text(cell), styles['BodyText']) for _, cell in row.cells])

    table = Table(data, repeatRows=1)
    table_style = [
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#5B9BD5')),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
    ]
    for row_index, row in enumerate(grid, start=1):
        for col_index, (_, cell) in enumerate(row.cells, start=2):
            color = colors.HexColor('#' + STATUS_FILLS[cell.status])
            table_style.append(('BACKGROUND', (col_index, row_index), (col_index, row_index), color))
    table.setStyle(TableStyle(table_style))
    elements.append(table)

    doc.build(elements)
    response = HttpResponse(buffer.getvalue(), content_type='application/pdf')
    response['Content-Disposition'] = f'attachment; filename="disponibilidade_{day.isoformat()}.pdf"'
    return response


# ============= ROOM LOOKUP =============

def room_lookup(request):
    """Students pick their course area, then their class group, and see its room"""
    snapshot = load_snapshot()
    categories = group_by_course_category(snapshot.class_groups)

    selected_category = request.GET.get('category')
    if selected_category not in categories:
        selected_category = None

    result = None
    group_id = request.GET.get('group')
    if selected_category and group_id:
        result = find_group_classroom(categories[selected_category], snapshot.classrooms, group_id)

    context = {
        'categories': list(categories),
        'selected_category': selected_category,
        'groups': categories.get(selected_category, []),
        'selected_group': group_id,
        'result': result,
    }
    return render(request, 'roomplanner/room_lookup.html', context)


# ============= TV DISPLAY =============

def _display_time(request):
    # ?at= lets staff preview the panel at another moment
    value = request.GET.get('at')
    if value:
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            logger.warning("Ignoring invalid 'at' parameter: %r", value)
    return datetime.now()


def tv_display(request):
    now = _display_time(request)
    snapshot = load_snapshot()
    shift, effective_date = effective_shift_and_date(now)
    context = {
        'entries': build_live_display(snapshot.class_groups, snapshot.classrooms, now),
        'shift': shift,
        'effective_date': effective_date,
        'now': now,
        'refresh_seconds': settings.TV_REFRESH_SECONDS,
    }
    return render(request, 'roomplanner/tv_display.html', context)


@require_GET
def tv_data(request):
    now = _display_time(request)
    snapshot = load_snapshot()
    entries = build_live_display(snapshot.class_groups, snapshot.classrooms, now)
    return JsonResponse({
        'data': [entry.as_dict() for entry in entries],
        'publishedDate': now.isoformat(timespec='seconds'),
    })

