from django.urls import path
from . import views

urlpatterns = [
    # Dashboard
    path('', views.dashboard, name='dashboard'),

    # Classrooms
    path('classrooms/', views.classroom_list, name='classroom_list'),
    path('classrooms/new/', views.classroom_create, name='classroom_create'),
    path('classrooms/<int:classroom_id>/edit/', views.classroom_edit, name='classroom_edit'),
    path('classrooms/<int:classroom_id>/delete/', views.classroom_delete, name='classroom_delete'),

    # Courses
    path('courses/', views.course_list, name='course_list'),
    path('courses/new/', views.course_create, name='course_create'),
    path('courses/<int:course_id>/delete/', views.course_delete, name='course_delete'),

    # Class groups
    path('classgroups/', views.classgroup_list, name='classgroup_list'),
    path('classgroups/new/', views.classgroup_create, name='classgroup_create'),
    path('classgroups/<int:group_id>/edit/', views.classgroup_edit, name='classgroup_edit'),
    path('classgroups/<int:group_id>/classroom/', views.classgroup_change_classroom,
         name='classgroup_change_classroom'),
    path('classgroups/<int:group_id>/delete/', views.classgroup_delete, name='classgroup_delete'),

    # Reservations
    path('reservations/', views.reservation_list, name='reservation_list'),
    path('reservations/event/new/', views.event_reservation_create, name='event_reservation_create'),
    path('reservations/event/<int:reservation_id>/delete/', views.event_reservation_delete,
         name='event_reservation_delete'),
    path('reservations/recurring/new/', views.recurring_reservation_create, name='recurring_reservation_create'),
    path('reservations/recurring/preview/', views.recurring_reservation_preview,
         name='recurring_reservation_preview'),
    path('reservations/recurring/<int:reservation_id>/delete/', views.recurring_reservation_delete,
         name='recurring_reservation_delete'),

    # Announcements
    path('announcements/', views.announcement_list, name='announcement_list'),
    path('announcements/new/', views.announcement_create, name='announcement_create'),
    path('announcements/<int:announcement_id>/edit/', views.announcement_edit, name='announcement_edit'),
    path('announcements/<int:announcement_id>/delete/', views.announcement_delete, name='announcement_delete'),

    # Room availability + exports
    path('room-availability/', views.room_availability, name='room_availability'),
    path('room-availability/export/csv/', views.export_availability_csv, name='export_availability_csv'),
    path('room-availability/export/excel/', views.export_availability_excel, name='export_availability_excel'),
    path('room-availability/export/pdf/', views.export_availability_pdf, name='export_availability_pdf'),

    # Room lookup for students
    path('consulta-sala/', views.room_lookup, name='room_lookup'),

    # TV panel
    path('tv-display/', views.tv_display, name='tv_display'),
    path('api/tv-data/', views.tv_data, name='tv_data'),
]
