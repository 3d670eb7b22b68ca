from django.contrib import admin
from .models import (
    Announcement, Classroom, ClassGroup, Course, EventReservation, RecurringReservation,
)


# ============= ROOMS & COURSES =============
@admin.register(Classroom)
class ClassroomAdmin(admin.ModelAdmin):
    list_display = ['name', 'capacity', 'is_lab', 'is_under_maintenance', 'maintenance_reason']
    list_filter = ['is_lab', 'is_under_maintenance']
    search_fields = ['name', 'resources']
    actions = ['end_maintenance']

    def end_maintenance(self, request, queryset):
        queryset.update(is_under_maintenance=False, maintenance_reason='')
    end_maintenance.short_description = "Encerrar manutenção das salas selecionadas"


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ['name', 'code']
    search_fields = ['name', 'code']


# ============= CLASS GROUPS =============
@admin.register(ClassGroup)
class ClassGroupAdmin(admin.ModelAdmin):
    list_display = ['name', 'course', 'shift', 'status', 'start_date', 'end_date', 'assigned_classroom']
    list_filter = ['status', 'shift', 'course']
    search_fields = ['name', 'course__name']
    actions = ['mark_in_progress', 'mark_completed']

    def mark_in_progress(self, request, queryset):
        queryset.update(status='Em Andamento')
    mark_in_progress.short_description = "Marcar como Em Andamento"

    def mark_completed(self, request, queryset):
        queryset.update(status='Concluída')
    mark_completed.short_description = "Marcar como Concluída"


# ============= RESERVATIONS =============
@admin.register(RecurringReservation)
class RecurringReservationAdmin(admin.ModelAdmin):
    list_display = ['classroom', 'class_group', 'start_date', 'end_date', 'purpose']
    list_filter = ['classroom']


@admin.register(EventReservation)
class EventReservationAdmin(admin.ModelAdmin):
    list_display = ['title', 'classroom', 'date', 'start_time', 'end_time', 'reserved_by']
    list_filter = ['classroom', 'date']
    search_fields = ['title', 'reserved_by']


@admin.register(Announcement)
class AnnouncementAdmin(admin.ModelAdmin):
    list_display = ['title', 'type', 'priority', 'published', 'created_at']
    list_filter = ['type', 'priority', 'published']
