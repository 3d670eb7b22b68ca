from django import forms

from .models import (
    DAY_CHOICES, Announcement, Classroom, ClassGroup, Course, EventReservation, RecurringReservation,
)
from .repository import load_snapshot
from .services import (
    OccurrenceSearchExhausted, find_event_conflicts, find_recurring_conflicts, nth_occurrence_date,
)
from .domain import OccupancyKind


class ClassroomForm(forms.ModelForm):
    class Meta:
        model = Classroom
        fields = ['name', 'capacity', 'resources', 'is_lab', 'is_under_maintenance', 'maintenance_reason']
        widgets = {
            'name': forms.TextInput(attrs={'class': 'form-control', 'placeholder': 'Ex: Sala 101'}),
            'capacity': forms.NumberInput(attrs={'class': 'form-control'}),
            'resources': forms.TextInput(attrs={'class': 'form-control', 'placeholder': 'Projetor, Quadro'}),
            'is_lab': forms.CheckboxInput(attrs={'class': 'form-check-input'}),
            'is_under_maintenance': forms.CheckboxInput(attrs={'class': 'form-check-input'}),
            'maintenance_reason': forms.TextInput(attrs={'class': 'form-control'}),
        }

    def clean_name(self):
        name = self.cleaned_data['name'].strip()
        if len(name) < 3:
            raise forms.ValidationError("O nome da sala deve ter pelo menos 3 caracteres.")
        return name


class CourseForm(forms.ModelForm):
    class Meta:
        model = Course
        fields = ['name', 'code', 'description']
        widgets = {
            'name': forms.TextInput(attrs={'class': 'form-control', 'placeholder': 'Nome do curso'}),
            'code': forms.TextInput(attrs={'class': 'form-control'}),
            'description': forms.Textarea(attrs={'class': 'form-control', 'rows': 3}),
        }


class ClassGroupForm(forms.ModelForm):
    class_days = forms.MultipleChoiceField(
        choices=DAY_CHOICES,
        widget=forms.CheckboxSelectMultiple(attrs={'class': 'form-check-input'}),
        label='Dias de aula',
    )

    class Meta:
        model = ClassGroup
        fields = ['name', 'course', 'year', 'shift', 'status', 'start_date', 'end_date',
                  'assigned_classroom', 'class_days', 'notes']
        widgets = {
            'name': forms.TextInput(attrs={'class': 'form-control'}),
            'course': forms.Select(attrs={'class': 'form-select'}),
            'year': forms.NumberInput(attrs={'class': 'form-control'}),
            'shift': forms.Select(attrs={'class': 'form-select'}),
            'status': forms.Select(attrs={'class': 'form-select'}),
            'start_date': forms.DateInput(attrs={'class': 'form-control', 'type': 'date'}, format='%Y-%m-%d'),
            'end_date': forms.DateInput(attrs={'class': 'form-control', 'type': 'date'}, format='%Y-%m-%d'),
            'assigned_classroom': forms.Select(attrs={'class': 'form-select'}),
            'notes': forms.Textarea(attrs={'class': 'form-control', 'rows': 3}),
        }


class ChangeClassroomForm(forms.ModelForm):
    class Meta:
        model = ClassGroup
        fields = ['assigned_classroom']
        widgets = {
            'assigned_classroom': forms.Select(attrs={'class': 'form-select'}),
        }
        labels = {
            'assigned_classroom': 'Sala',
        }


class EventReservationForm(forms.ModelForm):
    class Meta:
        model = EventReservation
        fields = ['classroom', 'title', 'date', 'start_time', 'end_time', 'reserved_by', 'details']
        widgets = {
            'classroom': forms.Select(attrs={'class': 'form-select'}),
            'title': forms.TextInput(attrs={'class': 'form-control'}),
            'date': forms.DateInput(attrs={'class': 'form-control', 'type': 'date'}, format='%Y-%m-%d'),
            'start_time': forms.TimeInput(attrs={'class': 'form-control', 'type': 'time'}, format='%H:%M'),
            'end_time': forms.TimeInput(attrs={'class': 'form-control', 'type': 'time'}, format='%H:%M'),
            'reserved_by': forms.TextInput(attrs={'class': 'form-control'}),
            'details': forms.Textarea(attrs={'class': 'form-control', 'rows': 3}),
        }

    def clean_title(self):
        title = self.cleaned_data['title'].strip()
        if len(title) < 3:
            raise forms.ValidationError("O título do evento deve ter pelo menos 3 caracteres.")
        return title

    def clean(self):
        cleaned_data = super().clean()
        classroom = cleaned_data.get('classroom')
        start, end = cleaned_data.get('start_time'), cleaned_data.get('end_time')
        if not classroom or not cleaned_data.get('date') or not start or not end:
            return cleaned_data
        if start >= end:
            # Reported by the model's own validation
            return cleaned_data

        candidate = EventReservation(
            pk=self.instance.pk, classroom=classroom, title=cleaned_data.get('title', ''),
            date=cleaned_data['date'], start_time=start, end_time=end,
        ).to_domain()
        snapshot = load_snapshot()
        conflicts = find_event_conflicts(
            candidate, snapshot.event_reservations, snapshot.recurring_reservations, snapshot.class_groups,
        )
        if conflicts:
            first = conflicts[0]
            if first.kind is OccupancyKind.EVENT:
                message = f'Conflito: A sala "{classroom.name}" já tem o evento "{first.data.title}" neste dia e horário.'
            else:
                message = (f'Conflito: A sala "{classroom.name}" tem uma reserva recorrente '
                           f'("{first.data.purpose}") que colide com este dia e horário.')
            raise forms.ValidationError(message)
        return cleaned_data


class RecurringReservationForm(forms.ModelForm):
    number_of_classes = forms.IntegerField(
        min_value=1, max_value=100, label='Número de aulas',
        widget=forms.NumberInput(attrs={'class': 'form-control', 'placeholder': 'Ex: 10'}),
    )

    class Meta:
        model = RecurringReservation
        fields = ['class_group', 'classroom', 'start_date', 'purpose']
        widgets = {
            'class_group': forms.Select(attrs={'class': 'form-select'}),
            'classroom': forms.Select(attrs={'class': 'form-select'}),
            'start_date': forms.DateInput(attrs={'class': 'form-control', 'type': 'date'}, format='%Y-%m-%d'),
            'purpose': forms.TextInput(attrs={'class': 'form-control', 'placeholder': 'Ex: Aulas Regulares'}),
        }

    def clean_purpose(self):
        purpose = self.cleaned_data['purpose'].strip()
        if len(purpose) < 3:
            raise forms.ValidationError("O propósito deve ter pelo menos 3 caracteres.")
        return purpose

    def clean(self):
        cleaned_data = super().clean()
        group = cleaned_data.get('class_group')
        classroom = cleaned_data.get('classroom')
        start_date = cleaned_data.get('start_date')
        count = cleaned_data.get('number_of_classes')
        if not group or not classroom or not start_date or not count:
            return cleaned_data

        try:
            end_date = nth_occurrence_date(start_date, group.class_days, count)
        except OccurrenceSearchExhausted:
            raise forms.ValidationError(
                "Não foi possível calcular a data de término: a turma não tem dias de aula válidos."
            )
        # end_date is not a form field, so set it before model validation runs
        self.instance.end_date = end_date
        cleaned_data['end_date'] = end_date

        candidate = RecurringReservation(
            pk=self.instance.pk, class_group=group, classroom=classroom,
            start_date=start_date, end_date=end_date,
        ).to_domain()
        snapshot = load_snapshot()
        conflicts = find_recurring_conflicts(candidate, snapshot.recurring_reservations, snapshot.class_groups)
        if conflicts:
            conflict = conflicts[0]
            days = ', '.join(day.value for day in conflict.common_days)
            raise forms.ValidationError(
                f'Conflito: A sala já está reservada para a turma "{conflict.class_group.name}" '
                f'em dias ({days}) que se sobrepõem ao período solicitado.'
            )
        return cleaned_data


class OccurrencePreviewForm(forms.Form):
    class_group = forms.ModelChoiceField(queryset=ClassGroup.objects.all())
    start_date = forms.DateField()
    number_of_classes = forms.IntegerField(min_value=1, max_value=100)


class AnnouncementForm(forms.ModelForm):
    class Meta:
        model = Announcement
        fields = ['title', 'content', 'author', 'type', 'priority', 'published']
        widgets = {
            'title': forms.TextInput(attrs={'class': 'form-control'}),
            'content': forms.Textarea(attrs={'class': 'form-control', 'rows': 4}),
            'author': forms.TextInput(attrs={'class': 'form-control'}),
            'type': forms.Select(attrs={'class': 'form-select'}),
            'priority': forms.Select(attrs={'class': 'form-select'}),
            'published': forms.CheckboxInput(attrs={'class': 'form-check-input'}),
        }

    def clean_content(self):
        content = self.cleaned_data['content'].strip()
        if len(content) < 10:
            raise forms.ValidationError("O conteúdo deve ter pelo menos 10 caracteres.")
        return content


class AvailabilityFilterForm(forms.Form):
    date = forms.DateField(
        required=False, label='Data',
        widget=forms.DateInput(attrs={'class': 'form-control', 'type': 'date'}, format='%Y-%m-%d'),
    )
