from django.core.exceptions import ValidationError
from django.db import models

from . import domain

SHIFT_CHOICES = [(shift.value, shift.value) for shift in domain.Shift]
STATUS_CHOICES = [(status.value, status.value) for status in domain.ClassGroupStatus]
DAY_CHOICES = [(day.value, day.value) for day in domain.WEEKDAYS]


# ============= CLASSROOM MODEL =============
class Classroom(models.Model):
    name = models.CharField(max_length=100, unique=True)
    capacity = models.PositiveIntegerField(null=True, blank=True)
    resources = models.CharField(max_length=255, blank=True, help_text="Separados por vírgula")
    is_lab = models.BooleanField(default=False)
    is_under_maintenance = models.BooleanField(default=False)
    maintenance_reason = models.CharField(max_length=200, blank=True)

    def clean(self):
        # A room in maintenance must say why
        if self.is_under_maintenance and not self.maintenance_reason.strip():
            raise ValidationError({
                'maintenance_reason': "O motivo da manutenção é obrigatório quando a sala está em manutenção."
            })

    @property
    def resource_list(self):
        return [r.strip() for r in self.resources.split(',') if r.strip()]

    def to_domain(self):
        return domain.Classroom(
            id=str(self.pk),
            name=self.name,
            capacity=self.capacity,
            is_under_maintenance=self.is_under_maintenance,
            maintenance_reason=self.maintenance_reason,
        )

    def __str__(self):
        return self.name

    class Meta:
        ordering = ['name']


# ============= COURSE MODEL =============
class Course(models.Model):
    name = models.CharField(max_length=200, unique=True)
    code = models.CharField(max_length=20, blank=True)
    description = models.TextField(blank=True)

    def __str__(self):
        return f"{self.code} - {self.name}" if self.code else self.name

    class Meta:
        ordering = ['name']


# ============= CLASS GROUP MODEL =============
class ClassGroup(models.Model):
    """A cohort following a course on fixed weekdays between two dates"""
    name = models.CharField(max_length=100)
    course = models.ForeignKey(Course, null=True, blank=True, on_delete=models.PROTECT)
    year = models.PositiveIntegerField(null=True, blank=True)
    shift = models.CharField(max_length=10, choices=SHIFT_CHOICES)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES,
                              default=domain.ClassGroupStatus.PLANNED.value)
    start_date = models.DateField()
    end_date = models.DateField()
    assigned_classroom = models.ForeignKey(Classroom, null=True, blank=True,
                                           on_delete=models.PROTECT, related_name='class_groups')
    class_days = models.JSONField(default=list)
    notes = models.TextField(blank=True)

    def save(self, *args, **kwargs):
        # Keep weekdays unique and in calendar order
        days = domain.parse_weekdays(self.class_days)
        self.class_days = [day.value for day in domain.WEEKDAYS if day in days]
        super().save(*args, **kwargs)

    def clean(self):
        errors = {}
        if self.start_date and self.end_date and self.start_date > self.end_date:
            errors['end_date'] = "A data de término deve ser igual ou posterior à data de início."
        if not self.class_days:
            errors['class_days'] = "Pelo menos um dia da semana deve ser selecionado."
        if errors:
            raise ValidationError(errors)

    def to_domain(self):
        return domain.ClassGroup(
            id=str(self.pk),
            name=self.name,
            shift=domain.parse_enum(domain.Shift, self.shift),
            status=domain.parse_enum(domain.ClassGroupStatus, self.status),
            start_date=self.start_date,
            end_date=self.end_date,
            class_days=domain.parse_weekdays(self.class_days),
            assigned_classroom_id=str(self.assigned_classroom_id) if self.assigned_classroom_id else None,
            year=self.year,
            course=self.course.name if self.course_id else '',
        )

    def __str__(self):
        return f"{self.name} ({self.shift})"

    class Meta:
        ordering = ['name']
        verbose_name = "Class Group"
        verbose_name_plural = "Class Groups"


# ============= RECURRING RESERVATION =============
class RecurringReservation(models.Model):
    """Room booked for every class day of a class group in a date range"""
    class_group = models.ForeignKey(ClassGroup, on_delete=models.CASCADE,
                                    related_name='recurring_reservations')
    classroom = models.ForeignKey(Classroom, on_delete=models.PROTECT,
                                  related_name='recurring_reservations')
    start_date = models.DateField()
    end_date = models.DateField()
    purpose = models.CharField(max_length=100)
    created_at = models.DateTimeField(auto_now_add=True)

    def clean(self):
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValidationError("A data de início deve ser anterior à data de término.")

    def to_domain(self):
        return domain.RecurringReservation(
            id=str(self.pk) if self.pk else '',
            class_group_id=str(self.class_group_id),
            classroom_id=str(self.classroom_id),
            start_date=self.start_date,
            end_date=self.end_date,
            purpose=self.purpose,
        )

    def __str__(self):
        return f"{self.classroom} - {self.class_group.name} ({self.start_date} a {self.end_date})"

    class Meta:
        ordering = ['start_date']


# ============= EVENT RESERVATION =============
class EventReservation(models.Model):
    classroom = models.ForeignKey(Classroom, on_delete=models.PROTECT,
                                  related_name='event_reservations')
    title = models.CharField(max_length=100)
    date = models.DateField()
    start_time = models.TimeField()
    end_time = models.TimeField()
    reserved_by = models.CharField(max_length=100)
    details = models.TextField(blank=True, max_length=500)
    created_at = models.DateTimeField(auto_now_add=True)

    def clean(self):
        if self.start_time and self.end_time and self.start_time >= self.end_time:
            raise ValidationError({'end_time': "A hora de início deve ser anterior à hora de fim."})

    def to_domain(self):
        return domain.EventReservation(
            id=str(self.pk) if self.pk else '',
            classroom_id=str(self.classroom_id),
            title=self.title,
            date=self.date,
            start_time=domain.parse_clock_time(self.start_time),
            end_time=domain.parse_clock_time(self.end_time),
            reserved_by=self.reserved_by,
            details=self.details,
        )

    def __str__(self):
        return f"{self.title} - {self.date} {self.start_time:%H:%M}-{self.end_time:%H:%M}"

    class Meta:
        ordering = ['-date', 'start_time']


# ============= ANNOUNCEMENT =============
class Announcement(models.Model):
    TYPE_CHOICES = [
        ('Notícia', 'Notícia'),
        ('Comunicado', 'Comunicado'),
    ]
    PRIORITY_CHOICES = [
        ('Normal', 'Normal'),
        ('Urgente', 'Urgente'),
    ]

    title = models.CharField(max_length=150)
    content = models.TextField()
    author = models.CharField(max_length=100)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='Notícia')
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default='Normal')
    published = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.title

    class Meta:
        ordering = ['-created_at']
