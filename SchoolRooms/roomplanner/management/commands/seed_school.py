from datetime import date, time, timedelta

from django.core.management.base import BaseCommand
from django.db import transaction

from roomplanner.models import (
    Announcement, Classroom, ClassGroup, Course, EventReservation, RecurringReservation,
)
from roomplanner.services import nth_occurrence_date


class Command(BaseCommand):
    help = 'Populates classrooms, courses, class groups and reservations with sample data'

    def add_arguments(self, parser):
        parser.add_argument('--flush', action='store_true',
                            help='Delete existing classrooms, class groups and reservations first')

    def handle(self, *args, **options):
        self.stdout.write("Populating sample school data...")
        today = date.today()

        with transaction.atomic():
            if options['flush']:
                self.stdout.write("   Clearing old data (reservations, class groups, courses, classrooms)...")
                EventReservation.objects.all().delete()
                RecurringReservation.objects.all().delete()
                ClassGroup.objects.all().delete()
                Course.objects.all().delete()
                Classroom.objects.all().delete()

            # 1. CLASSROOMS
            self.stdout.write("   Creating classrooms...")
            rooms = {}
            for i in range(1, 7):
                rooms[i], _ = Classroom.objects.get_or_create(
                    name=f"Sala {i:02d}", defaults={'capacity': 30 + i * 2, 'resources': 'Projetor, Quadro'},
                )
            lab, _ = Classroom.objects.get_or_create(
                name="Laboratório 1", defaults={'capacity': 20, 'is_lab': True, 'resources': 'Computadores'},
            )
            Classroom.objects.get_or_create(
                name="Sala 07",
                defaults={'capacity': 30, 'is_under_maintenance': True, 'maintenance_reason': 'Troca do piso'},
            )

            # 2. COURSES
            self.stdout.write("   Creating courses...")
            catalog = {
                'ADM': 'Assistente Administrativo',
                'INF': 'Informática Básica',
                'ENF': 'Técnico em Enfermagem',
                'LOG': 'Logística',
            }
            courses = {
                code: Course.objects.get_or_create(name=name, defaults={'code': code})[0]
                for code, name in catalog.items()
            }

            # 3. CLASS GROUPS
            self.stdout.write("   Creating class groups...")
            plan = [
                ('ADM-M1', 'ADM', 'Manhã', ['Segunda', 'Quarta'], rooms[1]),
                ('INF-T1', 'INF', 'Tarde', ['Terça', 'Quinta'], lab),
                ('ENF-N1', 'ENF', 'Noite', ['Segunda', 'Terça', 'Quarta', 'Quinta', 'Sexta'], rooms[2]),
                ('LOG-M1', 'LOG', 'Manhã', ['Sexta'], rooms[3]),
            ]
            groups = []
            for name, code, shift, days, room in plan:
                group, created = ClassGroup.objects.get_or_create(
                    name=name,
                    defaults={
                        'course': courses[code],
                        'year': today.year,
                        'shift': shift,
                        'status': 'Em Andamento',
                        'start_date': today - timedelta(days=30),
                        'end_date': today + timedelta(days=120),
                        'class_days': days,
                        'assigned_classroom': room,
                    },
                )
                groups.append(group)
                if not created:
                    self.stdout.write(self.style.WARNING(f"   Class group {name} already exists, kept as is."))

            ClassGroup.objects.get_or_create(
                name='ADM-T2',
                defaults={
                    'course': courses['ADM'], 'year': today.year, 'shift': 'Tarde', 'status': 'Planejada',
                    'start_date': today + timedelta(days=60), 'end_date': today + timedelta(days=200),
                    'class_days': ['Segunda', 'Quarta'],
                },
            )

            # 4. RESERVATIONS
            self.stdout.write("   Creating reservations...")
            informatics = groups[1]
            if not RecurringReservation.objects.filter(class_group=informatics, classroom=rooms[4]).exists():
                RecurringReservation.objects.create(
                    class_group=informatics,
                    classroom=rooms[4],
                    start_date=today,
                    end_date=nth_occurrence_date(today, informatics.class_days, 10),
                    purpose='Aulas de reforço',
                )
            EventReservation.objects.get_or_create(
                classroom=rooms[5], title='Palestra de boas-vindas', date=today,
                defaults={'start_time': time(11, 30), 'end_time': time(12, 30), 'reserved_by': 'Coordenação'},
            )

            Announcement.objects.get_or_create(
                title='Bem-vindos ao novo semestre',
                defaults={'content': 'As aulas do novo semestre começam nesta semana.', 'author': 'Secretaria'},
            )

        self.stdout.write(self.style.SUCCESS("Sample data created."))
