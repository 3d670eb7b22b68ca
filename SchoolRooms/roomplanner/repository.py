import logging

from django.db import transaction

from .models import Classroom, ClassGroup, EventReservation, RecurringReservation
from .services import ScheduleSnapshot

logger = logging.getLogger(__name__)


class ScheduleRepository:
    """
    Read side of the database for the scheduling engine.

    Views build one of these and hand the resulting value objects to
    ``services``; the engine itself never touches the ORM. Used as a context
    manager, all reads happen inside one transaction so a snapshot is
    consistent.
    """

    def __init__(self, using=None):
        self.using = using
        self._atomic = None

    def __enter__(self):
        self._atomic = transaction.atomic(using=self.using)
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        atomic, self._atomic = self._atomic, None
        return atomic.__exit__(exc_type, exc_value, traceback)

    def _manager(self, model):
        if self.using:
            return model.objects.using(self.using)
        return model.objects

    def list_classrooms(self):
        return [room.to_domain() for room in self._manager(Classroom).all()]

    def list_class_groups(self):
        groups = self._manager(ClassGroup).select_related('course')
        return [group.to_domain() for group in groups]

    def list_recurring_reservations(self):
        return [res.to_domain() for res in self._manager(RecurringReservation).all()]

    def list_event_reservations(self):
        return [event.to_domain() for event in self._manager(EventReservation).all()]

    def snapshot(self):
        snapshot = ScheduleSnapshot(
            classrooms=tuple(self.list_classrooms()),
            class_groups=tuple(self.list_class_groups()),
            recurring_reservations=tuple(self.list_recurring_reservations()),
            event_reservations=tuple(self.list_event_reservations()),
        )
        logger.debug(
            "Loaded snapshot: %d classrooms, %d class groups, %d recurring, %d events",
            len(snapshot.classrooms), len(snapshot.class_groups),
            len(snapshot.recurring_reservations), len(snapshot.event_reservations),
        )
        return snapshot


def load_snapshot():
    with ScheduleRepository() as repository:
        return repository.snapshot()
