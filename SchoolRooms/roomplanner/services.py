"""
Room availability engine.

Every function here is a pure computation over entity snapshots supplied by
the caller (see repository.ScheduleRepository). Nothing is cached: occupancy
is recomputed on each call so it can never drift from the stored entities.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple

from .domain import (
    WEEKDAYS, CellOccupancy, CellStatus, ClassGroup, ClassGroupStatus, Classroom,
    EventReservation, OccupancyItem, RecurringReservation, Shift, Weekday,
)
from .utils import (
    clock_range_overlaps_shift, date_in_range, date_ranges_overlap,
    effective_shift_and_date, time_ranges_overlap,
)

logger = logging.getLogger(__name__)

MAX_OCCURRENCE_LOOKAHEAD_DAYS = 730


class SchedulingError(Exception):
    """Base class for errors raised by the scheduling core."""


class OccurrenceSearchExhausted(SchedulingError):
    """No matching weekday was found within the lookahead window."""


@dataclass(frozen=True)
class ScheduleSnapshot:
    classrooms: Tuple[Classroom, ...] = ()
    class_groups: Tuple[ClassGroup, ...] = ()
    recurring_reservations: Tuple[RecurringReservation, ...] = ()
    event_reservations: Tuple[EventReservation, ...] = ()


# ============= OCCUPANCY =============

@dataclass
class DailyOccupancy:
    """Occupancy of every (classroom, shift) cell on one date."""
    day: date
    classrooms: Dict[str, Classroom] = field(default_factory=dict)
    cells: Dict[Tuple[str, Shift], List[OccupancyItem]] = field(default_factory=dict)

    def add(self, classroom_id: str, shift: Shift, item: OccupancyItem) -> None:
        self.cells.setdefault((classroom_id, shift), []).append(item)

    def get_cell_status(self, classroom_id: str, shift: Shift) -> CellOccupancy:
        classroom = self.classrooms.get(classroom_id)
        # Maintenance wins over anything that is booked
        if classroom is not None and classroom.is_under_maintenance:
            return CellOccupancy(
                CellStatus.MAINTENANCE, (), maintenance_reason=classroom.maintenance_reason,
            )
        items = tuple(self.cells.get((classroom_id, shift), ()))
        if items:
            return CellOccupancy(CellStatus.OCCUPIED, items)
        return CellOccupancy(CellStatus.FREE, ())


def _meets_on(day: date, start: date, end: date, class_days) -> bool:
    return date_in_range(day, start, end) and Weekday.of(day) in class_days


def compute_occupancy(
    day: date,
    classrooms: Iterable[Classroom],
    class_groups: Iterable[ClassGroup],
    recurring_reservations: Iterable[RecurringReservation],
    event_reservations: Iterable[EventReservation],
) -> DailyOccupancy:
    """
    Work out which rooms are taken on ``day`` and by what.

    Regular classes are added first, then recurring reservations, then events,
    so items inside a cell keep that order. Records with unusable dates or
    times are skipped and logged, they never abort the computation.
    """
    class_groups = list(class_groups)
    occupancy = DailyOccupancy(day=day, classrooms={c.id: c for c in classrooms})

    # 1. Regular classes
    for group in class_groups:
        if group.status is None:
            logger.warning("Skipping class group %s: unknown status", group.id)
            continue
        if group.status is not ClassGroupStatus.IN_PROGRESS or not group.assigned_classroom_id:
            continue
        if not group.has_valid_dates or group.shift is None:
            logger.warning("Skipping class group %s: invalid dates or shift", group.id)
            continue
        if _meets_on(day, group.start_date, group.end_date, group.class_days):
            occupancy.add(group.assigned_classroom_id, group.shift, OccupancyItem.for_class(group))

    # 2. Recurring reservations take shift and weekdays from their class group
    groups_by_id = {group.id: group for group in class_groups}
    for reservation in recurring_reservations:
        group = groups_by_id.get(reservation.class_group_id)
        if group is None:
            logger.warning(
                "Skipping recurring reservation %s: class group %s not found",
                reservation.id, reservation.class_group_id,
            )
            continue
        if reservation.start_date is None or reservation.end_date is None or group.shift is None:
            logger.warning("Skipping recurring reservation %s: invalid dates", reservation.id)
            continue
        if _meets_on(day, reservation.start_date, reservation.end_date, group.class_days):
            occupancy.add(reservation.classroom_id, group.shift, OccupancyItem.for_recurring(reservation))

    # 3. One-off events, possibly spanning several shifts
    for event in event_reservations:
        if event.date is None or event.start_time is None or event.end_time is None:
            logger.warning("Skipping event reservation %s: invalid date or time", event.id)
            continue
        if event.date != day:
            continue
        for shift in Shift:
            if clock_range_overlaps_shift(event.start_time, event.end_time, shift):
                occupancy.add(event.classroom_id, shift, OccupancyItem.for_event(event))

    logger.debug("Computed occupancy for %s: %d busy cells", day, len(occupancy.cells))
    return occupancy


class GridRow(NamedTuple):
    classroom: Classroom
    cells: List[Tuple[Shift, CellOccupancy]]


def build_availability_grid(snapshot: ScheduleSnapshot, day: date) -> List[GridRow]:
    """One row per classroom (sorted by name), one cell per shift."""
    occupancy = compute_occupancy(
        day,
        snapshot.classrooms,
        snapshot.class_groups,
        snapshot.recurring_reservations,
        snapshot.event_reservations,
    )
    rows = []
    for classroom in sorted(snapshot.classrooms, key=lambda c: c.name.lower()):
        cells = [(shift, occupancy.get_cell_status(classroom.id, shift)) for shift in Shift]
        rows.append(GridRow(classroom, cells))
    return rows


def free_classrooms(snapshot: ScheduleSnapshot, day: date, shift: Shift,
                    min_capacity: Optional[int] = None) -> List[Classroom]:
    """Classrooms that are free for a shift, smallest suitable room first."""
    rooms = []
    for row in build_availability_grid(snapshot, day):
        cell = dict(row.cells)[shift]
        if not cell.is_free:
            continue
        if min_capacity and (row.classroom.capacity or 0) < min_capacity:
            continue
        rooms.append(row.classroom)
    rooms.sort(key=lambda r: (r.capacity or 0, r.name.lower()))
    return rooms


# ============= LIVE DISPLAY =============

def filter_active_groups(all_groups: Iterable[ClassGroup], now: datetime) -> List[ClassGroup]:
    """Class groups being taught at ``now``, honouring the after-midnight rule."""
    shift, effective_date = effective_shift_and_date(now)
    if shift is None:
        return []

    weekday = Weekday.of(effective_date)
    active = []
    for group in all_groups:
        if group.status is not ClassGroupStatus.IN_PROGRESS or group.shift is not shift:
            continue
        if weekday not in group.class_days:
            continue
        # The whole end date counts, so comparing calendar dates is enough
        if not date_in_range(effective_date, group.start_date, group.end_date):
            continue
        active.append(group)
    return active


class LiveDisplayEntry(NamedTuple):
    group: ClassGroup
    classroom_name: Optional[str]
    classroom_capacity: Optional[int]
    is_under_maintenance: bool

    def as_dict(self) -> dict:
        return {
            'id': self.group.id,
            'groupName': self.group.name,
            'shift': self.group.shift.value,
            'classroomName': self.classroom_name,
            'classroomCapacity': self.classroom_capacity,
            'isUnderMaintenance': self.is_under_maintenance,
            'classDays': [day.value for day in WEEKDAYS if day in self.group.class_days],
            'startDate': self.group.start_date.isoformat(),
            'endDate': self.group.end_date.isoformat(),
            'status': self.group.status.value,
        }


def build_live_display(class_groups: Iterable[ClassGroup], classrooms: Iterable[Classroom],
                       now: datetime) -> List[LiveDisplayEntry]:
    rooms = {classroom.id: classroom for classroom in classrooms}
    entries = []
    for group in filter_active_groups(class_groups, now):
        room = rooms.get(group.assigned_classroom_id) if group.assigned_classroom_id else None
        entries.append(LiveDisplayEntry(
            group=group,
            classroom_name=room.name if room else None,
            classroom_capacity=room.capacity if room else None,
            is_under_maintenance=bool(room and room.is_under_maintenance),
        ))
    entries.sort(key=lambda entry: entry.group.name.lower())
    return entries


# ============= ROOM LOOKUP =============

# Class group names start with the course prefix, e.g. "ENF-N1"
COURSE_CATEGORIES: Tuple[Tuple[str, str], ...] = (
    ('Téc. em Farmácia', 'FMC'),
    ('Téc. em Radiologia', 'RAD'),
    ('Téc. em Enfermagem', 'ENF'),
    ('Administração', 'ADM'),
)
OTHER_COURSES_CATEGORY = 'Outros Cursos'


def course_category(group_name: str) -> str:
    upper = group_name.upper()
    for name, prefix in COURSE_CATEGORIES:
        if upper.startswith(prefix):
            return name
    return OTHER_COURSES_CATEGORY


def group_by_course_category(class_groups: Iterable[ClassGroup]) -> Dict[str, List[ClassGroup]]:
    """
    Class groups bucketed by course area for the room lookup page.

    Areas come out in the fixed order of COURSE_CATEGORIES with the catch-all
    last; empty areas are left out. Inside an area groups are sorted by name,
    then shift.
    """
    buckets = defaultdict(list)
    for group in class_groups:
        buckets[course_category(group.name)].append(group)

    ordered = {}
    for name in [name for name, _ in COURSE_CATEGORIES] + [OTHER_COURSES_CATEGORY]:
        if buckets.get(name):
            ordered[name] = sorted(
                buckets[name], key=lambda g: (g.name, g.shift.value if g.shift else ''),
            )
    return ordered


class RoomLookup(NamedTuple):
    group: ClassGroup
    classroom: Optional[Classroom]


def find_group_classroom(class_groups: Iterable[ClassGroup], classrooms: Iterable[Classroom],
                         group_id: str) -> Optional[RoomLookup]:
    """The room a class group is assigned to; None when the group does not exist."""
    group = next((g for g in class_groups if g.id == group_id), None)
    if group is None:
        return None
    room = None
    if group.assigned_classroom_id:
        room = next((c for c in classrooms if c.id == group.assigned_classroom_id), None)
    return RoomLookup(group, room)


# ============= RECURRING DATES =============

def _weekday_set(weekly_class_days) -> frozenset:
    return frozenset(Weekday(day) for day in weekly_class_days)


def nth_occurrence_date(start_date: date, weekly_class_days, n: int,
                        max_days: int = MAX_OCCURRENCE_LOOKAHEAD_DAYS) -> date:
    """
    Date of the ``n``-th class day on or after ``start_date``.

    Raises OccurrenceSearchExhausted when the n-th match is not reached
    within ``max_days`` days, which is what an empty weekday set produces.
    """
    if n < 1:
        raise ValueError(f"n must be at least 1, got {n}")

    days = _weekday_set(weekly_class_days)
    current = start_date
    count = 0
    for _ in range(max_days):
        if Weekday.of(current) in days:
            count += 1
            if count == n:
                return current
        current += timedelta(days=1)

    raise OccurrenceSearchExhausted(
        f"Occurrence #{n} not found within {max_days} days of {start_date.isoformat()} "
        f"for class days {sorted(d.value for d in days) or '(none)'}"
    )


class OccurrencePreview(NamedTuple):
    first_date: date
    end_date: date
    summary: str


def preview_recurring_reservation(start_date: date, weekly_class_days, n: int) -> OccurrencePreview:
    first = nth_occurrence_date(start_date, weekly_class_days, 1)
    last = nth_occurrence_date(start_date, weekly_class_days, n)
    if first != start_date:
        summary = (f"A 1ª aula será em {first:%d/%m/%y}. "
                   f"A {n}ª aula terminará em {last:%d/%m/%y}.")
    else:
        summary = f"A reserva terminará em {last:%d/%m/%y}."
    return OccurrencePreview(first, last, summary)


# ============= BOOKING CONFLICTS =============

def find_event_conflicts(
    candidate: EventReservation,
    event_reservations: Iterable[EventReservation],
    recurring_reservations: Iterable[RecurringReservation],
    class_groups: Iterable[ClassGroup],
) -> List[OccupancyItem]:
    """Existing bookings of the same room that clash with a new event."""
    if candidate.date is None:
        return []
    conflicts = []

    for event in event_reservations:
        if event.id == candidate.id or event.classroom_id != candidate.classroom_id:
            continue
        if event.date == candidate.date and time_ranges_overlap(
                candidate.start_time, candidate.end_time, event.start_time, event.end_time):
            conflicts.append(OccupancyItem.for_event(event))

    groups_by_id = {group.id: group for group in class_groups}
    weekday = Weekday.of(candidate.date)
    for reservation in recurring_reservations:
        if reservation.classroom_id != candidate.classroom_id:
            continue
        group = groups_by_id.get(reservation.class_group_id)
        if group is None or group.shift is None:
            continue
        if not _meets_on(candidate.date, reservation.start_date, reservation.end_date, group.class_days):
            continue
        if clock_range_overlaps_shift(candidate.start_time, candidate.end_time, group.shift):
            logger.debug("Event on %s (%s) clashes with recurring reservation %s",
                         candidate.date, weekday.value, reservation.id)
            conflicts.append(OccupancyItem.for_recurring(reservation))

    return conflicts


class RecurringConflict(NamedTuple):
    reservation: RecurringReservation
    class_group: ClassGroup
    common_days: Tuple[Weekday, ...]


def find_recurring_conflicts(
    candidate: RecurringReservation,
    recurring_reservations: Iterable[RecurringReservation],
    class_groups: Iterable[ClassGroup],
) -> List[RecurringConflict]:
    """
    Recurring reservations of the same room that overlap the candidate's dates
    and share at least one class day with it.
    """
    groups_by_id = {group.id: group for group in class_groups}
    candidate_group = groups_by_id.get(candidate.class_group_id)
    if candidate_group is None:
        return []

    conflicts = []
    for existing in recurring_reservations:
        if existing.id == candidate.id or existing.classroom_id != candidate.classroom_id:
            continue
        if not date_ranges_overlap(candidate.start_date, candidate.end_date,
                                   existing.start_date, existing.end_date):
            continue
        existing_group = groups_by_id.get(existing.class_group_id)
        if existing_group is None:
            continue
        common = tuple(day for day in WEEKDAYS
                       if day in candidate_group.class_days and day in existing_group.class_days)
        if common:
            conflicts.append(RecurringConflict(existing, existing_group, common))
    return conflicts


# ============= DASHBOARD =============

def dashboard_stats(class_groups: Sequence[ClassGroup], classrooms: Sequence[Classroom]) -> dict:
    statuses = [group.status for group in class_groups]
    return {
        'total_class_groups': len(class_groups),
        'active_class_groups': statuses.count(ClassGroupStatus.IN_PROGRESS),
        'planned_class_groups': statuses.count(ClassGroupStatus.PLANNED),
        'total_classrooms': len(classrooms),
        'classrooms_in_maintenance': sum(1 for c in classrooms if c.is_under_maintenance),
    }


def weekday_occupancy_chart(class_groups: Iterable[ClassGroup]) -> Tuple[List[str], List[int]]:
    """Number of running class groups with a classroom, per weekday."""
    counts = defaultdict(int)
    for group in class_groups:
        if group.status is not ClassGroupStatus.IN_PROGRESS or not group.assigned_classroom_id:
            continue
        for day in group.class_days:
            counts[day] += 1
    labels = [day.value[:3] for day in WEEKDAYS]
    data = [counts[day] for day in WEEKDAYS]
    return labels, data
