"""Value types shared by the scheduling core.

Everything here is plain Python: dates and clock times are parsed once, when a
record enters the core, and carried around as ``datetime.date`` /
``datetime.time`` afterwards. A value that cannot be parsed becomes ``None``;
the aggregation code treats such records as "not schedulable" and skips them.
"""
import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import Any, FrozenSet, Iterable, Mapping, Optional, Tuple, Union

logger = logging.getLogger(__name__)


# ============= ENUMERATIONS =============

class Shift(str, Enum):
    MORNING = 'Manhã'
    AFTERNOON = 'Tarde'
    EVENING = 'Noite'


class ClassGroupStatus(str, Enum):
    PLANNED = 'Planejada'
    IN_PROGRESS = 'Em Andamento'
    COMPLETED = 'Concluída'
    CANCELLED = 'Cancelada'


class Weekday(str, Enum):
    # Declared Monday first so the position matches date.weekday()
    MONDAY = 'Segunda'
    TUESDAY = 'Terça'
    WEDNESDAY = 'Quarta'
    THURSDAY = 'Quinta'
    FRIDAY = 'Sexta'
    SATURDAY = 'Sábado'
    SUNDAY = 'Domingo'

    @classmethod
    def of(cls, day: date) -> 'Weekday':
        return WEEKDAYS[day.weekday()]


WEEKDAYS: Tuple[Weekday, ...] = tuple(Weekday)


class CellStatus(str, Enum):
    FREE = 'Livre'
    OCCUPIED = 'Ocupada'
    MAINTENANCE = 'Manutenção'


class OccupancyKind(str, Enum):
    CLASS = 'class'
    RECURRING = 'recurring'
    EVENT = 'event'


# ============= PARSING =============

CLOCK_TIME_PATTERN = re.compile(r'([01]\d|2[0-3]):([0-5]\d)')


def parse_iso_date(value: Any) -> Optional[date]:
    """Return the calendar date of an ISO date or timestamp, or None.

    Accepts ``YYYY-MM-DD``, full ISO timestamps (the time part is dropped, no
    timezone conversion) and already-parsed ``date``/``datetime`` values.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    try:
        if len(text) > 10:
            return datetime.fromisoformat(text.replace('Z', '+00:00')).date()
        return date.fromisoformat(text)
    except ValueError:
        return None


def parse_clock_time(value: Any) -> Optional[time]:
    """Parse a 24h ``HH:mm`` string. Anything else gives None."""
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    if not isinstance(value, str):
        return None
    match = CLOCK_TIME_PATTERN.fullmatch(value)
    if not match:
        return None
    return time(int(match.group(1)), int(match.group(2)))


def parse_enum(enum_cls, value):
    try:
        return enum_cls(value)
    except ValueError:
        return None


def parse_weekdays(values: Optional[Iterable[Any]]) -> FrozenSet[Weekday]:
    """Build a weekday set, silently dropping names that are not weekdays."""
    days = set()
    for value in values or ():
        day = parse_enum(Weekday, value)
        if day is None:
            logger.warning("Ignoring unknown weekday %r", value)
            continue
        days.add(day)
    return frozenset(days)


def _as_id(value: Any) -> Optional[str]:
    if value is None or value == '':
        return None
    return str(value)


# ============= ENTITIES =============

@dataclass(frozen=True)
class Classroom:
    id: str
    name: str
    capacity: Optional[int] = None
    is_under_maintenance: bool = False
    maintenance_reason: str = ''

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> 'Classroom':
        return cls(
            id=str(record['id']),
            name=record.get('name', ''),
            capacity=record.get('capacity'),
            is_under_maintenance=bool(record.get('is_under_maintenance', False)),
            maintenance_reason=record.get('maintenance_reason') or '',
        )


@dataclass(frozen=True)
class ClassGroup:
    id: str
    name: str
    shift: Optional[Shift]
    status: Optional[ClassGroupStatus]
    start_date: Optional[date]
    end_date: Optional[date]
    class_days: FrozenSet[Weekday] = frozenset()
    assigned_classroom_id: Optional[str] = None
    year: Optional[int] = None
    course: str = ''

    @property
    def has_valid_dates(self) -> bool:
        return self.start_date is not None and self.end_date is not None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> 'ClassGroup':
        return cls(
            id=str(record['id']),
            name=record.get('name', ''),
            shift=parse_enum(Shift, record.get('shift')),
            status=parse_enum(ClassGroupStatus, record.get('status')),
            start_date=parse_iso_date(record.get('start_date')),
            end_date=parse_iso_date(record.get('end_date')),
            class_days=parse_weekdays(record.get('class_days')),
            assigned_classroom_id=_as_id(record.get('assigned_classroom_id')),
            year=record.get('year'),
            course=record.get('course') or '',
        )


@dataclass(frozen=True)
class RecurringReservation:
    id: str
    class_group_id: str
    classroom_id: str
    start_date: Optional[date]
    end_date: Optional[date]
    purpose: str = ''

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> 'RecurringReservation':
        return cls(
            id=str(record['id']),
            class_group_id=str(record['class_group_id']),
            classroom_id=str(record['classroom_id']),
            start_date=parse_iso_date(record.get('start_date')),
            end_date=parse_iso_date(record.get('end_date')),
            purpose=record.get('purpose') or '',
        )


@dataclass(frozen=True)
class EventReservation:
    id: str
    classroom_id: str
    title: str
    date: Optional[date]
    start_time: Optional[time]
    end_time: Optional[time]
    reserved_by: str = ''
    details: str = ''

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> 'EventReservation':
        return cls(
            id=str(record['id']),
            classroom_id=str(record['classroom_id']),
            title=record.get('title', ''),
            date=parse_iso_date(record.get('date')),
            start_time=parse_clock_time(record.get('start_time')),
            end_time=parse_clock_time(record.get('end_time')),
            reserved_by=record.get('reserved_by') or '',
            details=record.get('details') or '',
        )


# ============= DERIVED =============

OccupancyPayload = Union[ClassGroup, RecurringReservation, EventReservation]


@dataclass(frozen=True)
class OccupancyItem:
    """One reason a room is taken during a shift, tagged by where it came from."""
    kind: OccupancyKind
    data: OccupancyPayload

    @classmethod
    def for_class(cls, group: ClassGroup) -> 'OccupancyItem':
        return cls(OccupancyKind.CLASS, group)

    @classmethod
    def for_recurring(cls, reservation: RecurringReservation) -> 'OccupancyItem':
        return cls(OccupancyKind.RECURRING, reservation)

    @classmethod
    def for_event(cls, event: EventReservation) -> 'OccupancyItem':
        return cls(OccupancyKind.EVENT, event)

    @property
    def label(self) -> str:
        if self.kind is OccupancyKind.CLASS:
            return self.data.name
        if self.kind is OccupancyKind.RECURRING:
            return self.data.purpose
        return self.data.title


@dataclass(frozen=True)
class CellOccupancy:
    status: CellStatus
    items: Tuple[OccupancyItem, ...] = field(default_factory=tuple)
    maintenance_reason: str = ''

    @property
    def is_free(self) -> bool:
        return self.status is CellStatus.FREE
