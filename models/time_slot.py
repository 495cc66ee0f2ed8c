import enum
from .database import db


class Weekday(enum.IntFlag):
    """Closed set of teaching days. Combine with ``|``, test overlap with ``&``."""

    MON = 1
    TUE = 2
    WED = 4
    THU = 8
    FRI = 16
    SAT = 32


# Ordered Monday -> Saturday
WEEKDAYS = [Weekday.MON, Weekday.TUE, Weekday.WED, Weekday.THU, Weekday.FRI, Weekday.SAT]

NO_DAYS = Weekday(0)

# Day letters used by the university timetable ("MJ6-8" = Tuesday and Thursday)
DAY_LETTERS = {
    'L': Weekday.MON,
    'M': Weekday.TUE,
    'W': Weekday.WED,
    'J': Weekday.THU,
    'V': Weekday.FRI,
    'S': Weekday.SAT,
}

DAY_NAMES = {
    'LUNES': Weekday.MON,
    'MARTES': Weekday.TUE,
    'MIERCOLES': Weekday.WED,
    'MIÉRCOLES': Weekday.WED,
    'JUEVES': Weekday.THU,
    'VIERNES': Weekday.FRI,
    'SABADO': Weekday.SAT,
    'SÁBADO': Weekday.SAT,
    'MONDAY': Weekday.MON,
    'TUESDAY': Weekday.TUE,
    'WEDNESDAY': Weekday.WED,
    'THURSDAY': Weekday.THU,
    'FRIDAY': Weekday.FRI,
    'SATURDAY': Weekday.SAT,
}

# Hours the university timetable can hold
EARLIEST_HOUR = 6
LATEST_HOUR = 22


def day_from_name(name):
    """Resolve 'MON', 'Lunes', 'monday' or a single day letter to a Weekday."""
    key = str(name).strip().upper()
    if key in Weekday.__members__:
        return Weekday[key]
    if key in DAY_NAMES:
        return DAY_NAMES[key]
    if key in DAY_LETTERS:
        return DAY_LETTERS[key]
    raise ValueError(f'Unknown weekday: {name!r}')


def parse_day_letters(letters):
    """Parse a day-letter string like 'LW' into a Weekday flag."""
    days = NO_DAYS
    for letter in letters.strip().upper():
        if letter not in DAY_LETTERS:
            raise ValueError(f'Unknown day letter {letter!r} in {letters!r}')
        days |= DAY_LETTERS[letter]
    return days


def days_to_letters(days):
    reverse = {day: letter for letter, day in DAY_LETTERS.items()}
    return ''.join(reverse[day] for day in WEEKDAYS if day & days)


def iter_days(days):
    """Yield the individual weekdays of a flag in Monday -> Saturday order."""
    for day in WEEKDAYS:
        if day & days:
            yield day


class TimeSlot(db.Model):
    """A recurring weekly meeting of a group: days, start/end hour and room."""

    __tablename__ = 'time_slots'

    id = db.Column(db.Integer, primary_key=True)
    group_id = db.Column(db.Integer, db.ForeignKey('groups.id'), nullable=False)
    room = db.Column(db.String(50), nullable=True)  # e.g. "19314", "INGENIA"
    days_mask = db.Column(db.Integer, nullable=False, default=0)
    start_hour = db.Column(db.Integer, nullable=False)
    end_hour = db.Column(db.Integer, nullable=False)

    @property
    def days(self):
        return Weekday(self.days_mask or 0)

    @days.setter
    def days(self, value):
        self.days_mask = int(value)

    @property
    def days_abbrev(self):
        return days_to_letters(self.days)

    def __repr__(self):
        return f'<TimeSlot {self.days_abbrev}{self.start_hour}-{self.end_hour} {self.room or ""}>'

    def duration(self):
        """Length of one meeting in hours."""
        return self.end_hour - self.start_hour

    def day_count(self):
        return bin(self.days_mask or 0).count('1')

    def is_valid(self):
        return (
            self.day_count() > 0
            and isinstance(self.start_hour, int)
            and isinstance(self.end_hour, int)
            and EARLIEST_HOUR <= self.start_hour < self.end_hour <= LATEST_HOUR
        )

    def to_dict(self):
        return {
            'room': self.room,
            'days': [day.name for day in iter_days(self.days)],
            'days_abbrev': self.days_abbrev,
            'start_hour': self.start_hour,
            'end_hour': self.end_hour
        }

    @classmethod
    def from_dict(cls, data):
        """
        Build a transient slot from JSON.

        Accepts ``days`` as a list of day names/letters or a letter string,
        or ``days_abbrev``/``diasAbrev`` letters. Hour keys may be snake_case
        or the camelCase sent by the web frontend.
        """
        raw_days = data.get('days', data.get('dias'))
        if raw_days is None:
            raw_days = data.get('days_abbrev', data.get('diasAbrev', ''))

        if isinstance(raw_days, str):
            days = parse_day_letters(raw_days)
        else:
            days = NO_DAYS
            for name in raw_days:
                days |= day_from_name(name)

        start = data.get('start_hour', data.get('horaInicio'))
        end = data.get('end_hour', data.get('horaFin'))
        if not isinstance(start, int) or not isinstance(end, int):
            raise ValueError(f'Time slot hours must be integers, got {start!r}-{end!r}')

        return cls(
            room=data.get('room', data.get('aula')),
            days=days,
            start_hour=start,
            end_hour=end
        )
