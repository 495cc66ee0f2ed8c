from .database import db
from .program import Program
from .subject import Subject
from .group import Group
from .time_slot import TimeSlot, Weekday, WEEKDAYS

__all__ = ['db', 'Program', 'Subject', 'Group', 'TimeSlot', 'Weekday', 'WEEKDAYS']
