import os

# Keep the tests off the development database file
os.environ.setdefault('DATABASE_URL', 'sqlite://')

import pytest

from app import create_app
from models import db, Subject, Group, TimeSlot, Weekday


@pytest.fixture()
def app():
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


def make_subject(code, groups, name=None):
    """
    Build an unsaved subject.

    groups: list of (number, [(days, start, end)]) or
    (number, [(days, start, end)], capacity_available)
    """
    subject = Subject(code=code, name=name or f'Subject {code}')
    for entry in groups:
        number, slots = entry[0], entry[1]
        available = entry[2] if len(entry) > 2 else 10
        subject.groups.append(Group(
            number=number,
            capacity_max=40,
            capacity_available=available,
            professor=None,
            time_slots=[
                TimeSlot(days=days, start_hour=start, end_hour=end, room=None)
                for days, start, end in slots
            ]
        ))
    return subject


@pytest.fixture()
def scenario_a():
    """A1 Mon 8-10, A2 Mon 10-12; B1 Mon 9-10 (clashes with A1 only)."""
    return [
        make_subject('A', [('A1', [(Weekday.MON, 8, 10)]), ('A2', [(Weekday.MON, 10, 12)])]),
        make_subject('B', [('B1', [(Weekday.MON, 9, 10)])]),
    ]
