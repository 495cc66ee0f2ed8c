"""Seed data script to populate the database with a sample engineering program."""

from models import db, Program, Subject, Group, TimeSlot, Weekday


def _slot(days, start, end, room):
    return TimeSlot(days=days, start_hour=start, end_hour=end, room=room)


def seed_database():
    """Replace stored programs with one sample semester."""

    # Clear existing data
    for program in Program.query.all():
        db.session.delete(program)
    db.session.flush()

    program = Program(
        code='504',
        name='INGENIERÍA DE SISTEMAS',
        faculty='FACULTAD DE INGENIERÍA',
        semester='20261',
        fetched_on='2026-01-26'
    )

    # (code, name, [(group, max, available, professor, [(days, start, end, room)])])
    subjects_data = [
        ('2554210', 'ESTRUCTURAS DE DATOS', [
            ('1', 40, 15, 'JUAN PÉREZ', [(Weekday.MON | Weekday.WED, 8, 10, '19314')]),
            ('2', 40, 3, 'MARÍA GÓMEZ', [(Weekday.TUE | Weekday.THU, 10, 12, '19213')]),
            ('3', 35, 0, 'JUAN PÉREZ', [(Weekday.MON | Weekday.WED, 14, 16, '19314')]),
        ]),
        ('2554211', 'BASES DE DATOS', [
            ('1', 40, 20, 'CARLOS RESTREPO', [(Weekday.MON | Weekday.WED, 10, 12, '20238')]),
            ('2', 40, 8, 'ANA MARÍA ZAPATA', [(Weekday.TUE, 6, 8, '20238'), (Weekday.THU, 6, 8, 'INGENIA')]),
        ]),
        ('2554212', 'SISTEMAS OPERATIVOS', [
            ('1', 30, 12, 'LUIS FERNANDO MEJÍA', [(Weekday.TUE | Weekday.THU, 8, 10, '19207')]),
            ('2', 30, 5, 'LUIS FERNANDO MEJÍA', [(Weekday.WED, 8, 10, '19207'), (Weekday.FRI, 10, 12, '19207')]),
        ]),
        ('2554213', 'CÁLCULO NUMÉRICO', [
            ('1', 45, 30, 'SANDRA OSORIO', [(Weekday.MON | Weekday.WED, 12, 14, '21105')]),
            ('2', 45, 25, 'PEDRO ARANGO', [(Weekday.FRI, 14, 18, '21105')]),
        ]),
        ('2554214', 'INGLÉS IV', [
            ('1', 25, 10, None, [(Weekday.SAT, 8, 12, '12201')]),
            ('2', 25, 2, None, [(Weekday.TUE | Weekday.THU, 16, 18, '12201')]),
        ]),
    ]

    for code, name, groups_data in subjects_data:
        subject = Subject(code=code, name=name)
        for number, capacity_max, available, professor, slots in groups_data:
            subject.groups.append(Group(
                number=number,
                capacity_max=capacity_max,
                capacity_available=available,
                professor=professor,
                time_slots=[_slot(*s) for s in slots]
            ))
        program.subjects.append(subject)

    db.session.add(program)
    db.session.commit()
    print("Database seeded successfully!")


if __name__ == '__main__':
    from app import app

    with app.app_context():
        seed_database()
