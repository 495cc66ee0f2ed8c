from .database import db
from .time_slot import TimeSlot


class Group(db.Model):
    """One offered section of a subject, with its own meeting times, professor and capacity."""

    __tablename__ = 'groups'

    id = db.Column(db.Integer, primary_key=True)
    subject_id = db.Column(db.Integer, db.ForeignKey('subjects.id'), nullable=False)
    number = db.Column(db.String(20), nullable=False)  # e.g. "1", "02"
    capacity_max = db.Column(db.Integer, default=0)
    capacity_available = db.Column(db.Integer, default=0)
    professor = db.Column(db.String(200), nullable=True)

    # Meeting times, kept in catalog order
    time_slots = db.relationship(
        'TimeSlot', backref='group', order_by=TimeSlot.id, cascade='all, delete-orphan'
    )

    def __repr__(self):
        return f'<Group {self.number} ({self.capacity_available}/{self.capacity_max})>'

    def has_capacity(self):
        return (self.capacity_available or 0) > 0

    def invalid_slots(self):
        return [slot for slot in self.time_slots if not slot.is_valid()]

    def is_valid(self):
        # A group without slots is still valid; the generator just never picks it
        return (
            bool(self.number)
            and isinstance(self.capacity_max, int)
            and isinstance(self.capacity_available, int)
            and self.capacity_available >= 0
            and not self.invalid_slots()
        )

    def to_dict(self):
        return {
            'number': self.number,
            'capacity_max': self.capacity_max,
            'capacity_available': self.capacity_available,
            'professor': self.professor,
            'time_slots': [slot.to_dict() for slot in self.time_slots]
        }

    @classmethod
    def from_dict(cls, data):
        number = data.get('number', data.get('numero'))
        if number is None or str(number).strip() == '':
            raise ValueError('Group number is required')

        return cls(
            number=str(number).strip(),
            capacity_max=int(data.get('capacity_max', data.get('cupoMaximo')) or 0),
            capacity_available=int(data.get('capacity_available', data.get('cupoDisponible')) or 0),
            professor=data.get('professor', data.get('profesor')) or None,
            time_slots=[
                TimeSlot.from_dict(slot)
                for slot in data.get('time_slots', data.get('horarios')) or []
            ]
        )
