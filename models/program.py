from datetime import datetime
from .database import db
from .subject import Subject


class Program(db.Model):
    """An academic program's timetable for one semester, as published by the university."""

    __tablename__ = 'programs'

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(20), nullable=False, index=True)  # e.g. "504"
    name = db.Column(db.String(200), nullable=False)
    faculty = db.Column(db.String(200), nullable=True)
    semester = db.Column(db.String(20), nullable=True)  # e.g. "20261"
    fetched_on = db.Column(db.String(50), nullable=True)  # date printed on the source page
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    subjects = db.relationship(
        'Subject', backref='program', order_by=Subject.id, cascade='all, delete-orphan'
    )

    def __repr__(self):
        return f'<Program {self.code}: {self.name} ({self.semester})>'

    def get_subject(self, code):
        for subject in self.subjects:
            if subject.code == code:
                return subject
        return None

    def subjects_with_available_groups(self):
        return [s for s in self.subjects if s.has_available_groups()]

    def is_valid(self):
        return (
            bool(self.code)
            and bool(self.name)
            and len(self.subjects) > 0
            and all(s.is_valid() for s in self.subjects)
        )

    def summary(self):
        return {
            'id': self.id,
            'code': self.code,
            'name': self.name,
            'faculty': self.faculty,
            'semester': self.semester,
            'fetched_on': self.fetched_on,
            'subject_count': len(self.subjects),
            'subjects_with_capacity': len(self.subjects_with_available_groups())
        }

    def to_dict(self):
        data = self.summary()
        data['subjects'] = [s.to_dict() for s in self.subjects]
        return data

    @classmethod
    def from_dict(cls, data):
        program = data.get('program', data.get('programa')) or {}
        return cls(
            code=str(program.get('code', program.get('codigo', ''))).strip(),
            name=(program.get('name', program.get('nombre')) or '').strip(),
            faculty=data.get('faculty', data.get('facultad')) or None,
            semester=data.get('semester', data.get('semestre')) or None,
            fetched_on=data.get('fetched_on', data.get('fecha')) or None,
            subjects=[Subject.from_dict(s) for s in data.get('subjects', data.get('materias')) or []]
        )
