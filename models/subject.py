from .database import db
from .group import Group


class Subject(db.Model):
    """A course in a program's catalog, offered as one or more groups."""

    __tablename__ = 'subjects'

    id = db.Column(db.Integer, primary_key=True)
    program_id = db.Column(db.Integer, db.ForeignKey('programs.id'), nullable=True)
    code = db.Column(db.String(20), nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False)

    groups = db.relationship(
        'Group', backref='subject', order_by=Group.id, cascade='all, delete-orphan'
    )

    def __repr__(self):
        return f'<Subject {self.code}: {self.name}>'

    def get_group(self, number):
        number = str(number)
        for group in self.groups:
            if group.number == number:
                return group
        return None

    def has_available_groups(self):
        return any(g.has_capacity() for g in self.groups)

    def is_valid(self):
        return (
            bool(self.code)
            and bool(self.name)
            and len(self.groups) > 0
            and all(g.is_valid() for g in self.groups)
        )

    def to_dict(self, include_groups=True):
        data = {
            'code': self.code,
            'name': self.name,
            'group_count': len(self.groups)
        }
        if include_groups:
            data['groups'] = [g.to_dict() for g in self.groups]
        return data

    @classmethod
    def from_dict(cls, data):
        code = data.get('code', data.get('codigo'))
        if not code:
            raise ValueError('Subject code is required')

        return cls(
            code=str(code).strip(),
            name=(data.get('name', data.get('nombre')) or '').strip(),
            groups=[Group.from_dict(g) for g in data.get('groups', data.get('grupos')) or []]
        )
