"""Class rosters, used only to enrich submission listings."""
from qr_attendance import db
from qr_attendance.models.base import BaseModel
from qr_attendance.records import RosterEntry


class ClassRoom(BaseModel):
    __tablename__ = 'classes'

    name = db.Column(db.String(255), nullable=False)
    owner_id = db.Column(db.String(64), nullable=False, index=True)

    students = db.relationship(
        'RosterStudent',
        backref='class_room',
        lazy='dynamic',
        cascade='all, delete-orphan'
    )


class RosterStudent(BaseModel):
    __tablename__ = 'roster_students'
    __table_args__ = (
        db.UniqueConstraint('class_id', 'student_id', name='uq_roster_class_student'),
    )

    class_id = db.Column(db.Integer, db.ForeignKey('classes.id', ondelete='CASCADE'), nullable=False)
    student_id = db.Column(db.String(100), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=True)

    def to_record(self) -> RosterEntry:
        return RosterEntry(student_id=self.student_id, name=self.name, email=self.email)
