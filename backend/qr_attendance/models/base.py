"""Base model class with common functionality."""
from datetime import datetime
from typing import Dict, Any
from qr_attendance import db
from qr_attendance.utils.clock import utcnow


class BaseModel(db.Model):
    """Base model class with common fields and methods."""

    __abstract__ = True

    id = db.Column(db.Integer, primary_key=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def save(self) -> 'BaseModel':
        """Save instance to database."""
        db.session.add(self)
        db.session.commit()
        return self

    def to_dict(self, exclude: list = None) -> Dict[str, Any]:
        """Column values, datetimes as ISO strings."""
        exclude = exclude or []
        result = {}

        for column in self.__table__.columns:
            if column.name in exclude:
                continue
            value = getattr(self, column.name)
            result[column.name] = value.isoformat() if isinstance(value, datetime) else value

        return result

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__} {self.id}>'
