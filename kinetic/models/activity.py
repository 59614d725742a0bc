"""
Raw activity history: gym check-ins and workout logs.

Both tables are append-only from the retention engine's point of view.
"""
from datetime import datetime
from ..extensions import db


class CheckIn(db.Model):
    """A single gym visit."""
    __tablename__ = 'member_check_ins'

    id = db.Column(db.Integer, primary_key=True)
    member_id = db.Column(db.Integer, db.ForeignKey('members.id'), nullable=False)
    check_in_time = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    location = db.Column(db.String(100))

    __table_args__ = (
        db.Index('ix_check_ins_member_time', 'member_id', 'check_in_time'),
    )

    def __repr__(self):
        return f'<CheckIn member={self.member_id} at {self.check_in_time}>'

    def to_dict(self):
        return {
            'id': self.id,
            'member_id': self.member_id,
            'check_in_time': self.check_in_time.isoformat() if self.check_in_time else None,
            'location': self.location,
        }


class WorkoutLog(db.Model):
    """Outcome of one planned workout."""
    __tablename__ = 'workout_logs'

    id = db.Column(db.Integer, primary_key=True)
    member_id = db.Column(db.Integer, db.ForeignKey('members.id'), nullable=False)
    status = db.Column(db.String(20), nullable=False, default='completed')  # completed, partial, skipped
    workout_name = db.Column(db.String(150))
    logged_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        db.Index('ix_workout_logs_member_time', 'member_id', 'logged_at'),
    )

    def __repr__(self):
        return f'<WorkoutLog member={self.member_id} {self.status}>'

    def to_dict(self):
        return {
            'id': self.id,
            'member_id': self.member_id,
            'status': self.status,
            'workout_name': self.workout_name,
            'logged_at': self.logged_at.isoformat() if self.logged_at else None,
        }
