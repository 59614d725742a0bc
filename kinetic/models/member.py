"""
Member, Membership and FitnessPlan models.

These rows are owned by the account/billing side of the platform; the
retention engine only reads them.
"""
from datetime import datetime
from ..extensions import db


ADMIN_ROLES = ('admin', 'superadmin')


class Member(db.Model):
    """
    A gym member as known to the account system.
    """
    __tablename__ = 'members'

    id = db.Column(db.Integer, primary_key=True)
    external_id = db.Column(db.String(100), nullable=False, unique=True, index=True)  # identity provider subject

    # Contact info
    email = db.Column(db.String(255))
    name = db.Column(db.String(255))
    phone = db.Column(db.String(50))

    role = db.Column(db.String(20), default='member', nullable=False)  # member, staff, admin, superadmin
    status = db.Column(db.String(20), default='active', nullable=False)  # active, suspended, deleted

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    memberships = db.relationship('Membership', backref='member', lazy='dynamic')
    plans = db.relationship('FitnessPlan', backref='member', lazy='dynamic')

    def __repr__(self):
        return f'<Member {self.external_id}>'

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        if self.email:
            return self.email.split('@')[0]
        return 'there'

    def to_dict(self):
        return {
            'id': self.id,
            'external_id': self.external_id,
            'email': self.email,
            'name': self.name,
            'phone': self.phone,
            'role': self.role,
            'status': self.status,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class Membership(db.Model):
    """
    A member's gym membership.
    """
    __tablename__ = 'memberships'

    id = db.Column(db.Integer, primary_key=True)
    member_id = db.Column(db.Integer, db.ForeignKey('members.id'), nullable=False, index=True)

    membership_type = db.Column(db.String(30), nullable=False, default='basic')  # basic, premium, family
    status = db.Column(db.String(20), nullable=False, default='active')  # active, paused, cancelled, expired

    start_date = db.Column(db.DateTime, default=datetime.utcnow)
    end_date = db.Column(db.DateTime)  # NULL = ongoing
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (
        db.Index('ix_memberships_member_status', 'member_id', 'status'),
    )

    def __repr__(self):
        return f'<Membership {self.membership_type} ({self.status})>'

    def to_dict(self):
        return {
            'id': self.id,
            'member_id': self.member_id,
            'membership_type': self.membership_type,
            'status': self.status,
            'start_date': self.start_date.isoformat() if self.start_date else None,
            'end_date': self.end_date.isoformat() if self.end_date else None,
        }


class FitnessPlan(db.Model):
    """
    A member's diet and workout plan.

    workout_schedule: list of weekday names, e.g. ["Monday", "Wednesday"]
    workout_exercises: list of {"day": "Monday", "routines": [...]} entries
    """
    __tablename__ = 'fitness_plans'

    id = db.Column(db.Integer, primary_key=True)
    member_id = db.Column(db.Integer, db.ForeignKey('members.id'), nullable=False, index=True)

    is_active = db.Column(db.Boolean, default=True, nullable=False)
    fitness_goal = db.Column(db.String(100))
    daily_calories = db.Column(db.Integer, nullable=False, default=2000)

    workout_schedule = db.Column(db.JSON, default=list)
    workout_exercises = db.Column(db.JSON, default=list)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f'<FitnessPlan member={self.member_id} active={self.is_active}>'

    def to_dict(self):
        return {
            'id': self.id,
            'member_id': self.member_id,
            'is_active': self.is_active,
            'fitness_goal': self.fitness_goal,
            'daily_calories': self.daily_calories,
            'workout_schedule': self.workout_schedule or [],
            'workout_exercises': self.workout_exercises or [],
        }
