"""
MemberPrediction Model

Holds the current churn/engagement snapshot for a member. There is exactly one
row per member; recalculation overwrites it in place.
"""
from datetime import datetime
from enum import Enum
from ..extensions import db


class RiskLevel(str, Enum):
    """Churn risk tiers."""
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'


class MemberPrediction(db.Model):
    """
    Current churn-risk prediction for a member.
    """
    __tablename__ = 'member_predictions'

    id = db.Column(db.Integer, primary_key=True)
    member_id = db.Column(db.Integer, db.ForeignKey('members.id'), nullable=False)

    churn_risk = db.Column(db.Integer, nullable=False)  # 0-100
    churn_risk_level = db.Column(db.String(10), nullable=False, index=True)  # low, medium, high
    engagement_score = db.Column(db.Integer, nullable=False)  # 0-100
    workout_completion_probability = db.Column(db.Float, nullable=False)  # 0-100
    optimal_visit_hour = db.Column(db.Integer, nullable=False)  # 0-23
    predicted_next_visit = db.Column(db.DateTime, nullable=False)
    days_since_last_activity = db.Column(db.Integer, nullable=False, default=0)
    check_in_frequency = db.Column(db.Float, nullable=False, default=0.0)  # check-ins per 30 days
    risk_factors = db.Column(db.JSON, default=list)

    calculated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    member = db.relationship('Member', backref=db.backref('prediction', uselist=False))

    __table_args__ = (
        db.UniqueConstraint('member_id', name='uq_member_predictions_member'),
    )

    def __repr__(self):
        return f'<MemberPrediction member={self.member_id} risk={self.churn_risk}>'

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'member_id': self.member_id,
            'churn_risk': self.churn_risk,
            'churn_risk_level': self.churn_risk_level,
            'engagement_score': self.engagement_score,
            'workout_completion_probability': self.workout_completion_probability,
            'optimal_visit_hour': self.optimal_visit_hour,
            'predicted_next_visit': self.predicted_next_visit.isoformat() if self.predicted_next_visit else None,
            'days_since_last_activity': self.days_since_last_activity,
            'check_in_frequency': self.check_in_frequency,
            'risk_factors': self.risk_factors or [],
            'calculated_at': self.calculated_at.isoformat() if self.calculated_at else None,
        }
