"""
WinBackCampaign Model

One row per (member, tier). Re-triggering a tier refreshes the existing row;
the unique constraint guarantees concurrent batch runs cannot insert twins.
"""
from datetime import datetime
from enum import Enum
from typing import Optional
from ..extensions import db


class CampaignTier(str, Enum):
    """Escalating re-engagement stages, least to most severe."""
    WE_MISS_YOU = 'we_miss_you'
    COME_BACK = 'come_back'
    SPECIAL_RETURN = 'special_return'

    @property
    def severity(self) -> int:
        return _TIER_SEVERITY[self]


_TIER_SEVERITY = {
    CampaignTier.WE_MISS_YOU: 1,
    CampaignTier.COME_BACK: 2,
    CampaignTier.SPECIAL_RETURN: 3,
}


class DeliveryStatus(str, Enum):
    PENDING = 'pending'
    SENT = 'sent'
    FAILED = 'failed'


class WinBackCampaign(db.Model):
    """
    A win-back message sent (or queued) to an inactive member.
    """
    __tablename__ = 'win_back_campaigns'

    id = db.Column(db.Integer, primary_key=True)
    member_id = db.Column(db.Integer, db.ForeignKey('members.id'), nullable=False, index=True)
    tier = db.Column(db.String(30), nullable=False)  # we_miss_you, come_back, special_return

    days_since_last_activity = db.Column(db.Integer, nullable=False)
    sent_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    # Delivery outcome (recorded after the send attempt, never drives classification)
    delivery_status = db.Column(db.String(20), nullable=False, default=DeliveryStatus.PENDING.value)
    delivery_error = db.Column(db.Text)

    # Response tracking - monotonic, first occurrence wins
    opened_at = db.Column(db.DateTime)
    clicked_at = db.Column(db.DateTime)
    converted_at = db.Column(db.DateTime)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    member = db.relationship('Member', backref=db.backref('win_back_campaigns', lazy='dynamic'))

    __table_args__ = (
        db.UniqueConstraint('member_id', 'tier', name='uq_win_back_member_tier'),
        db.Index('ix_win_back_member_sent', 'member_id', 'sent_at'),
    )

    def __repr__(self):
        return f'<WinBackCampaign {self.tier} to member {self.member_id} at {self.sent_at}>'

    @property
    def campaign_tier(self) -> CampaignTier:
        return CampaignTier(self.tier)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'member_id': self.member_id,
            'tier': self.tier,
            'days_since_last_activity': self.days_since_last_activity,
            'sent_at': self.sent_at.isoformat() if self.sent_at else None,
            'delivery_status': self.delivery_status,
            'delivery_error': self.delivery_error,
            'opened_at': self.opened_at.isoformat() if self.opened_at else None,
            'clicked_at': self.clicked_at.isoformat() if self.clicked_at else None,
            'converted_at': self.converted_at.isoformat() if self.converted_at else None,
            'is_converted': self.is_converted,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def mark_opened(self, at: Optional[datetime] = None) -> bool:
        """Stamp opened_at unless already set. Returns True if it changed."""
        if self.opened_at:
            return False
        self.opened_at = at or datetime.utcnow()
        return True

    def mark_clicked(self, at: Optional[datetime] = None) -> bool:
        """Stamp clicked_at unless already set. A click implies an open."""
        if self.clicked_at:
            return False
        at = at or datetime.utcnow()
        self.clicked_at = at
        if not self.opened_at:
            self.opened_at = at
        return True

    @property
    def is_converted(self) -> bool:
        """True once the member returned after the latest send of this tier."""
        if self.converted_at is None:
            return False
        return self.sent_at is None or self.converted_at >= self.sent_at

    def mark_converted(self, at: Optional[datetime] = None) -> bool:
        """
        Stamp converted_at unless the latest send is already converted.

        This is not a plain set-once field. A tier re-sent after an earlier
        conversion is open again, and converting it moves converted_at
        forward to the new return. The timestamp never moves backwards.
        """
        if self.is_converted:
            return False
        at = at or datetime.utcnow()
        if self.converted_at and at <= self.converted_at:
            return False
        self.converted_at = at
        return True

    def mark_delivery(self, success: bool, error: Optional[str] = None) -> None:
        self.delivery_status = DeliveryStatus.SENT.value if success else DeliveryStatus.FAILED.value
        self.delivery_error = None if success else error
