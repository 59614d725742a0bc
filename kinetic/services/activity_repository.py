"""
Activity Repository

Read-only access to member activity history. Everything downstream (scoring,
classification, ranking) receives data from here instead of querying models.
"""
import logging
from datetime import datetime
from typing import Optional, List

from flask import current_app, has_app_context

from ..extensions import db
from ..models.member import Member, Membership, FitnessPlan
from ..models.activity import CheckIn, WorkoutLog
from ..models.prediction import MemberPrediction
from ..utils.exceptions import MemberNotFoundError
from .churn_scorer import ActivitySample, ACTIVITY_WINDOW

logger = logging.getLogger(__name__)


class ActivityRepository:
    """Loads bounded activity windows and plan/membership state for members."""

    def __init__(self, window: Optional[int] = None):
        if window is None and has_app_context():
            window = current_app.config.get('RETENTION_ACTIVITY_WINDOW')
        self.window = window or ACTIVITY_WINDOW

    def get_member(self, member_id: int) -> Member:
        member = db.session.get(Member, member_id)
        if not member:
            raise MemberNotFoundError(member_id)
        return member

    def get_member_by_external_id(self, external_id: str) -> Member:
        member = Member.query.filter_by(external_id=external_id).first()
        if not member:
            raise MemberNotFoundError(external_id)
        return member

    def recent_check_ins(self, member_id: int) -> List[datetime]:
        """Most recent check-in timestamps, newest first."""
        rows = (
            CheckIn.query
            .filter_by(member_id=member_id)
            .order_by(CheckIn.check_in_time.desc(), CheckIn.id.desc())
            .limit(self.window)
            .all()
        )
        return [row.check_in_time for row in rows]

    def recent_workout_statuses(self, member_id: int) -> List[str]:
        rows = (
            WorkoutLog.query
            .filter_by(member_id=member_id)
            .order_by(WorkoutLog.logged_at.desc(), WorkoutLog.id.desc())
            .limit(self.window)
            .all()
        )
        return [row.status for row in rows]

    def get_active_membership(self, member_id: int) -> Optional[Membership]:
        return (
            Membership.query
            .filter_by(member_id=member_id, status='active')
            .order_by(Membership.start_date.desc())
            .first()
        )

    def get_active_plan(self, member_id: int) -> Optional[FitnessPlan]:
        return (
            FitnessPlan.query
            .filter_by(member_id=member_id, is_active=True)
            .order_by(FitnessPlan.created_at.desc())
            .first()
        )

    def load_activity(self, member_id: int, now: Optional[datetime] = None) -> ActivitySample:
        """
        Build the activity window the churn scorer consumes.

        Args:
            member_id: Member primary key
            now: Reference time (defaults to utcnow)

        Raises:
            MemberNotFoundError: If the member does not exist
        """
        member = self.get_member(member_id)
        return ActivitySample(
            now=now or datetime.utcnow(),
            created_at=member.created_at,
            check_ins=self.recent_check_ins(member_id),
            workout_statuses=self.recent_workout_statuses(member_id),
            has_active_membership=self.get_active_membership(member_id) is not None,
        )

    def list_active_member_ids(self, limit: Optional[int] = None) -> List[int]:
        """
        IDs of members in 'active' status, stalest prediction first.

        Members never scored come first, then the oldest calculated_at, then
        ascending id, so successive limited batches cover every member.
        """
        never_scored = MemberPrediction.calculated_at.is_(None)
        query = (
            db.session.query(Member.id)
            .outerjoin(MemberPrediction, MemberPrediction.member_id == Member.id)
            .filter(Member.status == 'active')
            .order_by(never_scored.desc(), MemberPrediction.calculated_at.asc(), Member.id.asc())
        )
        if limit:
            query = query.limit(limit)
        return [row.id for row in query.all()]
