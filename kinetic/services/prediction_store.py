"""
Prediction Store

Persists the current churn prediction per member. One row per member,
always updated in place.
"""
import logging
from typing import Optional, List, Dict, Any

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models.member import Member
from ..models.prediction import MemberPrediction, RiskLevel
from .churn_scorer import PredictionResult

logger = logging.getLogger(__name__)


class PredictionStore:
    """Read/write access to MemberPrediction rows."""

    def get_current_prediction(self, member_id: int) -> Optional[MemberPrediction]:
        return MemberPrediction.query.filter_by(member_id=member_id).first()

    def upsert_prediction(self, member_id: int, result: PredictionResult) -> MemberPrediction:
        """
        Insert or overwrite the member's prediction.

        A concurrent insert for the same member trips the unique constraint;
        that case is rolled back and applied as an update to the winning row.
        """
        prediction = self.get_current_prediction(member_id)
        if prediction is None:
            prediction = MemberPrediction(member_id=member_id)
            self._apply(prediction, result)
            db.session.add(prediction)
            try:
                db.session.commit()
                return prediction
            except IntegrityError:
                db.session.rollback()
                logger.info(f"[Predictions] Concurrent insert for member {member_id}, updating instead")
                prediction = self.get_current_prediction(member_id)

        self._apply(prediction, result)
        db.session.commit()
        return prediction

    @staticmethod
    def _apply(prediction: MemberPrediction, result: PredictionResult) -> None:
        prediction.churn_risk = result.churn_risk
        prediction.churn_risk_level = RiskLevel(result.churn_risk_level).value
        prediction.engagement_score = result.engagement_score
        prediction.workout_completion_probability = result.workout_completion_probability
        prediction.optimal_visit_hour = result.optimal_visit_hour
        prediction.predicted_next_visit = result.predicted_next_visit
        prediction.days_since_last_activity = result.days_since_last_activity
        prediction.check_in_frequency = result.check_in_frequency
        prediction.risk_factors = list(result.risk_factors)
        prediction.calculated_at = result.calculated_at

    def get_high_risk(self, limit: int = 50) -> List[Dict[str, Any]]:
        """High-risk members, riskiest first, with contact details attached."""
        rows = (
            db.session.query(MemberPrediction, Member)
            .join(Member, Member.id == MemberPrediction.member_id)
            .filter(MemberPrediction.churn_risk_level == RiskLevel.HIGH.value)
            .order_by(MemberPrediction.churn_risk.desc(), MemberPrediction.member_id.asc())
            .limit(limit)
            .all()
        )

        results = []
        for prediction, member in rows:
            data = prediction.to_dict()
            data['member_name'] = member.name
            data['member_email'] = member.email
            results.append(data)
        return results
