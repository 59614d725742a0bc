"""
Churn & Engagement Scorer

Turns a member's recent activity window into a churn-risk prediction:
- churn risk (0-100) and risk level (low / medium / high)
- engagement score (0-100)
- optimal visit hour and predicted next visit
- workout completion probability
- risk factor tags explaining the score

The scorer is a pure function of its input. Nothing here reads the clock or
the database; `now` travels inside the ActivitySample so identical input
always produces identical output.
"""
from dataclasses import dataclass, field, asdict
from datetime import datetime, timedelta
from typing import List, Dict, Any, Optional

from ..models.prediction import RiskLevel

# Activity window: most recent N check-ins / workout logs considered
ACTIVITY_WINDOW = 30

# Base risk by days since last activity, checked most severe first
INACTIVITY_RISK_STEPS = [
    (90, 90),
    (60, 70),
    (30, 50),
    (14, 30),
    (7, 15),
]

# Check-ins per 30 days below which a penalty applies
LOW_FREQUENCY_THRESHOLD = 2
MODERATE_FREQUENCY_THRESHOLD = 4
LOW_FREQUENCY_PENALTY = 20
MODERATE_FREQUENCY_PENALTY = 10

HIGH_RISK_THRESHOLD = 70
MEDIUM_RISK_THRESHOLD = 40

# Engagement contributions
ENGAGEMENT_CHECK_INS = 30
ENGAGEMENT_WORKOUTS = 20
ENGAGEMENT_MEMBERSHIP = 20
ENGAGEMENT_FREQUENCY_TIERS = [
    (8, 30),  # very active
    (4, 20),  # active
    (2, 10),  # somewhat active
]

DEFAULT_VISIT_HOUR = 18  # 6 PM
DEFAULT_COMPLETION_PROBABILITY = 50.0
DEFAULT_NEXT_VISIT_DAYS = 3
LOW_ENGAGEMENT_DAYS = 14

# Risk factor tags
FACTOR_LOW_ENGAGEMENT = 'low_engagement'
FACTOR_INFREQUENT_CHECK_INS = 'infrequent_check_ins'
FACTOR_NO_WORKOUTS = 'no_workouts_logged'
FACTOR_NO_MEMBERSHIP = 'no_active_membership'

COMPLETED_STATUS = 'completed'

SECONDS_PER_DAY = 24 * 60 * 60


@dataclass
class ActivitySample:
    """Bounded activity window for one member."""
    now: datetime
    created_at: datetime
    check_ins: List[datetime] = field(default_factory=list)  # most recent first
    workout_statuses: List[str] = field(default_factory=list)  # most recent first
    has_active_membership: bool = False


@dataclass
class PredictionResult:
    """Output of the churn scorer."""
    churn_risk: int
    churn_risk_level: RiskLevel
    engagement_score: int
    workout_completion_probability: float
    optimal_visit_hour: int
    predicted_next_visit: datetime
    days_since_last_activity: int
    check_in_frequency: float
    risk_factors: List[str] = field(default_factory=list)
    calculated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['churn_risk_level'] = self.churn_risk_level.value
        data['predicted_next_visit'] = self.predicted_next_visit.isoformat()
        data['calculated_at'] = self.calculated_at.isoformat() if self.calculated_at else None
        return data


def days_between(later: datetime, earlier: datetime) -> int:
    """Whole days elapsed, never negative."""
    return max(0, (later - earlier).days)


def days_since_last_activity(sample: ActivitySample) -> int:
    """Days since the most recent check-in, or since sign-up when there are none."""
    reference = sample.check_ins[0] if sample.check_ins else sample.created_at
    return days_between(sample.now, reference)


def check_in_frequency(sample: ActivitySample) -> float:
    """Check-ins per rolling 30-day period since the account was created."""
    account_age_days = max(1.0, (sample.now - sample.created_at).total_seconds() / SECONDS_PER_DAY)
    return len(sample.check_ins) / account_age_days * 30


def base_risk(inactive_days: int) -> int:
    for threshold, risk in INACTIVITY_RISK_STEPS:
        if inactive_days >= threshold:
            return risk
    return 0


def frequency_penalty(frequency: float) -> int:
    if frequency < LOW_FREQUENCY_THRESHOLD:
        return LOW_FREQUENCY_PENALTY
    if frequency < MODERATE_FREQUENCY_THRESHOLD:
        return MODERATE_FREQUENCY_PENALTY
    return 0


def risk_level_for(churn_risk: int) -> RiskLevel:
    """Map a 0-100 churn risk onto its tier."""
    if churn_risk >= HIGH_RISK_THRESHOLD:
        return RiskLevel.HIGH
    if churn_risk >= MEDIUM_RISK_THRESHOLD:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def optimal_visit_hour(check_ins: List[datetime]) -> int:
    """
    Most common check-in hour.

    Ties go to the hour seen first while walking the list (most recent first),
    so the result is reproducible for a given input order.
    """
    if not check_ins:
        return DEFAULT_VISIT_HOUR

    counts: Dict[int, int] = {}
    for ts in check_ins:
        counts[ts.hour] = counts.get(ts.hour, 0) + 1

    best_hour = DEFAULT_VISIT_HOUR
    best_count = 0
    for hour, count in counts.items():
        if count > best_count:
            best_hour, best_count = hour, count
    return best_hour


def workout_completion_probability(statuses: List[str]) -> float:
    if not statuses:
        return DEFAULT_COMPLETION_PROBABILITY
    completed = sum(1 for status in statuses if status == COMPLETED_STATUS)
    return round(completed / len(statuses) * 100, 2)


def engagement_score(sample: ActivitySample, frequency: float) -> int:
    score = 0
    if sample.check_ins:
        score += ENGAGEMENT_CHECK_INS
    if sample.workout_statuses:
        score += ENGAGEMENT_WORKOUTS
    if sample.has_active_membership:
        score += ENGAGEMENT_MEMBERSHIP
    for threshold, bonus in ENGAGEMENT_FREQUENCY_TIERS:
        if frequency >= threshold:
            score += bonus
            break
    return max(0, min(100, score))


def predicted_next_visit(sample: ActivitySample) -> datetime:
    """Most recent check-in plus the average gap across the window."""
    if len(sample.check_ins) < 2:
        return sample.now + timedelta(days=DEFAULT_NEXT_VISIT_DAYS)

    newest = sample.check_ins[0]
    oldest = sample.check_ins[-1]
    average_gap = (newest - oldest) / (len(sample.check_ins) - 1)
    return newest + average_gap


def risk_factors(sample: ActivitySample, inactive_days: int, frequency: float) -> List[str]:
    factors = []
    if inactive_days > LOW_ENGAGEMENT_DAYS:
        factors.append(FACTOR_LOW_ENGAGEMENT)
    if frequency < LOW_FREQUENCY_THRESHOLD:
        factors.append(FACTOR_INFREQUENT_CHECK_INS)
    if not sample.workout_statuses:
        factors.append(FACTOR_NO_WORKOUTS)
    if not sample.has_active_membership:
        factors.append(FACTOR_NO_MEMBERSHIP)
    return factors


def _windowed(sample: ActivitySample) -> ActivitySample:
    if len(sample.check_ins) <= ACTIVITY_WINDOW and len(sample.workout_statuses) <= ACTIVITY_WINDOW:
        return sample
    return ActivitySample(
        now=sample.now,
        created_at=sample.created_at,
        check_ins=list(sample.check_ins[:ACTIVITY_WINDOW]),
        workout_statuses=list(sample.workout_statuses[:ACTIVITY_WINDOW]),
        has_active_membership=sample.has_active_membership,
    )


def score_member(sample: ActivitySample) -> PredictionResult:
    """
    Score a member's activity window.

    Never raises on missing history; every branch has a default.

    Args:
        sample: Activity window, check-ins and workouts most recent first

    Returns:
        PredictionResult stamped with calculated_at = sample.now
    """
    sample = _windowed(sample)

    inactive_days = days_since_last_activity(sample)
    frequency = check_in_frequency(sample)

    churn_risk = min(100, base_risk(inactive_days) + frequency_penalty(frequency))

    return PredictionResult(
        churn_risk=churn_risk,
        churn_risk_level=risk_level_for(churn_risk),
        engagement_score=engagement_score(sample, frequency),
        workout_completion_probability=workout_completion_probability(sample.workout_statuses),
        optimal_visit_hour=optimal_visit_hour(sample.check_ins),
        predicted_next_visit=predicted_next_visit(sample),
        days_since_last_activity=inactive_days,
        check_in_frequency=round(frequency, 4),
        risk_factors=risk_factors(sample, inactive_days, frequency),
        calculated_at=sample.now,
    )


def suggest_optimal_visit_time(check_ins: List[datetime]) -> Dict[str, Any]:
    """
    Suggested workout hour with a confidence label based on history depth.
    """
    window = check_ins[:ACTIVITY_WINDOW]
    if not window:
        return {
            'suggested_hour': DEFAULT_VISIT_HOUR,
            'suggested_time': f'{DEFAULT_VISIT_HOUR}:00',
            'confidence': 'low',
            'check_in_count': 0,
        }

    hour = optimal_visit_hour(window)
    count = len(window)
    if count >= 20:
        confidence = 'high'
    elif count >= 10:
        confidence = 'medium'
    else:
        confidence = 'low'

    return {
        'suggested_hour': hour,
        'suggested_time': f'{hour}:00',
        'confidence': confidence,
        'check_in_count': count,
    }
