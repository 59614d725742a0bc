"""
Business logic services for the Kinetic retention engine.
"""
from .churn_scorer import ActivitySample, PredictionResult, score_member, suggest_optimal_visit_time
from .campaign_classifier import classify, classify_inactivity
from .recommendation_ranker import (
    MemberContext,
    ScoredItem,
    score_recipe,
    rank_recipes,
    general_recipes,
    workout_based_recipes,
    meal_prep_suggestions,
)
from .activity_repository import ActivityRepository
from .prediction_store import PredictionStore
from .campaign_ledger import CampaignLedger
from .notification_service import WinBackNotifier, Contact, NotifyResult
from .retention_orchestrator import RetentionOrchestrator, SendCommand, run_retention_batch
