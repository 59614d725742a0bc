"""
Database models for the Kinetic retention engine.
"""
from .member import Member, Membership, FitnessPlan, ADMIN_ROLES
from .activity import CheckIn, WorkoutLog
from .prediction import MemberPrediction, RiskLevel
from .campaign import WinBackCampaign, CampaignTier, DeliveryStatus
from .recipe import Recipe, DEFAULT_RECIPES, seed_recipes

__all__ = [
    'Member',
    'Membership',
    'FitnessPlan',
    'ADMIN_ROLES',
    # Activity history
    'CheckIn',
    'WorkoutLog',
    # Derived state
    'MemberPrediction',
    'RiskLevel',
    'WinBackCampaign',
    'CampaignTier',
    'DeliveryStatus',
    # Content
    'Recipe',
    'DEFAULT_RECIPES',
    'seed_recipes',
]
