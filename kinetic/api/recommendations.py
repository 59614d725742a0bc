"""
Recommendation API Endpoints

Personalized recipes and workout-time suggestions for the calling member.
"""
from flask import Blueprint, request, jsonify, g, current_app

from ..middleware.auth import require_auth
from ..models import Recipe
from ..models.recipe import RECIPE_CATEGORIES
from ..services.activity_repository import ActivityRepository
from ..services.churn_scorer import suggest_optimal_visit_time
from ..services.recommendation_ranker import (
    MemberContext,
    WEEKDAYS,
    rank_recipes,
    general_recipes,
    workout_based_recipes,
    meal_prep_suggestions,
)
from ..utils.exceptions import ValidationError

recommendations_bp = Blueprint('recommendations', __name__)


def _hour_arg():
    hour = request.args.get('hour', type=int)
    if hour is not None and not 0 <= hour <= 23:
        raise ValidationError('hour must be between 0 and 23', 'hour')
    return hour


def _day_arg():
    day = request.args.get('day')
    if day is None:
        return None
    day = day.strip().capitalize()
    if day not in WEEKDAYS:
        raise ValidationError(f'day must be one of {", ".join(WEEKDAYS)}', 'day')
    return day


def _catalog():
    return Recipe.query.order_by(Recipe.id.asc()).all()


@recommendations_bp.route('/recipes', methods=['GET'])
@require_auth
def get_recipes():
    """
    Ranked recipes for the member's active plan.

    Query params:
        meal_type: Optional category to favor
        hour: Member's local hour (0-23)
        day: Member's local weekday name
        limit: Number of results
    """
    meal_type = request.args.get('meal_type')
    if meal_type and meal_type not in RECIPE_CATEGORIES:
        raise ValidationError(f'Unknown meal_type: {meal_type}', 'meal_type')
    hour = _hour_arg()
    day = _day_arg()
    limit = request.args.get('limit', type=int)

    repository = ActivityRepository()
    plan = repository.get_active_plan(g.member_id)

    if plan is None:
        items = general_recipes(_catalog(), limit=limit or current_app.config['RECOMMENDATION_GENERAL_LIMIT'])
        personalized = False
    else:
        context = MemberContext.from_plan(
            plan,
            membership=repository.get_active_membership(g.member_id),
            meal_type=meal_type,
            hour=hour,
            weekday=day,
        )
        items = rank_recipes(_catalog(), context, limit=limit or current_app.config['RECOMMENDATION_CONTEXTUAL_LIMIT'])
        personalized = True

    return jsonify({
        'success': True,
        'personalized': personalized,
        'recipes': [item.to_dict() for item in items],
        'count': len(items),
    })


@recommendations_bp.route('/recipes/workout-based', methods=['GET'])
@require_auth
def get_workout_based_recipes():
    """Recipes suited to the time of day and whether today is a workout day."""
    plan = ActivityRepository().get_active_plan(g.member_id)
    if plan is None:
        return jsonify({'success': True, 'recipes': [], 'count': 0})

    context = MemberContext.from_plan(plan, hour=_hour_arg(), weekday=_day_arg())
    items = workout_based_recipes(_catalog(), context.workout_schedule, context.hour, context.weekday)

    return jsonify({
        'success': True,
        'is_workout_day': context.is_workout_day,
        'recipes': [item.to_dict() for item in items],
        'count': len(items),
    })


@recommendations_bp.route('/recipes/meal-prep', methods=['GET'])
@require_auth
def get_meal_prep_suggestions():
    """Meal-prep friendly recipes with weekly portions."""
    plan = ActivityRepository().get_active_plan(g.member_id)
    if plan is None:
        return jsonify({'success': True, 'recipes': [], 'count': 0})

    workout_days = len(plan.workout_schedule or [])
    suggestions = meal_prep_suggestions(_catalog(), workout_days)

    return jsonify({
        'success': True,
        'workout_days': workout_days,
        'recipes': suggestions,
        'count': len(suggestions),
    })


@recommendations_bp.route('/optimal-time', methods=['GET'])
@require_auth
def get_optimal_time():
    """Suggested workout hour based on check-in history."""
    check_ins = ActivityRepository().recent_check_ins(g.member_id)
    return jsonify({
        'success': True,
        **suggest_optimal_visit_time(check_ins),
    })
