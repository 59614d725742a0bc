"""
Recommendation Ranker

Scores recipes against a member's fitness context. Scoring is additive and
independent per recipe, so the ranking does not depend on catalog order
beyond the stable tie-break.
"""
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Any, Iterable, Dict

# Curated by staff
CURATED_BONUS = 10

# Calorie fit: calories vs (daily target / meals per day)
MEALS_PER_DAY = 4
CALORIE_FIT_BANDS = [
    ((0.8, 1.2), 15),
    ((0.6, 1.4), 10),
    ((0.4, 1.6), 5),
]

# Protein
HIGH_INTENSITY_PROTEIN_MIN = 20
HIGH_INTENSITY_PROTEIN_BONUS = 12
PROTEIN_TIERS = [(15, 8), (10, 5)]

# Intensity
HIGH_INTENSITY_EXERCISES_PER_DAY = 8
HIGH_INTENSITY_WORKOUT_DAYS = 4

# Workout day vs rest day
WORKOUT_DAY_CATEGORY_BONUS = {
    'pre-workout': 20,
    'post-workout': 18,
    'protein': 15,
}
WORKOUT_DAY_CARBS_MIN = 30
WORKOUT_DAY_CARBS_BONUS = 10
REST_DAY_HEALTHY_BONUS = 12
REST_DAY_LIGHT_MEAL_BONUS = 8

# Membership
MEMBERSHIP_DIFFICULTY_BONUS = 8
PREMIUM_MEMBERSHIP = 'premium'

# Meal-type filter
MEAL_TYPE_EXACT_BONUS = 25
MEAL_TYPE_SECONDARY_BONUS = 15
QUICK_BREAKFAST_MINUTES = 15
PRE_WORKOUT_CARBS_MIN = 20
POST_WORKOUT_PROTEIN_MIN = 15
MEAL_TYPE_MACRO_BONUS = 10

# Convenience
QUICK_COOK_MINUTES = 15
QUICK_COOK_BONUS = 5
MODERATE_COOK_MINUTES = 30
MODERATE_COOK_BONUS = 3
QUICK_TAG_BONUS = 5
MEAL_PREP_TAG_BONUS = 8
MEAL_PREP_WORKOUT_DAYS = 3

GENERAL_LIMIT = 10
CONTEXTUAL_LIMIT = 12
WORKOUT_BASED_LIMIT = 8
MEAL_PREP_LIMIT = 6

WEEKDAYS = ('Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday')


@dataclass
class MemberContext:
    """What the ranker knows about the member at request time."""
    daily_calories: int
    workout_schedule: List[str] = field(default_factory=list)
    workout_exercises: List[Dict[str, Any]] = field(default_factory=list)
    membership_type: Optional[str] = None  # None when no active membership
    meal_type: Optional[str] = None
    hour: int = 12
    weekday: str = 'Monday'

    @classmethod
    def from_plan(cls, plan, membership=None, meal_type: Optional[str] = None,
                  hour: Optional[int] = None, weekday: Optional[str] = None,
                  now: Optional[datetime] = None) -> 'MemberContext':
        now = now or datetime.utcnow()
        return cls(
            daily_calories=plan.daily_calories or 2000,
            workout_schedule=list(plan.workout_schedule or []),
            workout_exercises=list(plan.workout_exercises or []),
            membership_type=membership.membership_type if membership else None,
            meal_type=meal_type,
            hour=now.hour if hour is None else hour,
            weekday=weekday or WEEKDAYS[now.weekday()],
        )

    @property
    def workout_days(self) -> int:
        return len(self.workout_schedule)

    @property
    def meal_calorie_target(self) -> float:
        return self.daily_calories / MEALS_PER_DAY

    @property
    def is_high_intensity(self) -> bool:
        if self.workout_days > HIGH_INTENSITY_WORKOUT_DAYS:
            return True
        if not self.workout_days:
            return False
        total = sum(len(day.get('routines') or []) for day in self.workout_exercises)
        return total / self.workout_days > HIGH_INTENSITY_EXERCISES_PER_DAY

    @property
    def is_workout_day(self) -> bool:
        return self.weekday in self.workout_schedule


@dataclass
class ScoredItem:
    """A recipe paired with its score. Never persisted."""
    item: Any
    score: float

    def to_dict(self) -> Dict[str, Any]:
        data = self.item.to_dict() if hasattr(self.item, 'to_dict') else dict(self.item)
        data['score'] = self.score
        return data


def _tags(recipe) -> List[str]:
    return list(recipe.tags or [])


def score_recipe(recipe, context: MemberContext) -> int:
    """
    Additive score of one recipe for one member context.

    Args:
        recipe: Anything exposing the Recipe attributes
        context: The member's fitness context

    Returns:
        Non-negative integer score
    """
    score = 0
    tags = _tags(recipe)
    high_intensity = context.is_high_intensity

    if recipe.is_recommended:
        score += CURATED_BONUS

    target = context.meal_calorie_target
    if target > 0:
        ratio = recipe.calories / target
        for (low, high), bonus in CALORIE_FIT_BANDS:
            if low <= ratio <= high:
                score += bonus
                break

    if high_intensity and recipe.protein > HIGH_INTENSITY_PROTEIN_MIN:
        score += HIGH_INTENSITY_PROTEIN_BONUS
    else:
        for threshold, bonus in PROTEIN_TIERS:
            if recipe.protein > threshold:
                score += bonus
                break

    if context.is_workout_day:
        score += WORKOUT_DAY_CATEGORY_BONUS.get(recipe.category, 0)
        if recipe.carbs > WORKOUT_DAY_CARBS_MIN:
            score += WORKOUT_DAY_CARBS_BONUS
    else:
        if recipe.category == 'healthy':
            score += REST_DAY_HEALTHY_BONUS
        if recipe.calories < target:
            score += REST_DAY_LIGHT_MEAL_BONUS

    if context.membership_type:
        if context.membership_type == PREMIUM_MEMBERSHIP:
            if recipe.difficulty in ('medium', 'hard'):
                score += MEMBERSHIP_DIFFICULTY_BONUS
        elif recipe.difficulty == 'easy':
            score += MEMBERSHIP_DIFFICULTY_BONUS

    meal_type = context.meal_type
    if meal_type:
        if recipe.category == meal_type:
            score += MEAL_TYPE_EXACT_BONUS
        if meal_type == 'breakfast' and (
                recipe.category == 'breakfast' or recipe.cooking_time <= QUICK_BREAKFAST_MINUTES):
            score += MEAL_TYPE_SECONDARY_BONUS
        if meal_type in ('lunch', 'dinner') and recipe.category == meal_type:
            score += MEAL_TYPE_SECONDARY_BONUS
        if meal_type == 'pre-workout' and recipe.carbs > PRE_WORKOUT_CARBS_MIN:
            score += MEAL_TYPE_MACRO_BONUS
        if meal_type == 'post-workout' and recipe.protein > POST_WORKOUT_PROTEIN_MIN:
            score += MEAL_TYPE_MACRO_BONUS

    if recipe.cooking_time <= QUICK_COOK_MINUTES:
        score += QUICK_COOK_BONUS
    elif recipe.cooking_time <= MODERATE_COOK_MINUTES:
        score += MODERATE_COOK_BONUS

    if 'quick' in tags and high_intensity:
        score += QUICK_TAG_BONUS
    if 'meal-prep' in tags and context.workout_days > MEAL_PREP_WORKOUT_DAYS:
        score += MEAL_PREP_TAG_BONUS

    return score


def rank_recipes(recipes: Iterable, context: MemberContext, limit: int = CONTEXTUAL_LIMIT) -> List[ScoredItem]:
    """Score every recipe and return the top `limit`, highest first. Ties keep catalog order."""
    scored = [ScoredItem(item=recipe, score=score_recipe(recipe, context)) for recipe in recipes]
    scored.sort(key=lambda s: s.score, reverse=True)
    return scored[:limit]


def general_recipes(recipes: Iterable, limit: int = GENERAL_LIMIT) -> List[ScoredItem]:
    """Fallback for members without an active plan: curated or healthy recipes, newest first."""
    candidates = [r for r in recipes if r.is_recommended or r.category == 'healthy']
    candidates.sort(key=lambda r: r.created_at or datetime.min, reverse=True)
    return [ScoredItem(item=r, score=0) for r in candidates[:limit]]


def target_categories(is_workout_day: bool, hour: int) -> List[str]:
    """Meal categories that suit the time of day."""
    if is_workout_day:
        if hour < 10:
            return ['pre-workout', 'breakfast', 'protein']
        if hour < 16:
            return ['pre-workout', 'post-workout', 'protein', 'lunch']
        return ['post-workout', 'protein', 'dinner']
    if hour < 10:
        return ['breakfast', 'healthy']
    if hour < 16:
        return ['lunch', 'healthy', 'snack']
    return ['dinner', 'healthy']


CATEGORY_POSITION_BONUS = (10, 8, 6)
PROTEIN_WEIGHT = 0.5


def workout_based_recipes(recipes: Iterable, schedule: List[str], hour: int, weekday: str,
                          limit: int = WORKOUT_BASED_LIMIT) -> List[ScoredItem]:
    """Recipes for the current time of day, weighted toward protein."""
    categories = target_categories(weekday in schedule, hour)
    results = []
    for recipe in recipes:
        if recipe.category not in categories:
            continue
        position = categories.index(recipe.category)
        score = CATEGORY_POSITION_BONUS[position] if position < len(CATEGORY_POSITION_BONUS) else 0
        score += recipe.protein * PROTEIN_WEIGHT
        results.append(ScoredItem(item=recipe, score=score))

    results.sort(key=lambda s: s.score, reverse=True)
    return results[:limit]


def meal_prep_suggestions(recipes: Iterable, workout_days: int, limit: int = MEAL_PREP_LIMIT) -> List[Dict[str, Any]]:
    """High-protein recipes that store well, with weekly portion counts."""
    portions = math.ceil(workout_days * 1.5)
    suggestions = []
    for recipe in recipes:
        tags = _tags(recipe)
        if recipe.protein <= 15 or recipe.cooking_time > 45:
            continue
        if 'meal-prep' not in tags and recipe.category not in ('lunch', 'dinner', 'protein'):
            continue

        suitability = (
            (10 if recipe.protein > 20 else 5)
            + (8 if recipe.cooking_time <= 30 else 4)
            + (15 if 'meal-prep' in tags else 0)
            + (10 if workout_days > 3 else 5)
        )
        data = recipe.to_dict()
        data.update({
            'weekly_portions': portions,
            'total_calories': recipe.calories * portions,
            'suitability_score': suitability,
        })
        suggestions.append(data)

    suggestions.sort(key=lambda s: s['suitability_score'], reverse=True)
    return suggestions[:limit]
