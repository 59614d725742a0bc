"""
Tests for recipe scoring and ranking.

Tests cover:
- Additive scoring against each documented bonus
- Membership and meal-type bonuses
- Ordering, stability and limits
- General fallback, workout-based and meal-prep helpers
"""
import pytest
from datetime import datetime, timedelta
from types import SimpleNamespace

from kinetic.models import Recipe
from kinetic.services.recommendation_ranker import (
    MemberContext,
    score_recipe,
    rank_recipes,
    general_recipes,
    workout_based_recipes,
    meal_prep_suggestions,
    target_categories,
)


def make_recipe(**overrides):
    """A recipe that scores nothing unless a field is overridden."""
    data = {
        'title': 'Plain',
        'description': '',
        'category': 'dinner',
        'difficulty': 'hard',
        'calories': 2000,  # ratio 4.0, outside every band
        'protein': 5,
        'carbs': 5,
        'fat': 5,
        'cooking_time': 60,
        'tags': [],
        'is_recommended': False,
        'created_at': datetime(2026, 1, 1),
    }
    data.update(overrides)
    return Recipe(**data)


def workout_day_context(**overrides):
    """Monday workout day, one scheduled day, low intensity, no membership."""
    data = {
        'daily_calories': 2000,
        'workout_schedule': ['Monday'],
        'workout_exercises': [],
        'membership_type': None,
        'meal_type': None,
        'hour': 12,
        'weekday': 'Monday',
    }
    data.update(overrides)
    return MemberContext(**data)


class TestScoreRecipe:
    """Tests for the additive recipe score."""

    def test_baseline_recipe_scores_zero_on_workout_day(self):
        assert score_recipe(make_recipe(), workout_day_context()) == 0

    def test_curated_pre_workout_matching_calories(self):
        """Curated, exact per-meal calories, pre-workout on a workout day: 10 + 15 + 20."""
        recipe = make_recipe(is_recommended=True, calories=500, category='pre-workout',
                             protein=10, carbs=30, cooking_time=40)

        assert score_recipe(recipe, workout_day_context()) == 45

    def test_curated_pre_workout_with_carbs_and_meal_type(self):
        """Adding carbs > 30 (+10), then asking for pre-workout meals (+25 exact, +10 carbs > 20)."""
        recipe = make_recipe(is_recommended=True, calories=500, category='pre-workout',
                             protein=10, carbs=45, cooking_time=40)

        assert score_recipe(recipe, workout_day_context()) == 55
        assert score_recipe(recipe, workout_day_context(meal_type='pre-workout')) == 90

    @pytest.mark.parametrize('calories,bonus', [
        (500, 15), (400, 15), (600, 15),
        (350, 10), (700, 10),
        (250, 5), (800, 5),
        (150, 0), (900, 0),
    ])
    def test_calorie_bands(self, calories, bonus):
        recipe = make_recipe(calories=calories)
        assert score_recipe(recipe, workout_day_context()) == bonus

    @pytest.mark.parametrize('protein,bonus', [(25, 8), (16, 8), (15, 5), (11, 5), (10, 0)])
    def test_protein_tiers_low_intensity(self, protein, bonus):
        assert score_recipe(make_recipe(protein=protein), workout_day_context()) == bonus

    def test_high_intensity_protein_bonus(self):
        """Five workout days is high intensity: protein > 20 earns +12."""
        context = workout_day_context(workout_schedule=['Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday'])
        assert context.is_high_intensity
        assert score_recipe(make_recipe(protein=25), context) == 12
        assert score_recipe(make_recipe(protein=18), context) == 8

    def test_high_intensity_from_exercise_volume(self):
        context = workout_day_context(workout_exercises=[{'day': 'Monday', 'routines': list(range(9))}])
        assert context.is_high_intensity

    def test_empty_schedule_is_not_high_intensity(self):
        context = workout_day_context(workout_schedule=[], workout_exercises=[{'day': 'Monday', 'routines': [1]}])
        assert not context.is_high_intensity
        assert not context.is_workout_day

    @pytest.mark.parametrize('category,bonus', [('pre-workout', 20), ('post-workout', 18), ('protein', 15)])
    def test_workout_day_categories(self, category, bonus):
        assert score_recipe(make_recipe(category=category), workout_day_context()) == bonus

    def test_workout_day_carbs(self):
        assert score_recipe(make_recipe(carbs=31), workout_day_context()) == 10
        assert score_recipe(make_recipe(carbs=30), workout_day_context()) == 0

    def test_rest_day_bonuses(self):
        """Tuesday is a rest day: healthy +12, below per-meal calories +8 (and ratio 0.6 band +10)."""
        context = workout_day_context(weekday='Tuesday')
        assert not context.is_workout_day
        assert score_recipe(make_recipe(category='healthy'), context) == 12
        assert score_recipe(make_recipe(calories=300), context) == 10 + 8
        assert score_recipe(make_recipe(category='pre-workout'), context) == 0

    def test_membership_bonus(self):
        hard = make_recipe(difficulty='hard')
        easy = make_recipe(difficulty='easy')

        premium = workout_day_context(membership_type='premium')
        basic = workout_day_context(membership_type='basic')
        none = workout_day_context(membership_type=None)

        assert score_recipe(hard, premium) == 8
        assert score_recipe(easy, premium) == 0
        assert score_recipe(easy, basic) == 8
        assert score_recipe(hard, basic) == 0
        assert score_recipe(easy, none) == 0

    def test_meal_type_breakfast(self):
        context = workout_day_context(meal_type='breakfast')
        # exact +25, breakfast +15
        assert score_recipe(make_recipe(category='breakfast'), context) == 40
        # quick cook qualifies for breakfast (+15) and convenience (+5)
        assert score_recipe(make_recipe(cooking_time=10), context) == 20

    def test_meal_type_lunch_and_post_workout(self):
        assert score_recipe(make_recipe(category='lunch'), workout_day_context(meal_type='lunch')) == 40
        post = workout_day_context(meal_type='post-workout', weekday='Sunday')
        assert score_recipe(make_recipe(protein=16), post) == 8 + 10

    def test_convenience_bonuses(self):
        assert score_recipe(make_recipe(cooking_time=15), workout_day_context()) == 5
        assert score_recipe(make_recipe(cooking_time=30), workout_day_context()) == 3

    def test_tag_bonuses(self):
        busy = workout_day_context(workout_schedule=['Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday'])
        assert score_recipe(make_recipe(tags=['quick']), busy) == 5
        assert score_recipe(make_recipe(tags=['meal-prep']), busy) == 8
        assert score_recipe(make_recipe(tags=['quick', 'meal-prep']), workout_day_context()) == 0


class TestRankRecipes:
    """Tests for ordering and truncation."""

    def test_sorted_descending(self):
        recipes = [
            make_recipe(title='low'),
            make_recipe(title='high', category='pre-workout', is_recommended=True),
            make_recipe(title='mid', category='protein'),
        ]

        ranked = rank_recipes(recipes, workout_day_context())

        assert [s.item.title for s in ranked] == ['high', 'mid', 'low']
        assert [s.score for s in ranked] == [30, 15, 0]

    def test_scores_do_not_depend_on_input_order(self):
        recipes = [make_recipe(title=f'r{i}', calories=300 + i * 50, protein=i * 4) for i in range(8)]
        context = workout_day_context()

        forward = {s.item.title: s.score for s in rank_recipes(recipes, context)}
        backward = {s.item.title: s.score for s in rank_recipes(list(reversed(recipes)), context)}

        assert forward == backward

    def test_ties_keep_input_order(self):
        recipes = [make_recipe(title=t) for t in ('a', 'b', 'c')]
        ranked = rank_recipes(recipes, workout_day_context())
        assert [s.item.title for s in ranked] == ['a', 'b', 'c']

    def test_limit(self):
        recipes = [make_recipe(title=f'r{i}') for i in range(20)]
        assert len(rank_recipes(recipes, workout_day_context())) == 12
        assert len(rank_recipes(recipes, workout_day_context(), limit=3)) == 3


class TestGeneralRecipes:
    """Tests for members without an active plan."""

    def test_curated_or_healthy_newest_first(self):
        base = datetime(2026, 1, 1)
        recipes = [
            make_recipe(title='old curated', is_recommended=True, created_at=base),
            make_recipe(title='plain', created_at=base + timedelta(days=5)),
            make_recipe(title='new healthy', category='healthy', created_at=base + timedelta(days=3)),
        ]

        items = general_recipes(recipes)

        assert [s.item.title for s in items] == ['new healthy', 'old curated']
        assert all(s.score == 0 for s in items)

    def test_default_limit_is_ten(self):
        recipes = [make_recipe(title=f'r{i}', is_recommended=True) for i in range(15)]
        assert len(general_recipes(recipes)) == 10


class TestWorkoutBasedRecipes:
    """Tests for time-of-day recommendations."""

    def test_target_categories(self):
        assert target_categories(True, 8) == ['pre-workout', 'breakfast', 'protein']
        assert target_categories(True, 12) == ['pre-workout', 'post-workout', 'protein', 'lunch']
        assert target_categories(True, 18) == ['post-workout', 'protein', 'dinner']
        assert target_categories(False, 8) == ['breakfast', 'healthy']
        assert target_categories(False, 12) == ['lunch', 'healthy', 'snack']
        assert target_categories(False, 20) == ['dinner', 'healthy']

    def test_morning_workout_day(self):
        recipes = [
            make_recipe(title='shake', category='protein', protein=30),
            make_recipe(title='toast', category='pre-workout', protein=10),
            make_recipe(title='oats', category='breakfast', protein=12),
            make_recipe(title='steak', category='dinner', protein=50),
        ]

        items = workout_based_recipes(recipes, ['Monday'], hour=7, weekday='Monday')

        # shake 6 + 15, toast 10 + 5, oats 8 + 6
        assert [s.item.title for s in items] == ['shake', 'toast', 'oats']
        assert items[0].score == pytest.approx(21.0)

    def test_fourth_category_gets_no_position_bonus(self):
        recipes = [make_recipe(title='wrap', category='lunch', protein=20)]
        items = workout_based_recipes(recipes, ['Monday'], hour=12, weekday='Monday')
        assert items[0].score == pytest.approx(10.0)


class TestMealPrepSuggestions:
    """Tests for meal-prep friendly recipes."""

    def test_filter_and_scoring(self):
        recipes = [
            make_recipe(title='bowl', category='post-workout', protein=45, cooking_time=30, tags=['meal-prep']),
            make_recipe(title='stew', category='dinner', protein=18, cooking_time=45),
            make_recipe(title='slow roast', category='dinner', protein=40, cooking_time=90),
            make_recipe(title='salad', category='healthy', protein=30, cooking_time=10),
            make_recipe(title='yogurt', category='protein', protein=12, cooking_time=5),
        ]

        suggestions = meal_prep_suggestions(recipes, workout_days=4)

        assert [s['title'] for s in suggestions] == ['bowl', 'stew']
        bowl, stew = suggestions
        assert bowl['suitability_score'] == 10 + 8 + 15 + 10
        assert stew['suitability_score'] == 5 + 4 + 0 + 10
        assert bowl['weekly_portions'] == 6
        assert bowl['total_calories'] == 2000 * 6

    def test_portions_round_up(self):
        recipes = [make_recipe(category='lunch', protein=20, cooking_time=20)]
        suggestions = meal_prep_suggestions(recipes, workout_days=3)
        assert suggestions[0]['weekly_portions'] == 5
        assert suggestions[0]['suitability_score'] == 5 + 8 + 0 + 5


class TestMemberContext:
    """Tests for building context from a stored plan."""

    def test_from_plan(self):
        plan = SimpleNamespace(
            daily_calories=2400,
            workout_schedule=['Monday', 'Wednesday'],
            workout_exercises=[{'day': 'Monday', 'routines': ['a', 'b']}],
        )
        membership = SimpleNamespace(membership_type='premium')
        now = datetime(2026, 3, 4, 7, 30)  # a Wednesday

        context = MemberContext.from_plan(plan, membership=membership, now=now)

        assert context.daily_calories == 2400
        assert context.membership_type == 'premium'
        assert context.weekday == 'Wednesday'
        assert context.hour == 7
        assert context.is_workout_day
        assert context.meal_calorie_target == 600

    def test_explicit_hour_and_day_win(self):
        plan = SimpleNamespace(daily_calories=2000, workout_schedule=[], workout_exercises=[])
        context = MemberContext.from_plan(plan, hour=0, weekday='Sunday', now=datetime(2026, 3, 4, 7))
        assert context.hour == 0
        assert context.weekday == 'Sunday'
        assert context.membership_type is None
