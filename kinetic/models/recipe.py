"""
Recipe Model

The content catalog ranked by the recommendation engine.
"""
import logging
from datetime import datetime
from ..extensions import db

logger = logging.getLogger(__name__)


RECIPE_CATEGORIES = (
    'breakfast', 'lunch', 'dinner', 'snack',
    'pre-workout', 'post-workout', 'protein', 'healthy',
)

RECIPE_DIFFICULTIES = ('easy', 'medium', 'hard')


class Recipe(db.Model):
    """A meal suggestion with macro values."""
    __tablename__ = 'recipes'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, default='')
    category = db.Column(db.String(30), nullable=False, index=True)
    difficulty = db.Column(db.String(10), nullable=False, default='easy')

    # Per serving
    calories = db.Column(db.Integer, nullable=False, default=0)
    protein = db.Column(db.Float, nullable=False, default=0)  # grams
    carbs = db.Column(db.Float, nullable=False, default=0)  # grams
    fat = db.Column(db.Float, nullable=False, default=0)  # grams

    cooking_time = db.Column(db.Integer, nullable=False, default=30)  # minutes
    tags = db.Column(db.JSON, default=list)
    is_recommended = db.Column(db.Boolean, default=False, nullable=False)  # curated by staff

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f'<Recipe {self.title}>'

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'category': self.category,
            'difficulty': self.difficulty,
            'calories': self.calories,
            'protein': self.protein,
            'carbs': self.carbs,
            'fat': self.fat,
            'cooking_time': self.cooking_time,
            'tags': self.tags or [],
            'is_recommended': self.is_recommended,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


DEFAULT_RECIPES = [
    {
        'title': 'Overnight Oats with Berries',
        'description': 'Rolled oats soaked in almond milk with mixed berries and chia.',
        'category': 'breakfast', 'difficulty': 'easy',
        'calories': 380, 'protein': 14, 'carbs': 58, 'fat': 10,
        'cooking_time': 10, 'tags': ['quick', 'meal-prep', 'vegetarian'], 'is_recommended': True,
    },
    {
        'title': 'Banana Peanut Butter Toast',
        'description': 'Whole grain toast with peanut butter and sliced banana.',
        'category': 'pre-workout', 'difficulty': 'easy',
        'calories': 420, 'protein': 13, 'carbs': 55, 'fat': 16,
        'cooking_time': 5, 'tags': ['quick'], 'is_recommended': True,
    },
    {
        'title': 'Grilled Chicken Rice Bowl',
        'description': 'Grilled chicken breast, brown rice, broccoli and teriyaki glaze.',
        'category': 'post-workout', 'difficulty': 'medium',
        'calories': 560, 'protein': 45, 'carbs': 60, 'fat': 12,
        'cooking_time': 30, 'tags': ['meal-prep', 'high-protein'], 'is_recommended': True,
    },
    {
        'title': 'Greek Yogurt Protein Parfait',
        'description': 'Greek yogurt layered with granola, honey and whey.',
        'category': 'protein', 'difficulty': 'easy',
        'calories': 310, 'protein': 32, 'carbs': 30, 'fat': 6,
        'cooking_time': 5, 'tags': ['quick', 'high-protein'], 'is_recommended': False,
    },
    {
        'title': 'Quinoa Kale Salad',
        'description': 'Quinoa with kale, chickpeas, cucumber and lemon tahini.',
        'category': 'healthy', 'difficulty': 'easy',
        'calories': 410, 'protein': 16, 'carbs': 52, 'fat': 15,
        'cooking_time': 20, 'tags': ['vegetarian', 'meal-prep'], 'is_recommended': True,
    },
    {
        'title': 'Turkey Avocado Wrap',
        'description': 'Whole wheat wrap with turkey, avocado, spinach and mustard.',
        'category': 'lunch', 'difficulty': 'easy',
        'calories': 480, 'protein': 30, 'carbs': 40, 'fat': 20,
        'cooking_time': 10, 'tags': ['quick'], 'is_recommended': False,
    },
    {
        'title': 'Baked Salmon with Sweet Potato',
        'description': 'Oven-baked salmon fillet with roasted sweet potato and asparagus.',
        'category': 'dinner', 'difficulty': 'medium',
        'calories': 620, 'protein': 40, 'carbs': 45, 'fat': 28,
        'cooking_time': 40, 'tags': ['omega-3'], 'is_recommended': True,
    },
    {
        'title': 'Beef and Broccoli Stir Fry',
        'description': 'Lean beef strips with broccoli, garlic and ginger over jasmine rice.',
        'category': 'dinner', 'difficulty': 'hard',
        'calories': 650, 'protein': 42, 'carbs': 62, 'fat': 22,
        'cooking_time': 35, 'tags': ['meal-prep'], 'is_recommended': False,
    },
    {
        'title': 'Hummus Veggie Snack Box',
        'description': 'Hummus with carrots, bell peppers and whole grain crackers.',
        'category': 'snack', 'difficulty': 'easy',
        'calories': 250, 'protein': 8, 'carbs': 30, 'fat': 11,
        'cooking_time': 5, 'tags': ['quick', 'vegetarian'], 'is_recommended': False,
    },
    {
        'title': 'Egg White Veggie Omelette',
        'description': 'Egg whites with spinach, mushrooms and feta.',
        'category': 'breakfast', 'difficulty': 'easy',
        'calories': 220, 'protein': 24, 'carbs': 6, 'fat': 9,
        'cooking_time': 12, 'tags': ['quick', 'high-protein'], 'is_recommended': False,
    },
]


def seed_recipes() -> int:
    """Seed the default recipe catalog if the table is empty. Returns rows added."""
    if Recipe.query.count() > 0:
        return 0

    for data in DEFAULT_RECIPES:
        db.session.add(Recipe(**data))
    db.session.commit()
    logger.info(f"[Recipes] Seeded {len(DEFAULT_RECIPES)} recipes")
    return len(DEFAULT_RECIPES)
