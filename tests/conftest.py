"""
Shared pytest fixtures for Kinetic tests.

The app fixture keeps one application context open for the whole test, so
fixtures and test bodies share a database session. Requests made through the
test client run in their own context; call db.session.expire_all() before
reading rows they changed.
"""
import pytest
from datetime import datetime, timedelta

from kinetic import create_app
from kinetic.extensions import db
from kinetic.models import Member, Membership, FitnessPlan, CheckIn, WorkoutLog, Recipe, DEFAULT_RECIPES


@pytest.fixture
def app():
    """Create test application."""
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture
def make_member(app):
    """
    Factory for members with activity history.

    check_in_days_ago: offsets (days before now) for each check-in
    workouts: workout statuses, most recent first
    """
    counter = {'n': 0}

    def _make(
        external_id=None,
        days_old=60,
        check_in_days_ago=(),
        workouts=(),
        membership_type=None,
        role='member',
        status='active',
        email=None,
        now=None,
    ):
        now = now or datetime.utcnow()
        counter['n'] += 1
        external_id = external_id or f'user_{counter["n"]}'

        member = Member(
            external_id=external_id,
            email=email if email is not None else f'{external_id}@example.com',
            name=f'Member {external_id}',
            role=role,
            status=status,
            created_at=now - timedelta(days=days_old),
        )
        db.session.add(member)
        db.session.flush()

        for offset in check_in_days_ago:
            db.session.add(CheckIn(member_id=member.id, check_in_time=now - timedelta(days=offset)))

        for i, workout_status in enumerate(workouts):
            db.session.add(WorkoutLog(
                member_id=member.id,
                status=workout_status,
                logged_at=now - timedelta(days=i + 1),
            ))

        if membership_type:
            db.session.add(Membership(
                member_id=member.id,
                membership_type=membership_type,
                status='active',
                start_date=now - timedelta(days=days_old),
            ))

        db.session.commit()
        return member

    return _make


@pytest.fixture
def sample_member(make_member):
    """A regular member who checked in three days ago."""
    return make_member(
        external_id='member_1',
        days_old=90,
        check_in_days_ago=(3, 6, 10, 13),
        workouts=('completed', 'completed', 'skipped'),
        membership_type='basic',
    )


@pytest.fixture
def admin_member(make_member):
    """A gym admin."""
    return make_member(external_id='admin_1', role='admin', check_in_days_ago=(1,))


@pytest.fixture
def member_headers(sample_member):
    return {'X-Member-Id': sample_member.external_id}


@pytest.fixture
def admin_headers(admin_member):
    return {'X-Member-Id': admin_member.external_id}


@pytest.fixture
def sample_plan(sample_member):
    """Active four-day plan for sample_member."""
    plan = FitnessPlan(
        member_id=sample_member.id,
        is_active=True,
        fitness_goal='build muscle',
        daily_calories=2000,
        workout_schedule=['Monday', 'Tuesday', 'Thursday', 'Friday'],
        workout_exercises=[
            {'day': 'Monday', 'routines': ['squat', 'bench', 'row']},
            {'day': 'Tuesday', 'routines': ['deadlift', 'press']},
        ],
    )
    db.session.add(plan)
    db.session.commit()
    return plan


@pytest.fixture
def sample_recipes(app):
    """The default recipe catalog."""
    recipes = [Recipe(**data) for data in DEFAULT_RECIPES]
    db.session.add_all(recipes)
    db.session.commit()
    return recipes
