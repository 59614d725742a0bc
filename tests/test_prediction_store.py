"""
Tests for PredictionStore and ActivityRepository.
"""
import pytest
from dataclasses import replace
from datetime import datetime, timedelta
from unittest.mock import patch

from kinetic.models import MemberPrediction, RiskLevel
from kinetic.services.activity_repository import ActivityRepository
from kinetic.services.churn_scorer import ActivitySample, score_member
from kinetic.services.prediction_store import PredictionStore
from kinetic.utils.exceptions import MemberNotFoundError

NOW = datetime(2026, 6, 1, 12, 0, 0)


@pytest.fixture
def store(app):
    return PredictionStore()


def result_with_risk(risk, level):
    base = score_member(ActivitySample(now=NOW, created_at=NOW - timedelta(days=10)))
    return replace(base, churn_risk=risk, churn_risk_level=level)


class TestUpsertPrediction:
    """Tests for the one-row-per-member invariant."""

    def test_insert_then_update_in_place(self, store, make_member):
        member = make_member()

        first = store.upsert_prediction(member.id, result_with_risk(35, RiskLevel.LOW))
        second = store.upsert_prediction(member.id, result_with_risk(80, RiskLevel.HIGH))

        assert first.id == second.id
        assert MemberPrediction.query.filter_by(member_id=member.id).count() == 1

        current = store.get_current_prediction(member.id)
        assert current.churn_risk == 80
        assert current.churn_risk_level == 'high'
        assert current.calculated_at == NOW

    def test_concurrent_insert_updates_winning_row(self, store, make_member):
        """A row inserted by another run after the lookup is updated in place."""
        member = make_member()
        existing = store.upsert_prediction(member.id, result_with_risk(35, RiskLevel.LOW))
        lookup = store.get_current_prediction
        calls = []

        def lookup_after_first_miss(member_id):
            calls.append(member_id)
            if len(calls) == 1:
                return None
            return lookup(member_id)

        with patch.object(store, 'get_current_prediction', side_effect=lookup_after_first_miss):
            updated = store.upsert_prediction(member.id, result_with_risk(80, RiskLevel.HIGH))

        assert len(calls) == 2
        assert updated.id == existing.id
        assert MemberPrediction.query.filter_by(member_id=member.id).count() == 1

        current = store.get_current_prediction(member.id)
        assert current.churn_risk == 80
        assert current.churn_risk_level == 'high'

    def test_missing_prediction(self, store, make_member):
        assert store.get_current_prediction(make_member().id) is None


class TestHighRisk:
    """Tests for the at-risk member listing."""

    def test_only_high_risk_riskiest_first(self, store, make_member):
        worst = make_member(external_id='worst')
        bad = make_member(external_id='bad')
        fine = make_member(external_id='fine')

        store.upsert_prediction(bad.id, result_with_risk(75, RiskLevel.HIGH))
        store.upsert_prediction(worst.id, result_with_risk(100, RiskLevel.HIGH))
        store.upsert_prediction(fine.id, result_with_risk(50, RiskLevel.MEDIUM))

        rows = store.get_high_risk()

        assert [r['member_id'] for r in rows] == [worst.id, bad.id]
        assert rows[0]['member_name'] == 'Member worst'
        assert rows[0]['member_email'] == 'worst@example.com'

    def test_limit(self, store, make_member):
        for _ in range(3):
            store.upsert_prediction(make_member().id, result_with_risk(90, RiskLevel.HIGH))

        assert len(store.get_high_risk(limit=2)) == 2


class TestActivityRepository:
    """Tests for the activity window loader."""

    def test_load_activity(self, sample_member):
        now = datetime.utcnow()
        sample = ActivityRepository().load_activity(sample_member.id, now)

        assert sample.now == now
        assert len(sample.check_ins) == 4
        assert sample.check_ins == sorted(sample.check_ins, reverse=True)
        assert sample.workout_statuses == ['completed', 'completed', 'skipped']
        assert sample.has_active_membership is True

    def test_window_limits_rows(self, make_member):
        member = make_member(check_in_days_ago=range(1, 11), workouts=['completed'] * 10)

        sample = ActivityRepository(window=3).load_activity(member.id)

        assert len(sample.check_ins) == 3
        assert len(sample.workout_statuses) == 3

    def test_unknown_member(self, app):
        with pytest.raises(MemberNotFoundError):
            ActivityRepository().load_activity(4242)

    def test_list_active_member_ids(self, make_member):
        active = make_member()
        make_member(status='suspended')
        other = make_member()

        repo = ActivityRepository()

        assert repo.list_active_member_ids() == [active.id, other.id]
        assert repo.list_active_member_ids(limit=1) == [active.id]

    def test_list_active_member_ids_stalest_first(self, make_member):
        """Never-scored members lead, then the oldest prediction, so limited batches rotate."""
        stale = make_member()
        fresh = make_member()
        unscored = make_member()
        store = PredictionStore()
        store.upsert_prediction(fresh.id, result_with_risk(20, RiskLevel.LOW))
        store.upsert_prediction(stale.id, replace(
            result_with_risk(20, RiskLevel.LOW), calculated_at=NOW - timedelta(days=1)
        ))

        repo = ActivityRepository()

        assert repo.list_active_member_ids() == [unscored.id, stale.id, fresh.id]
        assert repo.list_active_member_ids(limit=2) == [unscored.id, stale.id]
