"""
Tests for Predictions API endpoints.

Tests cover:
- Authentication (dev header and bearer token)
- Self-or-admin access
- Lazy scoring and admin recalculation
- High-risk listing
"""
import jwt
import pytest
from datetime import datetime, timedelta

from kinetic.extensions import db
from kinetic.models import MemberPrediction

JWT_SECRET = 'testing-jwt-secret-with-enough-length-000'


def bearer(external_id, expires_in=timedelta(hours=1)):
    token = jwt.encode(
        {'sub': external_id, 'exp': datetime.utcnow() + expires_in},
        JWT_SECRET,
        algorithm='HS256',
    )
    return {'Authorization': f'Bearer {token}'}


class TestAuthentication:
    """Tests for credential handling."""

    def test_missing_credentials(self, client, sample_member):
        response = client.get(f'/api/predictions/{sample_member.id}')

        assert response.status_code == 401
        assert response.json['error']['code'] == 'AUTH_REQUIRED'

    def test_bearer_token(self, client, sample_member):
        response = client.get(f'/api/predictions/{sample_member.id}', headers=bearer('member_1'))
        assert response.status_code == 200

    def test_expired_token(self, client, sample_member):
        headers = bearer('member_1', expires_in=timedelta(hours=-1))
        response = client.get(f'/api/predictions/{sample_member.id}', headers=headers)
        assert response.status_code == 401

    def test_token_with_wrong_secret(self, client, sample_member):
        token = jwt.encode({'sub': 'member_1'}, 'a-different-secret-that-is-long-enough', algorithm='HS256')
        response = client.get(
            f'/api/predictions/{sample_member.id}',
            headers={'Authorization': f'Bearer {token}'},
        )
        assert response.status_code == 401

    def test_unknown_dev_header(self, client, sample_member):
        response = client.get(f'/api/predictions/{sample_member.id}', headers={'X-Member-Id': 'nobody'})
        assert response.status_code == 401

    def test_suspended_member(self, client, make_member):
        member = make_member(external_id='gone', status='suspended')
        response = client.get(f'/api/predictions/{member.id}', headers={'X-Member-Id': 'gone'})
        assert response.status_code == 403


class TestGetPrediction:
    """Tests for GET /api/predictions/<id>."""

    def test_scores_on_first_request(self, client, sample_member, member_headers):
        response = client.get(f'/api/predictions/{sample_member.id}', headers=member_headers)

        assert response.status_code == 200
        prediction = response.json['prediction']
        assert prediction['member_id'] == sample_member.id
        assert prediction['days_since_last_activity'] == 3
        assert prediction['churn_risk_level'] == 'low'
        assert 0 <= prediction['engagement_score'] <= 100

        db.session.expire_all()
        assert MemberPrediction.query.filter_by(member_id=sample_member.id).count() == 1

    def test_returns_stored_prediction(self, client, sample_member, member_headers):
        first = client.get(f'/api/predictions/{sample_member.id}', headers=member_headers).json
        second = client.get(f'/api/predictions/{sample_member.id}', headers=member_headers).json

        assert first['prediction']['calculated_at'] == second['prediction']['calculated_at']

    def test_other_member_forbidden(self, client, make_member, member_headers):
        other = make_member()

        response = client.get(f'/api/predictions/{other.id}', headers=member_headers)

        assert response.status_code == 403
        assert response.json['error']['code'] == 'AUTHORIZATION_ERROR'

    def test_admin_can_read_any_member(self, client, sample_member, admin_headers):
        response = client.get(f'/api/predictions/{sample_member.id}', headers=admin_headers)
        assert response.status_code == 200

    def test_unknown_member(self, client, admin_headers):
        response = client.get('/api/predictions/9999', headers=admin_headers)

        assert response.status_code == 404
        assert response.json['error']['code'] == 'MEMBER_NOT_FOUND'


class TestRecalculate:
    """Tests for POST /api/predictions/<id>/recalculate."""

    def test_requires_admin(self, client, sample_member, member_headers):
        response = client.post(f'/api/predictions/{sample_member.id}/recalculate', headers=member_headers)
        assert response.status_code == 403

    def test_recalculates(self, client, make_member, admin_headers):
        member = make_member(days_old=200, check_in_days_ago=(95,))

        response = client.post(f'/api/predictions/{member.id}/recalculate', headers=admin_headers)

        assert response.status_code == 200
        assert response.json['prediction']['churn_risk'] == 100
        assert response.json['prediction']['churn_risk_level'] == 'high'


class TestHighRisk:
    """Tests for GET /api/predictions/high-risk."""

    def test_lists_high_risk_members(self, client, make_member, sample_member, admin_headers):
        lapsed = make_member(external_id='lapsed', days_old=200, check_in_days_ago=(95,))
        client.post(f'/api/predictions/{lapsed.id}/recalculate', headers=admin_headers)
        client.post(f'/api/predictions/{sample_member.id}/recalculate', headers=admin_headers)

        response = client.get('/api/predictions/high-risk', headers=admin_headers)

        assert response.status_code == 200
        assert response.json['count'] == 1
        assert response.json['members'][0]['member_id'] == lapsed.id
        assert response.json['members'][0]['member_email'] == 'lapsed@example.com'

    def test_requires_admin(self, client, member_headers):
        response = client.get('/api/predictions/high-risk', headers=member_headers)
        assert response.status_code == 403

    @pytest.mark.parametrize('limit', ['0', '-5', '100000'])
    def test_limit_is_clamped(self, client, admin_headers, limit):
        response = client.get(f'/api/predictions/high-risk?limit={limit}', headers=admin_headers)
        assert response.status_code == 200
