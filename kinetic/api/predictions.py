"""
Churn Prediction API Endpoints

Read and refresh member churn predictions.
"""
from flask import Blueprint, request, jsonify

from ..middleware.auth import require_auth, require_admin, ensure_self_or_admin
from ..services.activity_repository import ActivityRepository
from ..services.prediction_store import PredictionStore
from ..services.retention_orchestrator import RetentionOrchestrator

predictions_bp = Blueprint('predictions', __name__)


@predictions_bp.route('/<int:member_id>', methods=['GET'])
@require_auth
def get_prediction(member_id):
    """Current prediction for a member; scored on first request."""
    ensure_self_or_admin(member_id)
    ActivityRepository().get_member(member_id)

    prediction = PredictionStore().get_current_prediction(member_id)
    if prediction is None:
        prediction = RetentionOrchestrator().refresh_prediction(member_id)

    return jsonify({
        'success': True,
        'prediction': prediction.to_dict(),
    })


@predictions_bp.route('/<int:member_id>/recalculate', methods=['POST'])
@require_admin
def recalculate_prediction(member_id):
    """Force a fresh score for one member."""
    prediction = RetentionOrchestrator().refresh_prediction(member_id)

    return jsonify({
        'success': True,
        'prediction': prediction.to_dict(),
    })


@predictions_bp.route('/high-risk', methods=['GET'])
@require_admin
def get_high_risk_members():
    """Members with a high churn risk, riskiest first."""
    limit = request.args.get('limit', 50, type=int)
    limit = max(1, min(limit, 500))
    members = PredictionStore().get_high_risk(limit=limit)

    return jsonify({
        'success': True,
        'members': members,
        'count': len(members),
    })
