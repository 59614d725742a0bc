"""
Win-Back Campaign API Endpoints

Run the retention batch, inspect campaigns, and receive email tracking events.
"""
import base64
from urllib.parse import urlparse

from flask import Blueprint, Response, request, jsonify, redirect, current_app

from ..middleware.auth import require_auth, require_admin, ensure_self_or_admin
from ..services.activity_repository import ActivityRepository
from ..services.campaign_ledger import CampaignLedger
from ..services.retention_orchestrator import run_retention_batch
from ..utils.exceptions import CampaignNotFoundError, ValidationError

campaigns_bp = Blueprint('campaigns', __name__)

# 1x1 transparent GIF
TRACKING_PIXEL = base64.b64decode('R0lGODlhAQABAIAAAAAAAP///yH5BAEAAAAALAAAAAABAAEAAAIBRAA7')


@campaigns_bp.route('/run', methods=['POST'])
@require_admin
def run_campaigns():
    """
    Run the retention batch now.

    Request body:
        dry_run: Report what would happen without writing or sending
        limit: Optional maximum number of members
    """
    data = request.get_json(silent=True) or {}
    dry_run = data.get('dry_run', False)
    if not isinstance(dry_run, bool):
        raise ValidationError('dry_run must be a boolean', 'dry_run')
    limit = data.get('limit')
    if limit is not None and (isinstance(limit, bool) or not isinstance(limit, int) or limit < 1):
        raise ValidationError('limit must be a positive integer', 'limit')

    results = run_retention_batch(dry_run=dry_run, limit=limit)

    return jsonify({
        'success': True,
        'results': results,
    })


@campaigns_bp.route('/stats', methods=['GET'])
@require_admin
def get_campaign_stats():
    """Campaign counts and response rates."""
    return jsonify({
        'success': True,
        'stats': CampaignLedger().get_stats(),
    })


@campaigns_bp.route('/members/<int:member_id>', methods=['GET'])
@require_auth
def get_member_campaigns(member_id):
    """Campaign history for one member."""
    ensure_self_or_admin(member_id)
    ActivityRepository().get_member(member_id)

    ledger = CampaignLedger()
    campaigns = ledger.get_member_campaigns(member_id)
    current_tier = ledger.get_current_tier(member_id)

    return jsonify({
        'success': True,
        'current_tier': current_tier.value if current_tier else None,
        'campaigns': [c.to_dict() for c in campaigns],
        'count': len(campaigns),
    })


@campaigns_bp.route('/track/open/<int:campaign_id>', methods=['GET'])
def track_open(campaign_id):
    """
    Track email open via tracking pixel.

    No authentication required - tracking pixels are embedded in emails.
    """
    try:
        CampaignLedger().record_opened(campaign_id)
    except CampaignNotFoundError:
        current_app.logger.info(f"[Campaigns] Open pixel for unknown campaign {campaign_id}")

    return Response(TRACKING_PIXEL, mimetype='image/gif')


def _safe_destination(url):
    """Only redirect to the configured return site or a relative path."""
    fallback = current_app.config['RETENTION_RETURN_URL']
    if not url:
        return fallback

    parsed = urlparse(url)
    if not parsed.scheme and not parsed.netloc and url.startswith('/') and not url.startswith('//'):
        return url

    allowed = urlparse(fallback)
    if (parsed.scheme, parsed.netloc) == (allowed.scheme, allowed.netloc):
        return url
    return fallback


@campaigns_bp.route('/track/click/<int:campaign_id>', methods=['GET'])
def track_click(campaign_id):
    """
    Track link click and redirect to the destination URL.

    Query params:
        url: The destination URL to redirect to

    No authentication required - tracking links are embedded in emails.
    """
    try:
        CampaignLedger().record_clicked(campaign_id)
    except CampaignNotFoundError:
        current_app.logger.info(f"[Campaigns] Click for unknown campaign {campaign_id}")

    return redirect(_safe_destination(request.args.get('url')))


@campaigns_bp.route('/convert/<int:member_id>', methods=['POST'])
@require_auth
def convert_member(member_id):
    """Record that a member came back."""
    ensure_self_or_admin(member_id)
    ActivityRepository().get_member(member_id)

    converted = CampaignLedger().record_converted(member_id)

    return jsonify({
        'success': True,
        'member_id': member_id,
        'campaigns_converted': converted,
    })
