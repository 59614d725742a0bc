"""
Campaign Ledger

Persistence for win-back campaigns:
- current tier lookup (the escalation baseline)
- idempotent upsert per (member, tier)
- open / click / conversion event recording
- effectiveness statistics
"""
import logging
from datetime import datetime
from typing import Optional, List, Dict, Any, Tuple
from urllib.parse import quote

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models.campaign import WinBackCampaign, CampaignTier, DeliveryStatus
from ..utils.exceptions import CampaignNotFoundError

logger = logging.getLogger(__name__)


class CampaignLedger:
    """Reads and writes WinBackCampaign rows."""

    def get_member_campaigns(self, member_id: int) -> List[WinBackCampaign]:
        return (
            WinBackCampaign.query
            .filter_by(member_id=member_id)
            .order_by(WinBackCampaign.sent_at.desc(), WinBackCampaign.id.desc())
            .all()
        )

    def get_open_campaigns(self, member_id: int) -> List[WinBackCampaign]:
        """Campaigns whose latest send has not converted yet."""
        return [c for c in self.get_member_campaigns(member_id) if not c.is_converted]

    def get_current_tier(self, member_id: int, returned_at: Optional[datetime] = None) -> Optional[CampaignTier]:
        """
        Most severe tier still awaiting the member's return.

        Converted campaigns no longer count, so a member who came back starts
        the escalation over. Passing returned_at also leaves out the campaigns
        a check-in at that time would convert, without writing anything.
        """
        campaigns = self.get_open_campaigns(member_id)
        if returned_at is not None:
            converting = {c.id for c in self.pending_conversions(campaigns, returned_at)}
            campaigns = [c for c in campaigns if c.id not in converting]

        tiers = [c.campaign_tier for c in campaigns]
        if not tiers:
            return None
        return max(tiers, key=lambda t: t.severity)

    @staticmethod
    def pending_conversions(campaigns: List[WinBackCampaign], returned_at: datetime) -> List[WinBackCampaign]:
        """
        Open campaigns that a check-in at returned_at converts.

        Nothing converts unless at least one campaign went out strictly before
        the check-in; campaigns sent after it stay open.
        """
        if not any(c.sent_at and c.sent_at < returned_at for c in campaigns):
            return []
        return [c for c in campaigns if not (c.sent_at and c.sent_at > returned_at)]

    def find_campaign(self, member_id: int, tier: CampaignTier) -> Optional[WinBackCampaign]:
        return WinBackCampaign.query.filter_by(member_id=member_id, tier=CampaignTier(tier).value).first()

    def get_campaign(self, campaign_id: int) -> WinBackCampaign:
        campaign = db.session.get(WinBackCampaign, campaign_id)
        if not campaign:
            raise CampaignNotFoundError(campaign_id)
        return campaign

    def upsert_campaign(
        self,
        member_id: int,
        tier: CampaignTier,
        days_since_last_activity: int,
        sent_at: Optional[datetime] = None
    ) -> Tuple[WinBackCampaign, bool]:
        """
        Record that a tier was triggered for a member.

        Existing rows keep their open/click/convert timestamps; only sent_at,
        days_since_last_activity and the delivery status are refreshed.

        Returns:
            (campaign, created)
        """
        tier = CampaignTier(tier)
        sent_at = sent_at or datetime.utcnow()

        campaign = self.find_campaign(member_id, tier)
        if campaign is None:
            campaign = WinBackCampaign(
                member_id=member_id,
                tier=tier.value,
                days_since_last_activity=days_since_last_activity,
                sent_at=sent_at,
                delivery_status=DeliveryStatus.PENDING.value,
            )
            db.session.add(campaign)
            try:
                db.session.commit()
                logger.info(f"[Campaigns] Created {tier.value} for member {member_id}")
                return campaign, True
            except IntegrityError:
                db.session.rollback()
                logger.info(f"[Campaigns] {tier.value} for member {member_id} already exists, refreshing")
                campaign = self.find_campaign(member_id, tier)

        campaign.sent_at = sent_at
        campaign.days_since_last_activity = days_since_last_activity
        campaign.delivery_status = DeliveryStatus.PENDING.value
        campaign.delivery_error = None
        db.session.commit()
        logger.info(f"[Campaigns] Refreshed {tier.value} for member {member_id}")
        return campaign, False

    def record_delivery(self, campaign_id: int, success: bool, error: Optional[str] = None) -> WinBackCampaign:
        campaign = self.get_campaign(campaign_id)
        campaign.mark_delivery(success, error)
        db.session.commit()
        if not success:
            logger.warning(f"[Campaigns] Delivery failed for campaign {campaign_id}: {error}")
        return campaign

    def record_opened(self, campaign_id: int, at: Optional[datetime] = None) -> WinBackCampaign:
        campaign = self.get_campaign(campaign_id)
        if campaign.mark_opened(at):
            db.session.commit()
        return campaign

    def record_clicked(self, campaign_id: int, at: Optional[datetime] = None) -> WinBackCampaign:
        campaign = self.get_campaign(campaign_id)
        if campaign.mark_clicked(at):
            db.session.commit()
        return campaign

    def record_converted(self, member_id: int, at: Optional[datetime] = None) -> int:
        """
        Mark every unconverted campaign sent before `at` as converted.

        Returns:
            Number of campaigns that changed
        """
        at = at or datetime.utcnow()
        changed = 0
        for campaign in self.get_open_campaigns(member_id):
            if campaign.sent_at and campaign.sent_at > at:
                continue
            if campaign.mark_converted(at):
                changed += 1

        if changed:
            db.session.commit()
            logger.info(f"[Campaigns] Member {member_id} converted ({changed} campaigns)")
        return changed

    def get_stats(self) -> Dict[str, Any]:
        """Campaign counts and response rates, overall and per tier."""
        campaigns = WinBackCampaign.query.all()
        stats = _summarize(campaigns)
        stats['by_tier'] = {
            tier.value: _summarize([c for c in campaigns if c.tier == tier.value])
            for tier in CampaignTier
        }
        return stats


def _rate(part: int, whole: int) -> float:
    return round(part / whole * 100, 2) if whole > 0 else 0.0


def _summarize(campaigns: List[WinBackCampaign]) -> Dict[str, Any]:
    total = len(campaigns)
    delivered = sum(1 for c in campaigns if c.delivery_status == DeliveryStatus.SENT.value)
    failed = sum(1 for c in campaigns if c.delivery_status == DeliveryStatus.FAILED.value)
    opened = sum(1 for c in campaigns if c.opened_at)
    clicked = sum(1 for c in campaigns if c.clicked_at)
    converted = sum(1 for c in campaigns if c.converted_at)

    return {
        'total': total,
        'delivered': delivered,
        'failed': failed,
        'opened': opened,
        'clicked': clicked,
        'converted': converted,
        'open_rate': _rate(opened, delivered),
        'click_rate': _rate(clicked, delivered),
        'conversion_rate': _rate(converted, delivered),
    }


def tracking_urls(base_url: str, campaign_id: int, destination: str) -> Dict[str, str]:
    """Open-pixel and click-redirect URLs for a campaign email."""
    base = base_url.rstrip('/')
    return {
        'open_url': f'{base}/api/campaigns/track/open/{campaign_id}',
        'click_url': f'{base}/api/campaigns/track/click/{campaign_id}?url={quote(destination, safe="")}',
    }
