"""
Retention Orchestrator

Batch job that walks every active member and:
1. Scores churn risk and stores the prediction
2. Detects members who came back since their last win-back message
3. Classifies inactivity and records any newly warranted campaign tier
4. Hands the resulting sends to a bounded worker pool

Decisions and database writes happen on the calling thread. Worker threads
only talk to the notifier; delivery outcomes are written back afterwards.
"""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List, Dict, Any

from flask import current_app, has_app_context

from ..extensions import db
from ..models.campaign import CampaignTier
from ..utils.exceptions import MemberNotFoundError
from .activity_repository import ActivityRepository
from .campaign_classifier import classify
from .campaign_ledger import CampaignLedger, tracking_urls
from .churn_scorer import score_member, PredictionResult
from .notification_service import WinBackNotifier, Contact, NotifyResult
from .prediction_store import PredictionStore

logger = logging.getLogger(__name__)

DEFAULT_SEND_CONCURRENCY = 4


@dataclass
class SendCommand:
    """A win-back email that should go out."""
    campaign_id: Optional[int]
    member_id: int
    contact: Contact
    tier: CampaignTier
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass
class MemberOutcome:
    member_id: int
    prediction: PredictionResult
    tier: Optional[CampaignTier] = None
    send: Optional[SendCommand] = None
    conversions: int = 0


class RetentionOrchestrator:
    """Runs the daily retention batch."""

    def __init__(
        self,
        repository: Optional[ActivityRepository] = None,
        predictions: Optional[PredictionStore] = None,
        ledger: Optional[CampaignLedger] = None,
        notifier=None,
        max_workers: Optional[int] = None,
        tracking_base_url: Optional[str] = None,
        return_url: Optional[str] = None
    ):
        config = current_app.config if has_app_context() else {}

        self.repository = repository or ActivityRepository()
        self.predictions = predictions or PredictionStore()
        self.ledger = ledger or CampaignLedger()
        self.notifier = notifier or WinBackNotifier.from_config(config)
        self.max_workers = max_workers or config.get('RETENTION_SEND_CONCURRENCY') or DEFAULT_SEND_CONCURRENCY
        self.tracking_base_url = tracking_base_url or config.get('RETENTION_TRACKING_BASE_URL', 'http://localhost:5000')
        self.return_url = return_url or config.get('RETENTION_RETURN_URL', 'http://localhost:3000/book')

    # ==================== Single member ====================

    def refresh_prediction(self, member_id: int, now: Optional[datetime] = None):
        """Score one member and store the prediction. Returns the stored row."""
        sample = self.repository.load_activity(member_id, now)
        result = score_member(sample)
        return self.predictions.upsert_prediction(member_id, result)

    def detect_return(self, member_id: int, latest_check_in: Optional[datetime]) -> int:
        """Convert open campaigns if the member checked in after receiving them."""
        if latest_check_in is None:
            return 0
        open_campaigns = self.ledger.get_open_campaigns(member_id)
        if not self.ledger.pending_conversions(open_campaigns, latest_check_in):
            return 0
        return self.ledger.record_converted(member_id, at=latest_check_in)

    def process_member(self, member_id: int, now: Optional[datetime] = None, dry_run: bool = False) -> MemberOutcome:
        """
        Score, store and classify one member.

        Raises:
            MemberNotFoundError: If the member does not exist
        """
        now = now or datetime.utcnow()
        member = self.repository.get_member(member_id)
        sample = self.repository.load_activity(member_id, now)
        result = score_member(sample)

        outcome = MemberOutcome(member_id=member_id, prediction=result)
        latest_check_in = sample.check_ins[0] if sample.check_ins else None

        if dry_run:
            # Same decision a real run makes after return detection
            current_tier = self.ledger.get_current_tier(member_id, returned_at=latest_check_in)
            outcome.tier = classify(result.days_since_last_activity, current_tier)
            return outcome

        self.predictions.upsert_prediction(member_id, result)

        outcome.conversions = self.detect_return(member_id, latest_check_in)

        tier = classify(result.days_since_last_activity, self.ledger.get_current_tier(member_id))
        if tier is None:
            return outcome

        campaign, _ = self.ledger.upsert_campaign(
            member_id, tier, result.days_since_last_activity, sent_at=now
        )
        outcome.tier = tier

        params = {'days_inactive': result.days_since_last_activity}
        params.update(tracking_urls(self.tracking_base_url, campaign.id, self.return_url))
        outcome.send = SendCommand(
            campaign_id=campaign.id,
            member_id=member_id,
            contact=Contact(email=member.email, name=member.display_name),
            tier=tier,
            params=params,
        )
        return outcome

    # ==================== Batch ====================

    def _deliver(self, command: SendCommand) -> NotifyResult:
        try:
            return self.notifier.notify(command.contact, command.tier, command.params)
        except Exception as e:
            logger.warning(f"[Retention] Notifier raised for member {command.member_id}: {e}")
            return NotifyResult(success=False, error=str(e))

    def run(
        self,
        dry_run: bool = False,
        limit: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None,
        now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """
        Process all active members.

        A failure for one member is logged and counted; it never stops the
        batch. Setting cancel_event stops the loop before the next member;
        sends already queued still complete and are recorded.

        Args:
            dry_run: Compute and report without writing or sending
            limit: Maximum number of members to process
            cancel_event: Cooperative cancellation flag
            now: Reference time for every member in this run

        Returns:
            Dict with processed/succeeded/failed counts, send outcomes and errors
        """
        now = now or datetime.utcnow()
        results = {
            'processed': 0,
            'succeeded': 0,
            'failed': 0,
            'predictions_updated': 0,
            'campaigns_triggered': 0,
            'sends_succeeded': 0,
            'sends_failed': 0,
            'cancelled': False,
            'dry_run': dry_run,
            'errors': [],
        }
        if dry_run:
            results['would_trigger'] = []

        member_ids = self.repository.list_active_member_ids(limit)
        logger.info(f"[Retention] Starting batch for {len(member_ids)} members (dry_run={dry_run})")

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix='winback-send') as executor:
            pending = {}

            for member_id in member_ids:
                if cancel_event is not None and cancel_event.is_set():
                    results['cancelled'] = True
                    logger.info(f"[Retention] Batch cancelled after {results['processed']} members")
                    break

                results['processed'] += 1
                try:
                    outcome = self.process_member(member_id, now=now, dry_run=dry_run)
                except MemberNotFoundError as e:
                    results['failed'] += 1
                    results['errors'].append({'member_id': member_id, 'error': e.message})
                    continue
                except Exception as e:
                    db.session.rollback()
                    logger.error(f"[Retention] Error processing member {member_id}: {e}")
                    results['failed'] += 1
                    results['errors'].append({'member_id': member_id, 'error': str(e)})
                    continue

                results['succeeded'] += 1
                if not dry_run:
                    results['predictions_updated'] += 1
                if outcome.tier is not None:
                    results['campaigns_triggered'] += 1
                    if dry_run:
                        results['would_trigger'].append({
                            'member_id': member_id,
                            'tier': outcome.tier.value,
                            'days_inactive': outcome.prediction.days_since_last_activity,
                        })
                if outcome.send is not None:
                    pending[executor.submit(self._deliver, outcome.send)] = outcome.send

            for future in as_completed(pending):
                command = pending[future]
                notify_result = future.result()
                self._record_delivery(command, notify_result, results)

        logger.info(
            f"[Retention] Batch complete: {results['succeeded']} ok, {results['failed']} failed, "
            f"{results['campaigns_triggered']} campaigns, {results['sends_failed']} send failures"
        )
        return results

    def _record_delivery(self, command: SendCommand, notify_result: NotifyResult, results: Dict[str, Any]) -> None:
        if notify_result.success:
            results['sends_succeeded'] += 1
        else:
            results['sends_failed'] += 1
            logger.warning(
                f"[Retention] Win-back {command.tier.value} to member {command.member_id} failed: "
                f"{notify_result.error}"
            )

        try:
            self.ledger.record_delivery(command.campaign_id, notify_result.success, notify_result.error)
        except Exception as e:
            db.session.rollback()
            logger.error(f"[Retention] Could not record delivery for campaign {command.campaign_id}: {e}")
            results['errors'].append({'member_id': command.member_id, 'error': str(e)})


def run_retention_batch(dry_run: bool = False, limit: Optional[int] = None,
                        cancel_event: Optional[threading.Event] = None) -> Dict[str, Any]:
    """Entry point shared by the scheduler, CLI and admin API. Requires an app context."""
    if limit is None:
        limit = current_app.config.get('RETENTION_BATCH_LIMIT')
    return RetentionOrchestrator().run(dry_run=dry_run, limit=limit, cancel_event=cancel_event)
