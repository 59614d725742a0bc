"""
Win-back notification delivery via SendGrid.

The notifier is called from send worker threads, so it never touches the
database or the Flask app context; everything it needs is passed in.

Configuration:
- SENDGRID_API_KEY: SendGrid API key (empty disables delivery)
- SENDGRID_FROM_EMAIL / SENDGRID_FROM_NAME: sender identity
"""
import logging
from dataclasses import dataclass
from typing import Optional, Dict, Any

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail, Email, To, Content

from ..models.campaign import CampaignTier

logger = logging.getLogger(__name__)


@dataclass
class Contact:
    """Where a notification goes."""
    email: Optional[str]
    name: Optional[str] = None


@dataclass
class NotifyResult:
    success: bool
    error: Optional[str] = None
    status_code: Optional[int] = None


class WinBackNotifier:
    """
    Sends tier-specific win-back emails.
    """

    DEFAULT_TEMPLATES = {
        CampaignTier.WE_MISS_YOU.value: {
            'subject': 'We Miss You at {gym_name}!',
            'text': '''Hi {member_name},

It's been {days_inactive} days since your last visit to {gym_name}.

Your routine is waiting for you. Drop in this week and pick up where you left off.

Book your next session: {click_url}

See you soon,
{gym_name}
''',
            'html': '''
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
    <h2>We Miss You!</h2>
    <p>Hi {member_name},</p>
    <p>It's been <strong>{days_inactive} days</strong> since your last visit to {gym_name}.</p>
    <p>Your routine is waiting for you. Drop in this week and pick up where you left off.</p>
    <p><a href="{click_url}" style="background: #1976d2; color: #fff; padding: 12px 24px; border-radius: 6px; text-decoration: none;">Book a Session</a></p>
    <p>See you soon,<br>{gym_name}</p>
    <img src="{open_url}" width="1" height="1" alt="" />
</div>
'''
        },
        CampaignTier.COME_BACK.value: {
            'subject': 'Come Back to {gym_name}',
            'text': '''Hi {member_name},

It has been {days_inactive} days since we last saw you at {gym_name}.

Getting back into it is easier than starting over. Our coaches can help you
build a plan that fits your schedule.

Plan your return: {click_url}

{gym_name}
''',
            'html': '''
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
    <h2>Come Back to {gym_name}</h2>
    <p>Hi {member_name},</p>
    <p>It has been <strong>{days_inactive} days</strong> since we last saw you.</p>
    <div style="background: #f5f5f5; padding: 20px; border-radius: 8px; margin: 20px 0;">
        <p>Getting back into it is easier than starting over. Our coaches can help you build a plan that fits your schedule.</p>
    </div>
    <p><a href="{click_url}">Plan your return</a></p>
    <p>{gym_name}</p>
    <img src="{open_url}" width="1" height="1" alt="" />
</div>
'''
        },
        CampaignTier.SPECIAL_RETURN.value: {
            'subject': 'Special Return Offer - {gym_name}',
            'text': '''Hi {member_name},

It's been {days_inactive} days, and we'd love to welcome you back to {gym_name}.

We've put together a special return offer for you. Claim it here:
{click_url}

{gym_name}
''',
            'html': '''
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
    <h2>A Special Offer Just for You</h2>
    <p>Hi {member_name},</p>
    <p>It's been <strong>{days_inactive} days</strong>, and we'd love to welcome you back to {gym_name}.</p>
    <div style="background: #e8f5e9; padding: 20px; border-radius: 8px; margin: 20px 0;">
        <h3 style="color: #2e7d32;">Your return offer is ready</h3>
    </div>
    <p><a href="{click_url}">Claim your offer</a></p>
    <p>{gym_name}</p>
    <img src="{open_url}" width="1" height="1" alt="" />
</div>
'''
        },
    }

    def __init__(self, api_key: Optional[str] = None, from_email: str = 'noreply@kinetic.fit',
                 from_name: str = 'Kinetic Fitness'):
        self.api_key = api_key
        self.from_email = from_email
        self.from_name = from_name

    @classmethod
    def from_config(cls, config) -> 'WinBackNotifier':
        return cls(
            api_key=config.get('SENDGRID_API_KEY'),
            from_email=config.get('SENDGRID_FROM_EMAIL', 'noreply@kinetic.fit'),
            from_name=config.get('SENDGRID_FROM_NAME', 'Kinetic Fitness'),
        )

    def _get_client(self) -> Optional[SendGridAPIClient]:
        if not self.api_key:
            logger.warning("SENDGRID_API_KEY not configured")
            return None
        return SendGridAPIClient(api_key=self.api_key)

    def render(self, tier: CampaignTier, params: Dict[str, Any]) -> Dict[str, str]:
        """Render the subject, text and html bodies for a tier."""
        template = self.DEFAULT_TEMPLATES[CampaignTier(tier).value]
        variables = {
            'gym_name': self.from_name,
            'member_name': 'there',
            'days_inactive': 0,
            'click_url': '',
            'open_url': '',
        }
        variables.update(params)
        return {
            'subject': template['subject'].format(**variables),
            'text': template['text'].format(**variables),
            'html': template['html'].format(**variables),
        }

    def notify(self, contact: Contact, tier: CampaignTier, params: Dict[str, Any]) -> NotifyResult:
        """
        Deliver a win-back email. Never raises; failures come back in the result.
        """
        if not contact.email:
            return NotifyResult(success=False, error='Member has no email address')

        client = self._get_client()
        if not client:
            return NotifyResult(success=False, error='SendGrid not configured')

        rendered = self.render(tier, dict(params, member_name=contact.name or 'there'))

        try:
            message = Mail(
                from_email=Email(self.from_email, self.from_name),
                to_emails=To(contact.email, contact.name),
                subject=rendered['subject'],
                plain_text_content=Content("text/plain", rendered['text']),
                html_content=Content("text/html", rendered['html'])
            )

            response = client.send(message)

            if response.status_code in [200, 202]:
                logger.info(f"Win-back email sent to {contact.email}: {rendered['subject']}")
                return NotifyResult(success=True, status_code=response.status_code)

            logger.error(f"SendGrid error: {response.status_code}")
            return NotifyResult(
                success=False,
                error=f"Status code: {response.status_code}",
                status_code=response.status_code,
            )

        except Exception as e:
            logger.error(f"Failed to send win-back email: {str(e)}")
            return NotifyResult(success=False, error=str(e))
