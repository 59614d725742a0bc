"""
CLI Commands for the Retention Engine.

These commands can be run manually or via cron jobs:

# Retention batch (run daily at 10 AM)
0 10 * * * cd /app && flask retention run

# Preview campaigns without writing or sending
flask retention run --dry-run
"""

import click
from flask.cli import with_appcontext
from ..models import seed_recipes
from ..services.campaign_ledger import CampaignLedger
from ..services.retention_orchestrator import RetentionOrchestrator, run_retention_batch
from ..utils.exceptions import MemberNotFoundError


@click.group('retention')
def retention_cli():
    """Churn scoring and win-back campaign commands."""
    pass


@retention_cli.command('run')
@click.option('--dry-run', is_flag=True, help='Preview without writing predictions or sending emails')
@click.option('--limit', type=int, help='Maximum number of members to process')
@with_appcontext
def run_batch(dry_run, limit):
    """
    Score all active members and send any newly warranted win-back emails.
    """
    prefix = '[DRY RUN] ' if dry_run else ''
    result = run_retention_batch(dry_run=dry_run, limit=limit)

    click.echo(f"\n{prefix}Retention batch complete")
    click.echo(f"  Processed: {result['processed']} members")
    click.echo(f"  Succeeded: {result['succeeded']}")
    click.echo(f"  Failed: {result['failed']}")
    click.echo(f"  Predictions updated: {result['predictions_updated']}")
    click.echo(f"  Campaigns triggered: {result['campaigns_triggered']}")
    click.echo(f"  Emails sent: {result['sends_succeeded']} ({result['sends_failed']} failed)")

    if dry_run:
        for item in result.get('would_trigger', [])[:20]:
            click.echo(f"    - Member {item['member_id']}: {item['tier']} ({item['days_inactive']} days)")

    if result['errors']:
        click.echo(f"  Errors: {len(result['errors'])}")
        for error in result['errors'][:5]:
            click.echo(f"    - Member {error['member_id']}: {error['error']}")


@retention_cli.command('score')
@click.option('--member-id', type=int, required=True, help='Member ID')
@with_appcontext
def score(member_id):
    """Recalculate and show one member's churn prediction."""
    try:
        prediction = RetentionOrchestrator().refresh_prediction(member_id)
    except MemberNotFoundError as e:
        click.echo(e.message)
        raise SystemExit(1)

    click.echo(f"\nMember {member_id}:")
    click.echo(f"  Churn risk: {prediction.churn_risk} ({prediction.churn_risk_level})")
    click.echo(f"  Engagement: {prediction.engagement_score}")
    click.echo(f"  Days inactive: {prediction.days_since_last_activity}")
    click.echo(f"  Optimal hour: {prediction.optimal_visit_hour}:00")
    click.echo(f"  Next visit: {prediction.predicted_next_visit:%Y-%m-%d %H:%M}")
    click.echo(f"  Risk factors: {', '.join(prediction.risk_factors or []) or 'none'}")


@retention_cli.command('stats')
@with_appcontext
def stats():
    """Show win-back campaign statistics."""
    result = CampaignLedger().get_stats()

    click.echo("\nWin-back campaigns:")
    click.echo(f"  Total: {result['total']}")
    click.echo(f"  Delivered: {result['delivered']} ({result['failed']} failed)")
    click.echo(f"  Open rate: {result['open_rate']}%")
    click.echo(f"  Click rate: {result['click_rate']}%")
    click.echo(f"  Conversion rate: {result['conversion_rate']}%")

    click.echo("\nBy tier:")
    for tier, tier_stats in result['by_tier'].items():
        click.echo(f"  {tier}: {tier_stats['total']} sent, {tier_stats['converted']} converted")


@retention_cli.command('seed-recipes')
@with_appcontext
def seed():
    """Load the default recipe catalog into an empty recipes table."""
    added = seed_recipes()
    if added:
        click.echo(f"Seeded {added} recipes")
    else:
        click.echo("Recipes table already populated, nothing to do")


def init_app(app):
    """Register CLI commands with the Flask app."""
    app.cli.add_command(retention_cli)
