"""Notification commands."""

import click

from ..cli.base import BaseCommand, command_error_handler
from ..cli.config import Config
from ..notifications import BulkResult


class BulkNotifyCommand(BaseCommand):
    """Send one message to many users."""

    def __init__(self, config: Config, user_ids, subject: str, body: str):
        super().__init__(config)
        self.user_ids = list(user_ids)
        self.subject = subject
        self.body = body

    @command_error_handler
    def execute(self) -> BulkResult:
        result = self.dispatcher.send_bulk_notifications(self.user_ids, self.subject, self.body)
        color = 'green' if result.failed == 0 else 'yellow'
        click.secho(f"Sent {result.successful} of {result.total} notifications ({result.failed} failed)", fg=color)
        return result


class WelcomeCommand(BaseCommand):
    """Send the welcome email to one user."""

    def __init__(self, config: Config, user_id: str):
        super().__init__(config)
        self.user_id = user_id

    @command_error_handler
    def execute(self) -> bool:
        sent = self.dispatcher.send_welcome_email(self.user_id)
        if sent:
            click.secho(f"Welcome email sent to user {self.user_id}", fg='green')
        else:
            click.secho(f"Welcome email to user {self.user_id} was not sent", fg='yellow')
        return sent


@click.group()
def notify():
    """Send notifications."""
    pass

@notify.command('bulk')
@click.argument('subject')
@click.argument('body')
@click.argument('user_ids', nargs=-1, required=True)
@click.pass_context
def bulk(ctx, subject: str, body: str, user_ids):
    """Send SUBJECT/BODY to every USER_ID."""
    BulkNotifyCommand(ctx.obj['config'], user_ids, subject, body).execute()

@notify.command('welcome')
@click.argument('user_id')
@click.pass_context
def welcome(ctx, user_id: str):
    """Send the welcome email to USER_ID."""
    WelcomeCommand(ctx.obj['config'], user_id).execute()
