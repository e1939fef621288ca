import click
from flask.cli import AppGroup

from .extensions import db
from .services.accounts import (
    backfill_missing_keys,
    delete_account_and_bookmarks,
    lookup_by_email,
    rotate_api_key,
)
from .services.errors import NotFound, ServiceError

accounts_cli = AppGroup('accounts', help='Account maintenance commands.')


@accounts_cli.command('backfill-keys')
def backfill_keys():
    """Issue API keys to every account that has none."""
    try:
        count = backfill_missing_keys(db.session)
    except ServiceError as e:
        raise click.ClickException(str(e))
    click.echo(f'Updated {count} users')


@accounts_cli.command('rotate-key')
@click.argument('email')
def rotate_key(email):
    """Replace the API key of the account registered with EMAIL."""
    try:
        user = lookup_by_email(db.session, email)
        new_key = rotate_api_key(db.session, user.id)
    except NotFound:
        raise click.ClickException(f'No user with email {email}')
    except ServiceError as e:
        raise click.ClickException(str(e))
    click.echo(new_key)


@accounts_cli.command('delete')
@click.argument('email')
@click.option('--yes', is_flag=True, help='Skip the confirmation prompts.')
def delete_account(email, yes):
    """Delete the account registered with EMAIL and all of its bookmarks."""
    try:
        user = lookup_by_email(db.session, email)
    except NotFound:
        raise click.ClickException(f'No user with email {email}')

    if not yes:
        click.confirm(
            f'Delete the account of {user.name} and all of its bookmarks? '
            'This cannot be undone',
            abort=True,
        )
        typed = click.prompt('Type the email again to proceed')
        if typed.strip() != user.email:
            raise click.ClickException('Email does not match. Aborting deletion.')

    try:
        delete_account_and_bookmarks(db.session, user.id)
    except ServiceError as e:
        raise click.ClickException(f'Failed to delete account: {e}')
    click.echo(f'Deleted account {email} and all of its bookmarks.')


def register_commands(app):
    app.cli.add_command(accounts_cli)
