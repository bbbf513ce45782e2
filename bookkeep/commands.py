"""Flask CLI commands: ``flask init-db``, ``flask seed-accounts``, ``flask create-admin``."""
import click
from flask import current_app

from extensions import db
from models import Settings, User


def register_commands(app):
    app.cli.add_command(init_db)
    app.cli.add_command(seed_accounts)
    app.cli.add_command(create_admin)


@click.command('init-db')
def init_db():
    """Create tables, the settings row and the default chart of accounts."""
    from services.journal import ensure_accounts

    db.create_all()
    if Settings.current() is None:
        cfg = current_app.config
        db.session.add(Settings(
            company_name=cfg.get('COMPANY_NAME'),
            email=cfg.get('COMPANY_EMAIL'),
            phone=cfg.get('COMPANY_PHONE'),
            address=cfg.get('COMPANY_ADDRESS'),
            currency=cfg.get('CURRENCY'),
        ))
    created = ensure_accounts()
    db.session.commit()
    click.echo(f'Database ready ({created} accounts added)')


@click.command('seed-accounts')
def seed_accounts():
    """Add any missing default chart-of-accounts rows."""
    from services.journal import ensure_accounts

    created = ensure_accounts()
    db.session.commit()
    click.echo(f'{created} accounts added')


@click.command('create-admin')
@click.option('--username', default='admin', show_default=True)
@click.option('--email', default=None)
@click.password_option()
def create_admin(username, email, password):
    """Create the admin user, or reset its password when it exists."""
    user = User.query.filter_by(username=username).first()
    if user:
        user.set_password(password)
        user.active = True
        msg = f'Password updated for {username}'
    else:
        user = User(username=username, email=email, active=True)
        user.set_password(password)
        db.session.add(user)
        msg = f'User {username} created'
    db.session.commit()
    current_app.logger.info(msg)
    click.echo(msg)
