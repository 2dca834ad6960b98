# Overview: Flask CLI command groups for bootstrap, seeding, users and maintenance.

# backend/cargobid/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv and set DATABASE_URL, SESSION_SECRET, JWT_SECRET
#   (a .env file next to wsgi.py is loaded automatically).
# - Set FLASK_APP to wsgi.py.
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init-db
#   Create all tables that do not exist yet (use `flask db upgrade` for migrations).
# - python -m flask system seed
#   Demo companies, users, quotes and bids. Skipped if any user exists.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Users:
# - python -m flask users create --username admin@platform.com --name "Admin" --role admin
#   Create a user of any role (prompts for the password).
# - python -m flask users list [--role carrier]
#
# Maintenance:
# - python -m flask maintenance cleanup-sessions --retention-days 30
#   Delete expired or revoked sessions older than the retention window.

from datetime import timedelta
from decimal import Decimal

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import User, USER_ROLES
from .services import auth_service, bid_service, company_service, quote_service, session_service
from .services.auth_service import SEED_PLACEHOLDER_PASSWORD, DuplicateUsernameError, InvalidRoleError
from .time_utils import utcnow


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create missing tables."""
    db.create_all()
    click.echo("PASS Tables created")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """DEV/TEST only: drop and recreate all tables."""
    if not yes:
        click.confirm("This deletes ALL data. Continue?", abort=True)
    db.drop_all()
    db.create_all()
    click.echo("PASS Database reset")


@system_group.command('seed')
@with_appcontext
def seed():
    """
    Seed demo data.

    Demo users store the placeholder password "password123" unhashed; they can
    log in with it while ALLOW_SEED_PASSWORD is enabled.

    SECURITY: Never run against production data.
    """
    click.echo("START Seeding database...")

    if db.session.query(User).first():
        click.echo("SKIP Database already seeded.")
        return

    client_co = company_service.create_company(patch={
        "name": "Tech Solutions Ltd",
        "tax_id": "12345678000100",
        "address": "123 Innovation Dr, Tech City",
        "type": "client",
        "contact_info": "contact@techsolutions.com",
    })
    carrier_co_1 = company_service.create_company(patch={
        "name": "Fast Logistics Inc",
        "tax_id": "98765432000199",
        "address": "456 Transport Way, Logistics City",
        "type": "carrier",
        "contact_info": "dispatch@fastlogistics.com",
        "freight_types": ["General", "Electronics"],
        "regions": ["SP", "RJ"],
    })
    carrier_co_2 = company_service.create_company(patch={
        "name": "Global Freight",
        "tax_id": "11223344000155",
        "address": "789 Shipping Ln, Port City",
        "type": "carrier",
        "contact_info": "info@globalfreight.com",
        "freight_types": ["Furniture", "General"],
        "regions": ["PR", "RS", "SP"],
    })
    click.echo("PASS Created 3 companies")

    def demo_user(username, name, role, company_id):
        return auth_service.create_user(
            username=username,
            password=SEED_PLACEHOLDER_PASSWORD,
            name=name,
            role=role,
            company_id=company_id,
            hashed=False,
        )

    client_user = demo_user("client@tech.com", "Alice Client", "client", client_co.id)
    carrier_user_1 = demo_user("driver@fast.com", "Bob Driver", "carrier", carrier_co_1.id)
    carrier_user_2 = demo_user("manager@global.com", "Charlie Manager", "carrier", carrier_co_2.id)
    demo_user("admin@platform.com", "Admin User", "admin", None)
    demo_user("auditor@platform.com", "Audit User", "auditor", None)
    click.echo("PASS Created 5 users (password: password123)")

    now = utcnow()
    quote_1 = quote_service.create_quote(client_user.id, patch={
        "origin": "São Paulo, SP",
        "destination": "Rio de Janeiro, RJ",
        "weight": Decimal("1500.50"),
        "volume": Decimal("10.5"),
        "cargo_type": "Electronics",
        "deadline": now + timedelta(days=7),
        "notes": "Fragile items, handle with care.",
    })
    quote_service.create_quote(client_user.id, patch={
        "origin": "Curitiba, PR",
        "destination": "Porto Alegre, RS",
        "weight": Decimal("5000.00"),
        "volume": Decimal("25.0"),
        "cargo_type": "Furniture",
        "deadline": now + timedelta(days=14),
        "notes": "Requires large truck.",
    })

    bid_service.create_bid(carrier_user_1.id, quote_1.id, patch={
        "amount": Decimal("2500.00"),
        "estimated_days": 2,
        "conditions": "Insurance included.",
    })
    bid_service.create_bid(carrier_user_2.id, quote_1.id, patch={
        "amount": Decimal("2400.00"),
        "estimated_days": 3,
        "conditions": "Standard shipping.",
    })
    click.echo("PASS Created 2 quotes and 2 bids")
    click.echo("DONE Seeding complete!")


@click.group('users')
def users_group():
    """User management commands."""


@users_group.command('create')
@click.option('--username', prompt=True, help='Username (email)')
@click.option('--name', prompt=True, help='Display name')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(list(USER_ROLES)), prompt=True, help='Role')
@click.option('--company-id', type=int, help='Company ID (clients and carriers)')
@with_appcontext
def create_user_cli(username, name, password, role, company_id):
    """Create a user of any role, including admin and auditor."""
    if company_id is not None and not company_service.get_company(company_id):
        raise click.ClickException(f"Company {company_id} not found")
    try:
        user = auth_service.create_user(
            username=username,
            password=password,
            name=name,
            role=role,
            company_id=company_id,
        )
    except (DuplicateUsernameError, InvalidRoleError) as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Created user {user.username} (ID: {user.id}, role: {user.role})")


@users_group.command('list')
@click.option('--role', type=click.Choice(list(USER_ROLES)), help='Filter by role')
@with_appcontext
def list_users(role):
    """List users."""
    query = db.session.query(User)
    if role:
        query = query.filter(User.role == role)
    users = query.order_by(User.id).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "=" * 80)
    click.echo(f"{'ID':<5} {'Username':<32} {'Role':<10} {'Company':<8} {'Last login'}")
    click.echo("=" * 80)
    for user in users:
        company = str(user.company_id) if user.company_id else "-"
        last_login = str(user.last_login_at)[:19] if user.last_login_at else "never"
        click.echo(f"{user.id:<5} {user.username:<32} {user.role:<10} {company:<8} {last_login}")
    click.echo("=" * 80 + "\n")


@click.group('maintenance')
def maintenance_group():
    """Maintenance commands."""


@maintenance_group.command('cleanup-sessions')
@click.option('--retention-days', type=int, default=30, show_default=True)
@with_appcontext
def cleanup_sessions_cli(retention_days):
    """Delete expired or revoked sessions."""
    deleted = session_service.cleanup_expired_sessions(retention_days=retention_days)
    click.echo(f"Deleted {deleted} sessions older than {retention_days} days.")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(maintenance_group)
