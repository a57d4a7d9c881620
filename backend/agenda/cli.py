# Overview: Flask CLI command groups for bootstrap, store setup, and schedule inspection.

# backend/agenda/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create all tables that do not exist yet (use `flask db upgrade` for migrations).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Store setup (MULTI-TENANT):
# - python -m flask stores list
#   List all stores with their time zones.
# - python -m flask stores create --name "Barbearia Central" --slug central --timezone Europe/Lisbon
#   Create a new store (tenant). The slug is derived from the name when omitted.
# - python -m flask stores add-service --slug central --name "Haircut" --duration 30 --price-cents 1500
#   Add a bookable service.
#
# Staff and hours:
# - python -m flask staff add --slug central --name "Ana"
#   Add a staff member to a store.
# - python -m flask staff list --slug central
#   List staff members of a store.
# - python -m flask hours set --slug central --staff-id 1 --day 0 --shift 09:00-13:00 --shift 14:00-18:00
#   Replace one weekday (0=Monday ... 6=Sunday). No --shift closes the day.
# - python -m flask hours show --slug central --staff-id 1
#   Print the weekly schedule.
#
# Availability inspection:
# - python -m flask slots show --slug central --staff-id 1 --date 2026-11-02 --service-minutes 30
#   Print the bookable start times for a day.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Staff
from .services import store_service, working_hours_service, availability_service
from .validation import ValidationError, NotFoundError, ConflictError

DAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


# =============================================================================
# SYSTEM COMMANDS
# =============================================================================

@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create missing tables from the model metadata."""
    click.echo("BUILD  Creating tables...")
    db.create_all()
    click.echo("PASS Database ready.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask stores create' to add a store.")


# =============================================================================
# STORE COMMANDS
# =============================================================================

@click.group('stores')
def stores_group():
    """Store (tenant) management commands."""


@stores_group.command('list')
@with_appcontext
def list_stores_cli():
    """List all stores."""
    stores = store_service.list_stores()

    if not stores:
        click.echo("No stores found.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<5} {'Slug':<25} {'Name':<25} {'Timezone':<18} {'Staff'}")
    click.echo("="*80)

    for store in stores:
        staff_count = db.session.query(Staff).filter_by(store_id=store.id).count()
        click.echo(f"{store.id:<5} {store.slug:<25} {store.name:<25} {store.timezone:<18} {staff_count}")

    click.echo("="*80 + "\n")


@stores_group.command('create')
@click.option('--name', required=True, help='Store name')
@click.option('--slug', help='URL slug (derived from the name when omitted)')
@click.option('--timezone', help='IANA time zone, e.g. Europe/Lisbon')
@with_appcontext
def create_store_cli(name, slug, timezone):
    """Create a new store (tenant)."""
    try:
        store = store_service.create_store(name=name, slug=slug, timezone=timezone)
    except (ValidationError, ConflictError) as e:
        click.echo(f"FAIL {e}")
        return

    click.echo(f"PASS Created store: {store.name} (ID: {store.id}, Slug: {store.slug}, TZ: {store.timezone})")


@stores_group.command('add-service')
@click.option('--slug', required=True, help='Store slug')
@click.option('--name', required=True, help='Service name')
@click.option('--duration', type=int, required=True, help='Duration in minutes')
@click.option('--price-cents', type=int, default=0, help='Price in cents')
@with_appcontext
def add_service_cli(slug, name, duration, price_cents):
    """Add a bookable service to a store."""
    try:
        service = store_service.add_service(slug, name=name, duration_minutes=duration, price_cents=price_cents)
    except (ValidationError, NotFoundError) as e:
        click.echo(f"FAIL {e}")
        return

    click.echo(f"PASS Created service: {service.name} (ID: {service.id}, {service.duration_minutes} min)")


# =============================================================================
# STAFF COMMANDS
# =============================================================================

@click.group('staff')
def staff_group():
    """Staff inspection and setup commands."""


@staff_group.command('add')
@click.option('--slug', required=True, help='Store slug')
@click.option('--name', required=True, help='Staff member name')
@click.option('--email', help='Contact email')
@with_appcontext
def add_staff_cli(slug, name, email):
    """Add a staff member to a store."""
    try:
        staff = store_service.add_staff(slug, name=name, email=email)
    except (ValidationError, NotFoundError) as e:
        click.echo(f"FAIL {e}")
        return

    click.echo(f"PASS Added staff member: {staff.name} (ID: {staff.id}) to '{slug}'")


@staff_group.command('list')
@click.option('--slug', required=True, help='Store slug')
@with_appcontext
def list_staff_cli(slug):
    """List staff members of a store."""
    try:
        staff = store_service.list_staff(slug)
    except NotFoundError as e:
        click.echo(f"FAIL {e}")
        return

    if not staff:
        click.echo("No staff found.")
        return

    for member in staff:
        click.echo(f"{member.id:<5} {member.name:<30} {member.email or '-'}")


# =============================================================================
# WORKING HOURS COMMANDS
# =============================================================================

@click.group('hours')
def hours_group():
    """Weekly working-hours commands."""


def _parse_shift_option(value: str) -> dict:
    start, sep, end = value.partition("-")
    if not sep:
        raise click.BadParameter(f"'{value}' is not a START-END range", param_hint="--shift")
    return {"is_open": True, "start": start.strip(), "end": end.strip()}


@hours_group.command('set')
@click.option('--slug', required=True, help='Store slug')
@click.option('--staff-id', type=int, required=True, help='Staff ID')
@click.option('--day', type=click.IntRange(0, 6), required=True, help='Weekday, 0=Monday')
@click.option('--shift', 'shifts', multiple=True, help='Shift as HH:MM-HH:MM (repeatable)')
@with_appcontext
def set_hours_cli(slug, staff_id, day, shifts):
    """Replace one weekday of a staff member's schedule."""
    parsed = [_parse_shift_option(shift) for shift in shifts]
    try:
        rules = working_hours_service.set_day_shifts(slug, staff_id, day, parsed)
    except (ValidationError, NotFoundError) as e:
        click.echo(f"FAIL {e}")
        return

    if not rules:
        click.echo(f"PASS {DAY_NAMES[day]} is now closed for staff {staff_id}")
        return
    ranges = ", ".join(f"{rule.start_time:%H:%M}-{rule.end_time:%H:%M}" for rule in rules if rule.is_open)
    click.echo(f"PASS {DAY_NAMES[day]} for staff {staff_id}: {ranges}")


@hours_group.command('show')
@click.option('--slug', required=True, help='Store slug')
@click.option('--staff-id', type=int, required=True, help='Staff ID')
@with_appcontext
def show_hours_cli(slug, staff_id):
    """Print a staff member's weekly schedule."""
    try:
        schedule = working_hours_service.get_week_schedule(slug, staff_id)
    except NotFoundError as e:
        click.echo(f"FAIL {e}")
        return

    for day, rules in schedule.items():
        open_rules = [rule for rule in rules if rule.is_open]
        if not open_rules:
            click.echo(f"{DAY_NAMES[day]}  closed")
            continue
        ranges = ", ".join(f"{rule.start_time:%H:%M}-{rule.end_time:%H:%M}" for rule in open_rules)
        click.echo(f"{DAY_NAMES[day]}  {ranges}")


# =============================================================================
# AVAILABILITY COMMANDS
# =============================================================================

@click.group('slots')
def slots_group():
    """Availability inspection commands."""


@slots_group.command('show')
@click.option('--slug', required=True, help='Store slug')
@click.option('--staff-id', type=int, required=True, help='Staff ID')
@click.option('--date', 'local_date', required=True, help='Store-local date (YYYY-MM-DD)')
@click.option('--service-minutes', type=int, help='Service length in minutes')
@click.option('--step', type=int, help='Grid step in minutes')
@click.option('--lead', type=int, help='Minimum notice in minutes')
@click.option('--buffer', type=int, help='Buffer after each appointment in minutes')
@with_appcontext
def show_slots_cli(slug, staff_id, local_date, service_minutes, step, lead, buffer):
    """Print the bookable start times for one day."""
    try:
        slots = availability_service.get_available_slots(
            slug,
            staff_id,
            local_date,
            service_minutes=service_minutes,
            step_minutes=step,
            lead_minutes=lead,
            buffer_after_minutes=buffer,
        )
    except (ValidationError, NotFoundError) as e:
        click.echo(f"FAIL {e}")
        return

    if not slots:
        click.echo("No available slots.")
        return
    click.echo(" ".join(slots))


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(stores_group)  # Multi-tenant store management
    app.cli.add_command(staff_group)
    app.cli.add_command(hours_group)
    app.cli.add_command(slots_group)
