# Overview: Flask CLI command group for store bootstrap, inspection, and maintenance.

# backend/stockbook/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask store <command> [options]
#
# - python -m flask store init
#   Idempotent: create tables and seed default categories, walk-in customer and supplier.
# - python -m flask store status
#   Show the active backend and record counts.
# - python -m flask store reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data), then reseed.
# - python -m flask store list-products [--available]
#   List products (optionally only those that can be invoiced).

import click
from flask.cli import with_appcontext

from .extensions import get_store
from .services import products_service, setup_service
from .validation import InventoryError


@click.group('store')
def store_group():
    """Inventory store bootstrap and inspection commands."""


@store_group.command('init')
@with_appcontext
def init_store():
    """
    Initialize the store: schema plus seed data for empty registries.

    Seeds (only into empty tables):
    - Categories: Smartphones, Laptops, Accessories, Tablets
    - Customer: Walk-in Customer
    - Supplier: Default Supplier
    """
    store = get_store()
    click.echo(f"START Initializing {store.backend} store...")
    try:
        result = setup_service.initialize_store(store)
    except InventoryError as e:
        raise click.ClickException(e.message)

    seeded = result["seeded"]
    for name, count in seeded.items():
        if count:
            click.echo(f"PASS Seeded {count} {name}")
        else:
            click.echo(f"PASS {name.capitalize()} already present")
    click.echo("DONE Store ready.")


@store_group.command('status')
@with_appcontext
def store_status():
    """Show backend and record counts."""
    try:
        status = setup_service.store_status(get_store())
    except InventoryError as e:
        raise click.ClickException(e.message)

    click.echo(f"Backend: {status['backend']}")
    if not status["initialized"]:
        click.echo("WARN Store not initialized. Run: flask store init")
        return
    for name, count in status["counts"].items():
        click.echo(f"  {name:<16} {count}")


@store_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    store = get_store()
    click.echo("DELETE  Dropping all tables...")
    store.drop_schema()

    click.echo("BUILD  Creating all tables...")
    setup_service.initialize_store(store)

    click.echo("PASS Database reset complete.")


@store_group.command('list-products')
@click.option('--available', is_flag=True, help='Only products that can be invoiced')
@with_appcontext
def list_products(available):
    """List products, newest purchase first."""
    store = get_store()
    try:
        if available:
            products = products_service.list_available_products(store)
        else:
            products = products_service.list_products(store)
    except InventoryError as e:
        raise click.ClickException(e.message)

    if not products:
        click.echo("No products found.")
        return

    for p in products:
        ident = p.imei if p.imei else f"qty {p.quantity}"
        click.echo(
            f"{p.id}  {p.product_name:<30} {p.category or '-':<14} {p.status:<9} {ident:<18} {p.selling_price:>10}"
        )
    click.echo(f"\nTotal: {len(products)}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(store_group)
