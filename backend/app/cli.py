# Overview: Flask CLI command groups for bootstrap, users and demo data.

# backend/app/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create all tables that do not exist yet (idempotent).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection/bootstrap:
# - python -m flask users list
#   List all users with role and active status.
# - python -m flask users create --name "Admin User" --email admin@example.com --role admin
#   Create a user (prompts if options are omitted).
#
# Demo data:
# - python -m flask seed demo [--sales 20] [--days-history 30] [--seed 42]
#   Users, products, customers, expenses and sales recorded through the sale service.

import random
from datetime import timedelta
from decimal import Decimal

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Customer, Expense, Product, User, USER_ROLES, PAYMENT_METHODS, PAYMENT_STATUSES
from .services import sales_service
from .services.sales_service import SaleTransactionError
from .time_utils import utcnow


DEMO_USERS = [
    ("Admin User", "admin@example.com", "admin"),
    ("Manager User", "manager@example.com", "manager"),
    ("Secretary User", "secretary@example.com", "secretary"),
    ("Regular User", "user@example.com", "user"),
]

# name, sku, description, cost, price, stock, unit, category
DEMO_PRODUCTS = [
    ("Laptop Dell XPS 15", "LAP-DELL-001", "High-performance laptop for professionals", "800.00", "1200.00", 25, "piece", "Electronics"),
    ("Wireless Mouse Logitech", "ACC-LOG-001", "Ergonomic wireless mouse", "15.00", "25.00", 100, "piece", "Accessories"),
    ("Office Chair Premium", "FUR-CHA-001", "Ergonomic office chair with lumbar support", "120.00", "200.00", 50, "piece", "Furniture"),
    ('Samsung 27" Monitor', "MON-SAM-001", "4K Ultra HD monitor", "250.00", "400.00", 30, "piece", "Electronics"),
    ("Mechanical Keyboard RGB", "ACC-KEY-001", "Gaming mechanical keyboard with RGB lighting", "50.00", "85.00", 8, "piece", "Accessories"),
    ("Desk Lamp LED", "FUR-LAM-001", "Adjustable LED desk lamp", "20.00", "35.00", 60, "piece", "Furniture"),
    ("USB-C Hub Multi-port", "ACC-HUB-001", "7-in-1 USB-C hub adapter", "25.00", "45.00", 5, "piece", "Accessories"),
    ("Notebook A4 Pack", "STA-NOT-001", "Pack of 5 A4 notebooks", "8.00", "15.00", 120, "pack", "Stationery"),
    ("Pen Set Premium", "STA-PEN-001", "Set of 10 premium ballpoint pens", "5.00", "10.00", 150, "set", "Stationery"),
    ("Webcam HD 1080p", "ACC-WEB-001", "Full HD webcam with microphone", "40.00", "70.00", 35, "piece", "Electronics"),
]

DEMO_CUSTOMERS = [
    ("ABC Corporation", "contact@abc.com", "1234567890", "123 Business St, City", "wholesale"),
    ("XYZ Retail Store", "info@xyz.com", "0987654321", "456 Market Ave, Town", "retail"),
    ("John Doe", "john@example.com", "5551234567", "789 Main St, Village", "regular"),
    ("Jane Smith", "jane@example.com", "5559876543", "321 Oak Rd, City", "regular"),
    ("Tech Solutions Inc", "sales@techsolutions.com", "5555555555", "999 Innovation Blvd, Metro", "wholesale"),
]

# category, description, amount, days ago, payment method, receipt prefix
DEMO_EXPENSES = [
    ("Rent", "Office rent", "2500.00", 0, "transfer", "RENT"),
    ("Utilities", "Electricity bill", "350.00", 5, "transfer", "ELEC"),
    ("Utilities", "Internet service", "100.00", 10, "card", "NET"),
    ("Salaries", "Employee salaries", "8000.00", 1, "transfer", "SAL"),
    ("Supplies", "Office supplies and stationery", "200.00", 15, "cash", "SUP"),
]


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create missing tables. Existing data is left alone."""
    db.create_all()
    click.echo("OK Database schema is up to date")


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
    click.echo("OK Database reset complete")


@click.group('users')
def users_group():
    """User management commands."""


@users_group.command('create')
@click.option('--name', prompt=True, help='Display name')
@click.option('--email', prompt=True, help='Email address')
@click.option('--role', type=click.Choice(USER_ROLES), prompt=True, help='Role')
@with_appcontext
def create_user_cli(name, email, role):
    """Create a user that can be named in the X-User-Id header."""
    email = email.strip().lower()
    if db.session.query(User).filter_by(email=email).first():
        raise click.ClickException(f"User with email {email} already exists")

    user = User(name=name.strip(), email=email, role=role, is_active=True)
    db.session.add(user)
    db.session.commit()
    click.echo(f"OK Created user id={user.id} {user.email} ({user.role})")


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users."""
    users = db.session.query(User).order_by(User.id.asc()).all()
    if not users:
        click.echo("No users found.")
        return

    click.echo(f"{'ID':<5} {'Name':<25} {'Email':<30} {'Role':<10} {'Active':<6}")
    click.echo("-" * 80)
    for u in users:
        click.echo(f"{u.id:<5} {u.name:<25} {u.email:<30} {u.role:<10} {'yes' if u.is_active else 'no':<6}")


@click.group('seed')
def seed_group():
    """Demo data commands."""


def _ensure_user(name: str, email: str, role: str) -> User:
    user = db.session.query(User).filter_by(email=email).first()
    if user is None:
        user = User(name=name, email=email, role=role, is_active=True)
        db.session.add(user)
    return user


def _ensure_product(name, sku, description, cost, price, stock, unit, category) -> Product:
    # upsert by SKU; stock is only set when the product is new
    product = db.session.query(Product).filter_by(sku=sku).first()
    if product is None:
        product = Product(sku=sku, stock_quantity=stock)
        db.session.add(product)
    product.name = name
    product.description = description
    product.cost_price = Decimal(cost)
    product.selling_price = Decimal(price)
    product.unit = unit
    product.category = category
    product.is_active = True
    return product


def _ensure_customer(name, email, phone, address, customer_type) -> Customer:
    customer = db.session.query(Customer).filter_by(email=email).first()
    if customer is None:
        customer = Customer(email=email)
        db.session.add(customer)
    customer.name = name
    customer.phone = phone
    customer.address = address
    customer.customer_type = customer_type
    return customer


@seed_group.command('demo')
@click.option('--sales', 'sales_count', type=int, default=20, show_default=True, help='Number of sales to record')
@click.option('--days-history', type=int, default=30, show_default=True, help='How far back sale dates go')
@click.option('--seed', type=int, default=None, help='Random seed for reproducible data')
@with_appcontext
def seed_demo(sales_count, days_history, seed):
    """
    Populate demo users, products, customers, expenses and sales.

    Re-running is safe for master data (matched by email / SKU). Sales are
    always appended and go through the sale service, so stock moves with them.
    """
    rng = random.Random(seed)
    today = utcnow().date()

    users = [_ensure_user(*row) for row in DEMO_USERS]
    products = [_ensure_product(*row) for row in DEMO_PRODUCTS]
    customers = [_ensure_customer(*row) for row in DEMO_CUSTOMERS]
    db.session.commit()
    click.echo(f"OK {len(users)} users, {len(products)} products, {len(customers)} customers")

    admin = users[0]
    added_expenses = 0
    for category, description, amount, days_ago, method, prefix in DEMO_EXPENSES:
        expense_date = today - timedelta(days=days_ago)
        receipt = f"{prefix}-{expense_date:%Y-%m}"
        exists = db.session.query(Expense).filter_by(receipt_number=receipt).first()
        if exists:
            continue
        db.session.add(Expense(
            user_id=admin.id,
            category=category,
            description=description,
            amount=Decimal(amount),
            expense_date=expense_date,
            payment_method=method,
            receipt_number=receipt,
        ))
        added_expenses += 1
    db.session.commit()
    click.echo(f"OK {added_expenses} expenses")

    recorded = 0
    skipped = 0
    for i in range(1, sales_count + 1):
        picks = rng.sample(products, k=rng.randint(1, 4))
        items = [
            {
                "product_id": p.id,
                "quantity": rng.randint(1, 3),
                "unit_price": p.selling_price,
            }
            for p in picks
        ]
        try:
            sales_service.create_sale(
                user_id=rng.choice(users).id,
                sale_date=today - timedelta(days=rng.randint(0, days_history)),
                payment_method=rng.choice(PAYMENT_METHODS),
                payment_status=rng.choice(PAYMENT_STATUSES),
                customer_name=rng.choice(customers).name,
                notes=f"Sample sale #{i}",
                items=items,
            )
            recorded += 1
        except SaleTransactionError as exc:
            # demo stock runs out eventually; keep going with the rest
            click.echo(f"SKIP sale #{i}: {exc.cause}")
            skipped += 1

    click.echo(f"OK {recorded} sales recorded, {skipped} skipped")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(seed_group)
