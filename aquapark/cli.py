# aquapark/cli.py
import click
import pandas as pd
from flask_jwt_extended import create_access_token
from werkzeug.security import generate_password_hash
from .extensions import db
from .model import User, Meal, Ticket, TicketType, ROLE_LEVEL, TICKET_AVAILABLE
from .utils.money import round_money, D

@click.command("create-user")
@click.option("--name", required=True)
@click.option("--role", type=click.Choice(sorted(ROLE_LEVEL)), default="cashier", show_default=True)
@click.option("--email", default=None)
@click.option("--password", default=None)
@click.option("--token/--no-token", default=False, help="Print a development access token.")
def create_user(name, role, email, password, token):
    email = email.strip().lower() if email else None
    if email and User.query.filter_by(email=email).first():
        click.echo("Email already exists"); return
    u = User(
        name=name.strip(),
        email=email,
        role=role,
        password_hash=generate_password_hash(password) if password else "",
    )
    db.session.add(u); db.session.commit()
    click.echo(f"User created: {u.id} {u.name} ({u.role})")
    if token:
        click.echo(create_access_token(identity=str(u.id)))

def _flag(value):
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y"}
    return bool(value) if not pd.isna(value) else False

@click.command("import-catalog")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--kind", type=click.Choice(["tickets", "meals"]), required=True)
def import_catalog(path, kind):
    """
    Load ticket types or meals from an Excel sheet.

    tickets columns: Category, Subcategory, Price[, Archived]
    meals columns:   Name, Category, Price[, Archived]
    """
    df = pd.read_excel(path)
    df.columns = df.columns.str.strip()

    for _, row in df.iterrows():
        archived = _flag(row["Archived"]) if "Archived" in df.columns else False
        price = round_money(D(row["Price"]))
        if kind == "tickets":
            db.session.add(TicketType(
                category=str(row["Category"]).strip(),
                subcategory=str(row["Subcategory"]).strip(),
                price=price,
                archived=archived,
            ))
        else:
            db.session.add(Meal(
                name=str(row["Name"]).strip(),
                category=str(row["Category"]).strip() if "Category" in df.columns else None,
                price=price,
                archived=archived,
            ))
    db.session.commit()
    click.echo(f"{len(df)} {kind} imported from {path}")

@click.command("generate-tickets")
@click.option("--ticket-type-id", type=int, required=True)
@click.option("--quantity", type=click.IntRange(min=1), required=True)
def generate_tickets(ticket_type_id, quantity):
    if not db.session.get(TicketType, ticket_type_id):
        raise click.BadParameter(f"ticket type {ticket_type_id} not found", param_hint="--ticket-type-id")
    db.session.add_all(
        Ticket(ticket_type_id=ticket_type_id, status=TICKET_AVAILABLE, valid=True)
        for _ in range(quantity)
    )
    db.session.commit()
    click.echo(f"{quantity} tickets generated for type {ticket_type_id}")

def register_cli(app):
    app.cli.add_command(create_user)
    app.cli.add_command(import_catalog)
    app.cli.add_command(generate_tickets)
