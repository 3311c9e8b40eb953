"""
CLI commands for database setup and provider bootstrapping.
"""

import click
from sqlalchemy.orm import Session

from eduportal_backend.auth.passwords import hash_password
from eduportal_backend.database import get_engine
from eduportal_backend.model.base import Base
from eduportal_backend.model.tenant import Provider, ProviderUser
from eduportal_backend.permissions.defaults import DEFAULT_PROVIDER_PERMISSIONS


@click.command()
def init_db():
    """Create all tables on the configured database."""
    import eduportal_backend.model  # noqa: F401

    Base.metadata.create_all(bind=get_engine())
    click.echo("Database tables created")


@click.command()
@click.option("--name", "-n", "name", prompt=True, help="Provider organization name")
@click.option("--email", "-e", "email", prompt=True, help="Manager email")
@click.option("--first-name", "first_name", prompt=True)
@click.option("--last-name", "last_name", prompt=True)
@click.option("--password", "-p", "password", prompt=True, hide_input=True, confirmation_prompt=True)
def create_provider(name: str, email: str, first_name: str, last_name: str, password: str):
    """
    Create a provider and its first manager.

    Examples:
        eduportal create-provider --name "Acme Schools" --email ops@acme.test
    """
    email = email.strip().lower()

    with Session(get_engine()) as db:

        existing = db.query(ProviderUser).filter(ProviderUser.email == email, ProviderUser.deleted == False).first()
        if existing is not None:
            raise click.ClickException(f"Provider user {email} already exists")

        provider = Provider(name=name, email=email, is_active=True)
        db.add(provider)
        db.flush()

        db.add(ProviderUser(
            provider_id=provider.id,
            first_name=first_name,
            last_name=last_name,
            email=email,
            password=hash_password(password),
            permissions=list(DEFAULT_PROVIDER_PERMISSIONS),
            is_active=True,
        ))
        db.commit()

        click.echo(f"Provider {provider.id} created with manager {email}")
