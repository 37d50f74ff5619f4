"""
Pet Store CLI

Command-line interface for local administration.

Commands:
- init-db: Create the tables
- generate-key: Print a new ENCRYPTION_KEY
- create-store: Create a merchant's store
- add-pet: Add a pet to a merchant's store
- list-pets: List a store's pets
- purchase: Buy pets for a customer
- order-pets: Show the pets sold by an order
- serve: Run the HTTP API
"""

from typing import Optional
from uuid import UUID

import typer
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from petstore.errors import PetStoreError
from petstore.logging import setup_logging

app = typer.Typer(
    name="petstore",
    help="Pet Store administration CLI",
)

console = Console()


def get_db():
    """Get database session."""
    from petstore.db import get_db as _get_db

    return next(_get_db())


def get_cache():
    """Get the application cache."""
    from petstore.cache import get_cache as _get_cache

    return _get_cache()


def _parse_uuid(value: str, label: str) -> UUID:
    try:
        return UUID(value)
    except ValueError:
        rprint(f"[red]Invalid {label}: {value}[/red]")
        raise typer.Exit(1)


def _fail(error: PetStoreError) -> None:
    rprint(f"[red]{error}[/red]")
    raise typer.Exit(1)


def _pets_table(title: str, pets) -> Table:
    table = Table(title=title)
    table.add_column("ID", style="dim")
    table.add_column("Name")
    table.add_column("Species")
    table.add_column("Age")
    table.add_column("Status")
    table.add_column("Created")
    for pet in pets:
        table.add_row(
            str(pet.id),
            pet.name,
            pet.species.value,
            str(pet.age),
            pet.status.value,
            pet.created_at.strftime("%Y-%m-%d %H:%M"),
        )
    return table


@app.callback()
def main(log_level: Optional[str] = typer.Option(None, help="Override LOG_LEVEL")):
    setup_logging(log_level)


@app.command()
def init_db():
    """
    Create all tables.

    For PostgreSQL deployments prefer `alembic upgrade head`.
    """
    from petstore.db import init_db as _init_db

    _init_db()
    rprint("[green]Tables created[/green]")


@app.command()
def generate_key():
    """Print a new key for ENCRYPTION_KEY."""
    from petstore.encryption import generate_key as _generate_key

    typer.echo(_generate_key())


@app.command()
def create_store(
    name: str = typer.Argument(..., help="Store name"),
    owner_id: str = typer.Argument(..., help="Merchant username"),
):
    """Create the store owned by a merchant."""
    from petstore.contracts import CreateStoreInput
    from petstore.services import StoreService

    db = get_db()

    try:
        store = StoreService(db, get_cache()).create_store(
            CreateStoreInput(name=name, owner_id=owner_id)
        )
        rprint("[green]Store created:[/green]")
        rprint(f"  ID: {store.id}")
        rprint(f"  Name: {store.name}")
        rprint(f"  Owner: {store.owner_id}")
    except PetStoreError as e:
        _fail(e)
    finally:
        db.close()


@app.command()
def add_pet(
    owner_id: str = typer.Argument(..., help="Merchant username"),
    name: str = typer.Argument(..., help="Pet name"),
    species: str = typer.Argument(..., help="Cat, Dog or Frog"),
    age: int = typer.Argument(..., help="Age in years"),
    breeder_name: str = typer.Option(..., help="Breeder name"),
    breeder_email: str = typer.Option(..., help="Breeder email (stored encrypted)"),
    picture_url: Optional[str] = typer.Option(None, help="Picture URL"),
    description: Optional[str] = typer.Option(None, help="Description"),
):
    """Add a pet to the merchant's store."""
    from petstore.contracts import CreatePetInput
    from petstore.encryption import get_encryptor
    from petstore.services import PetService, StoreService

    db = get_db()

    try:
        cache = get_cache()
        store = StoreService(db, cache).get_store_by_owner(owner_id)
        pet = PetService(db, cache, get_encryptor()).create_pet(
            CreatePetInput(
                store_id=store.id,
                name=name,
                species=species,
                age=age,
                breeder_name=breeder_name,
                breeder_email=breeder_email,
                picture_url=picture_url,
                description=description,
            )
        )
        rprint("[green]Pet created:[/green]")
        rprint(f"  ID: {pet.id}")
        rprint(f"  Store: {store.name} ({store.id})")
    except PetStoreError as e:
        _fail(e)
    finally:
        db.close()


@app.command()
def list_pets(
    store_id: str = typer.Argument(..., help="Store UUID"),
    status: Optional[str] = typer.Option(None, help="Filter by status (available, sold)"),
    limit: int = typer.Option(50, help="Maximum number of pets to show"),
):
    """List a store's pets, newest first."""
    from petstore.contracts import PetFilter
    from petstore.persistence.models import PetStatus
    from petstore.services import PetService

    store_uuid = _parse_uuid(store_id, "store ID")

    status_filter = None
    if status:
        try:
            status_filter = PetStatus(status)
        except ValueError:
            rprint(f"[red]Unknown status: {status}[/red]")
            raise typer.Exit(1)

    db = get_db()

    try:
        # Listing never decrypts, so no key is needed
        pets, total = PetService(db, get_cache(), encryptor=None).list_pets(
            PetFilter(store_id=store_uuid, status=status_filter, limit=limit)
        )
        if not pets:
            rprint("[yellow]No pets found[/yellow]")
            raise typer.Exit(0)

        console.print(_pets_table(f"Pets in store {store_id[:8]}... ({total} total)", pets))
    except PetStoreError as e:
        _fail(e)
    finally:
        db.close()


@app.command()
def purchase(
    customer_id: str = typer.Argument(..., help="Customer username"),
    store_id: str = typer.Argument(..., help="Store UUID"),
    pet_ids: list[str] = typer.Argument(..., help="Pet UUIDs, in purchase order"),
):
    """
    Buy pets from a store.

    Pets that are no longer available are reported but do not fail the
    order unless none could be sold.
    """
    from petstore.contracts import CreateOrderInput
    from petstore.services import OrderService

    store_uuid = _parse_uuid(store_id, "store ID")
    pet_uuids = [_parse_uuid(pet_id, "pet ID") for pet_id in pet_ids]

    db = get_db()

    try:
        result = OrderService(db, get_cache()).create_order(
            CreateOrderInput(customer_id=customer_id, store_id=store_uuid, pet_ids=pet_uuids)
        )
        order = result.order
        rprint(f"[green]Order {order.id} created: {order.total_pets} pets[/green]")
        for pet_id in result.fulfilled_pet_ids:
            rprint(f"  Sold: {pet_id}")
        if result.error:
            rprint(f"[yellow]{result.error}[/yellow]")
    except PetStoreError as e:
        _fail(e)
    finally:
        db.close()


@app.command()
def order_pets(order_id: str = typer.Argument(..., help="Order UUID")):
    """Show the pets sold by an order."""
    from petstore.services import OrderService

    order_uuid = _parse_uuid(order_id, "order ID")

    db = get_db()

    try:
        pets = OrderService(db, get_cache()).get_order_pets(order_uuid)
        console.print(_pets_table(f"Pets in order {order_id[:8]}...", pets))
    except PetStoreError as e:
        _fail(e)
    finally:
        db.close()


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Bind address"),
    port: int = typer.Option(8000, help="Port"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run("petstore.api.main:create_app", host=host, port=port, reload=reload, factory=True)


if __name__ == "__main__":
    app()
