import json
import typer

from typer import Option

from services.entity_type_manager import get_entity_type_manager
from services.sample_entity_generator import get_sample_entity_generator

app = typer.Typer()


def _route_table(db):
    from services.route_table_service import RouteTableService
    from services.section_storage.manager import build_section_storage_manager

    entity_type_manager = get_entity_type_manager()
    manager = build_section_storage_manager(db, entity_type_manager, get_sample_entity_generator())
    return RouteTableService(entity_type_manager, manager)


@app.command()
def routes(
    storage_type: str = Option(None, "--storage-type", help="Only routes of this section storage type"),
):
    """Print the route table"""
    from db.session import db_context

    with db_context() as db:
        collection = _route_table(db).build()
        for name, route in collection:
            if storage_type and route.get_default("section_storage_type") != storage_type:
                continue
            typer.echo(f"{name:60} {','.join(route.methods) or 'ANY':10} {route.path}")


@app.command()
def local_tasks():
    """Print the local task table as JSON"""
    from db.session import db_context

    with db_context() as db:
        typer.echo(json.dumps(_route_table(db).build_local_tasks(), indent=2))


@app.command()
def show_layout(
    storage_type: str = Option(..., "--storage-type"),
    storage_id: str = Option(..., "--storage-id"),
):
    """Print the sections stored for a layout"""
    from db.session import db_context
    from services.section_storage.manager import build_section_storage_manager

    with db_context() as db:
        manager = build_section_storage_manager(db, get_entity_type_manager(), get_sample_entity_generator())
        section_storage = manager.load_from_route(storage_type, storage_id, {})
        if section_storage is None:
            typer.echo(f"No {storage_type} layout for {storage_id}", err=True)
            raise typer.Exit(code=1)

        typer.echo(json.dumps([section.to_array() for section in section_storage.get_sections()], indent=2))

if __name__ == "__main__":
    app()
