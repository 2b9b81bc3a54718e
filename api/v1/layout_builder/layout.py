import logging

from fastapi import APIRouter, Depends, HTTPException, Path, Request

from core.routing import RouteCollection, RouteNotFoundError, Url
from schemas.layout import LayoutActionOut, RouteOut, SectionsIn, SectionStorageOut
from services.entity_type_manager import EntityTypeNotFoundError
from services.layout_builder_service import LayoutBuilderService, get_layout_builder_service
from services.route_table_service import RouteTableService, get_route_table_service
from services.section_storage.base import SectionStorageBase
from services.section_storage.exceptions import InvalidStorageIdError
from services.section_storage.identifiers import is_storage_id
from services.section_storage.manager import SectionStorageManager, get_section_storage_manager
from services.section_storage.overrides import OverridesSectionStorage

router = APIRouter()
logger = logging.getLogger(__name__)


def get_section_storage_or_404(
    storage_type: str = Path(),
    storage_id: str = Path(),
    manager: SectionStorageManager = Depends(get_section_storage_manager),
) -> SectionStorageBase:
    if not manager.has_definition(storage_type):
        raise HTTPException(status_code=404, detail=f'Unknown section storage type "{storage_type}"')

    try:
        if not is_storage_id(storage_id):
            raise InvalidStorageIdError(storage_id, storage_type)
        section_storage = manager.load_from_route(storage_type, storage_id, {})
    except InvalidStorageIdError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if section_storage is None:
        raise HTTPException(status_code=404, detail="Layout not found")

    try:
        access = section_storage.access("view", return_as_object=True)
    except EntityTypeNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    if not access.is_allowed():
        raise HTTPException(status_code=403, detail=access.reason or "Access denied")
    return section_storage


def _render_url(url: Url, collection: RouteCollection) -> str | None:
    try:
        return url.to_string(collection)
    except (RouteNotFoundError, ValueError) as e:
        logger.warning(f"Could not render URL for {url.route_name}: {e}")
        return None


def _storage_out(
    section_storage: SectionStorageBase,
    collection: RouteCollection,
    has_unsaved_changes: bool = False,
) -> SectionStorageOut:
    access = section_storage.access("view", return_as_object=True)
    try:
        label = section_storage.label()
        preview_contexts = sorted(section_storage.get_contexts_during_preview())
    except EntityTypeNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return SectionStorageOut(
        storage_type=section_storage.get_storage_type(),
        storage_id=section_storage.get_storage_id(),
        label=label,
        sections=section_storage.get_sections(),
        is_overridden=section_storage.is_overridden() if isinstance(section_storage, OverridesSectionStorage) else None,
        has_unsaved_changes=has_unsaved_changes,
        access_allowed=access.is_allowed(),
        cache_tags=access.cache_tags,
        preview_contexts=preview_contexts,
        layout_builder_url=_render_url(section_storage.get_layout_builder_url(), collection),
        redirect_url=_render_url(section_storage.get_redirect_url(), collection),
    )


# --- ROUTE TABLE ---

@router.get("/routes/", response_model=list[RouteOut])
def list_routes(route_table: RouteTableService = Depends(get_route_table_service)):
    return [
        RouteOut(
            name=name,
            path=route.path,
            methods=route.methods,
            defaults=route.defaults,
            requirements=route.requirements,
            options=route.options,
        )
        for name, route in route_table.build()
    ]


@router.get("/local-tasks/")
def list_local_tasks(route_table: RouteTableService = Depends(get_route_table_service)) -> dict[str, dict]:
    return route_table.build_local_tasks()


@router.get("/resolve/{route_name}", response_model=SectionStorageOut)
def resolve_route(
    request: Request,
    route_name: str = Path(),
    route_table: RouteTableService = Depends(get_route_table_service),
):
    """Resolve a layout route, with its path variables passed as query parameters"""
    try:
        section_storage = route_table.resolve(route_name, dict(request.query_params))
    except RouteNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidStorageIdError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if section_storage is None:
        raise HTTPException(status_code=404, detail="Layout not found")
    return _storage_out(section_storage, route_table.build())


# --- EDITING ---

@router.get("/{storage_type}/{storage_id}/", response_model=SectionStorageOut)
def view_layout(
    section_storage: SectionStorageBase = Depends(get_section_storage_or_404),
    layout_service: LayoutBuilderService = Depends(get_layout_builder_service),
    route_table: RouteTableService = Depends(get_route_table_service),
):
    prepared = layout_service.prepare_layout(section_storage)
    return _storage_out(prepared.section_storage, route_table.build(), prepared.has_unsaved_changes)


@router.put("/{storage_type}/{storage_id}/sections/", response_model=SectionStorageOut)
def update_sections(
    data: SectionsIn,
    section_storage: SectionStorageBase = Depends(get_section_storage_or_404),
    layout_service: LayoutBuilderService = Depends(get_layout_builder_service),
    route_table: RouteTableService = Depends(get_route_table_service),
):
    layout_service.update_sections(section_storage, data.sections)
    return _storage_out(section_storage, route_table.build(), has_unsaved_changes=True)


@router.post("/{storage_type}/{storage_id}/save/", response_model=LayoutActionOut)
def save_layout(
    section_storage: SectionStorageBase = Depends(get_section_storage_or_404),
    layout_service: LayoutBuilderService = Depends(get_layout_builder_service),
    route_table: RouteTableService = Depends(get_route_table_service),
):
    layout_service.save_layout(section_storage)
    return LayoutActionOut(
        storage_type=section_storage.get_storage_type(),
        storage_id=section_storage.get_storage_id(),
        message="The layout has been saved.",
        redirect_url=_render_url(section_storage.get_redirect_url(), route_table.build()),
    )


@router.post("/{storage_type}/{storage_id}/cancel/", response_model=LayoutActionOut)
def cancel_layout(
    section_storage: SectionStorageBase = Depends(get_section_storage_or_404),
    layout_service: LayoutBuilderService = Depends(get_layout_builder_service),
    route_table: RouteTableService = Depends(get_route_table_service),
):
    layout_service.cancel_layout(section_storage)
    return LayoutActionOut(
        storage_type=section_storage.get_storage_type(),
        storage_id=section_storage.get_storage_id(),
        message="The changes to the layout have been discarded.",
        redirect_url=_render_url(section_storage.get_redirect_url(), route_table.build()),
    )


@router.post("/{storage_type}/{storage_id}/revert/", response_model=LayoutActionOut)
def revert_layout(
    section_storage: SectionStorageBase = Depends(get_section_storage_or_404),
    layout_service: LayoutBuilderService = Depends(get_layout_builder_service),
    route_table: RouteTableService = Depends(get_route_table_service),
):
    # Only overrides have a revert route
    if not section_storage.provides_revert:
        raise HTTPException(status_code=404, detail="Not found")

    layout_service.revert_layout(section_storage)
    return LayoutActionOut(
        storage_type=section_storage.get_storage_type(),
        storage_id=section_storage.get_storage_id(),
        message="The layout has been reverted back to defaults.",
        redirect_url=_render_url(section_storage.get_redirect_url(), route_table.build()),
    )
