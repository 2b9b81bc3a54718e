from typing import Any, Optional

from pydantic import BaseModel, Field

from schemas.section import Section


# --- SECTION STORAGES ---

class SectionsIn(BaseModel):
    sections: list[Section]


class SectionStorageOut(BaseModel):
    storage_type: str
    storage_id: str
    label: Optional[str] = None
    sections: list[Section]
    is_overridden: Optional[bool] = None
    has_unsaved_changes: bool = False
    access_allowed: bool = True
    cache_tags: list[str] = Field(default_factory=list)
    preview_contexts: list[str] = Field(default_factory=list)
    layout_builder_url: Optional[str] = None
    redirect_url: Optional[str] = None


class LayoutActionOut(BaseModel):
    storage_type: str
    storage_id: str
    message: str
    redirect_url: Optional[str] = None


# --- ROUTE TABLE ---

class RouteOut(BaseModel):
    name: str
    path: str
    methods: list[str]
    defaults: dict[str, Any]
    requirements: dict[str, str]
    options: dict[str, Any]
