"""Common contract of the section storage types"""

import warnings
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Mapping

from core.access import AccessResult
from core.routing import Route, RouteCollection, Url, merge_deep
from schemas.section import Section
from services.section_storage.context import Context, DefaultsContexts, OverridesContexts
from services.section_storage.exceptions import ContextException, SectionListAssignmentError

CONTROLLER_MODULE = "api.v1.layout_builder.layout"


class SectionStorageBase(ABC):
    """
    A place where an ordered list of layout sections is kept.

    An instance is bound to one set of contexts (``set_contexts``) for the
    length of a request; every operation other than route building and
    context derivation needs those contexts.
    """

    storage_type: ClassVar[str]
    context_class: ClassVar[type[DefaultsContexts] | type[OverridesContexts]]
    provides_revert: ClassVar[bool] = False
    # Lower weights are tried first when looking a storage up by context
    weight: ClassVar[int] = 0

    def __init__(self):
        self._contexts = None

    def get_storage_type(self) -> str:
        return self.storage_type

    # Contexts

    def set_context(self, name: str, context: Context) -> "SectionStorageBase":
        current = self._contexts.to_dict() if self._contexts is not None else {}
        return self.set_contexts({**current, name: context})

    def set_contexts(self, contexts: Mapping[str, Context]) -> "SectionStorageBase":
        self._contexts = self.context_class.from_mapping(contexts)
        return self

    def has_contexts(self) -> bool:
        return self._contexts is not None

    @property
    def contexts(self):
        if self._contexts is None:
            raise ContextException(f'The "{self.storage_type}" section storage has no contexts set')
        return self._contexts

    def get_contexts(self) -> dict[str, Context]:
        return self.contexts.to_dict()

    def get_context_value(self, name: str) -> Any:
        context = self.get_contexts().get(name)
        if context is None:
            raise ContextException(f'The "{name}" context is not set')
        return context.get_context_value()

    def get_contexts_during_preview(self) -> dict[str, Context]:
        return self.get_contexts()

    @abstractmethod
    def derive_contexts_from_route(self, value, defaults: Mapping[str, Any]) -> dict[str, Context]:
        """Contexts for the raw route value and defaults, or an empty dict."""

    # Section list

    @abstractmethod
    def get_section_list(self):
        """The live section list of the backing record."""

    def count(self) -> int:
        return self.get_section_list().count()

    def get_sections(self) -> list[Section]:
        return self.get_section_list().get_sections()

    def get_section(self, delta: int) -> Section:
        return self.get_section_list().get_section(delta)

    def append_section(self, section: Section) -> "SectionStorageBase":
        self.get_section_list().append_section(section)
        return self

    def insert_section(self, delta: int, section: Section) -> "SectionStorageBase":
        self.get_section_list().insert_section(delta, section)
        return self

    def remove_section(self, delta: int) -> "SectionStorageBase":
        self.get_section_list().remove_section(delta)
        return self

    def remove_all_sections(self, set_blank: bool = False) -> "SectionStorageBase":
        self.get_section_list().remove_all_sections(set_blank)
        return self

    # Identity and persistence

    @abstractmethod
    def get_storage_id(self) -> str:
        ...

    def get_tempstore_key(self) -> tuple[str, str]:
        return self.storage_type, self.get_storage_id()

    @abstractmethod
    def label(self) -> str | None:
        ...

    @abstractmethod
    def save(self):
        ...

    @abstractmethod
    def access(self, operation: str, account=None, return_as_object: bool = False) -> bool | AccessResult:
        ...

    @abstractmethod
    def get_redirect_url(self) -> Url:
        ...

    @abstractmethod
    def get_layout_builder_url(self, rel: str = "view") -> Url:
        ...

    # Routes

    @abstractmethod
    def build_routes(self, collection: RouteCollection) -> None:
        ...

    @abstractmethod
    def build_local_tasks(self, base_plugin_definition: dict) -> dict[str, dict]:
        ...

    def build_layout_routes(
        self,
        collection: RouteCollection,
        path: str,
        defaults: dict | None = None,
        requirements: dict | None = None,
        options: dict | None = None,
        route_name_prefix: str = "",
    ) -> None:
        """
        Register the editing routes for one path.

        Adds ``view``, ``save`` and ``cancel`` routes, and ``revert`` for
        storage types that provide it, named
        ``layout_builder.{storage_type}.{route_name_prefix}.{rel}``.
        """
        defaults = {
            **(defaults or {}),
            "section_storage_type": self.storage_type,
            # Empty so that the section storage parameter is always converted
            "section_storage": "",
        }
        requirements = {**(requirements or {}), "_layout_builder_access": "view"}
        options = merge_deep(
            {"parameters": {"section_storage": {"layout_builder_tempstore": True}}},
            {**(options or {}), "_layout_builder": True},
        )

        if route_name_prefix:
            route_name_prefix = f"layout_builder.{self.storage_type}.{route_name_prefix}"
        else:
            route_name_prefix = f"layout_builder.{self.storage_type}"

        rels = [
            ("view", path, "view_layout", ["GET"]),
            ("save", f"{path}/save", "save_layout", ["GET", "POST"]),
            ("cancel", f"{path}/cancel", "cancel_layout", ["GET", "POST"]),
        ]
        if self.provides_revert:
            rels.append(("revert", f"{path}/revert", "revert_layout", ["GET", "POST"]))

        for rel, rel_path, handler, methods in rels:
            route_defaults = {**defaults, "_controller": f"{CONTROLLER_MODULE}.{handler}"}
            if rel == "view":
                route_defaults["_title"] = "Edit layout"
            collection.add(
                f"{route_name_prefix}.{rel}",
                Route(
                    path=rel_path,
                    defaults=route_defaults,
                    requirements=dict(requirements),
                    options=merge_deep(options),
                    methods=methods,
                ),
            )

    # Legacy pull-based resolution

    def extract_id_from_route(self, value, defaults: Mapping[str, Any]) -> str | None:
        warnings.warn(
            "extract_id_from_route() is deprecated, use derive_contexts_from_route() instead.",
            DeprecationWarning,
            stacklevel=2,
        )
        return self._extract_id_from_route(value, defaults)

    def get_section_list_from_id(self, storage_id: str):
        warnings.warn(
            "get_section_list_from_id() is deprecated, the section list should be derived from context.",
            DeprecationWarning,
            stacklevel=2,
        )
        return self._get_section_list_from_id(storage_id)

    def set_section_list(self, section_list) -> None:
        warnings.warn(
            "set_section_list() is deprecated, the section list should be derived from context.",
            DeprecationWarning,
            stacklevel=2,
        )
        raise SectionListAssignmentError(
            "set_section_list() must no longer be called. The section list should be derived from context."
        )

    @abstractmethod
    def _extract_id_from_route(self, value, defaults: Mapping[str, Any]) -> str | None:
        ...

    @abstractmethod
    def _get_section_list_from_id(self, storage_id: str):
        ...
