"""Route table primitives shared by the section storages and the API layer"""

import re
from dataclasses import dataclass, field
from typing import Any, Iterator


PLACEHOLDER_PATTERN = re.compile(r"\{([a-zA-Z_][a-zA-Z0-9_]*)\}")


class RouteNotFoundError(LookupError):
    def __init__(self, route_name: str):
        self.route_name = route_name
        super().__init__(f'Route "{route_name}" does not exist')


def merge_deep(*mappings: dict) -> dict:
    """
    Recursively merge mappings, later values winning.

    Nested dicts are merged key by key instead of being replaced, so options
    such as ``parameters`` on an existing route keep their entries.
    """
    result: dict = {}
    for mapping in mappings:
        for key, value in mapping.items():
            if isinstance(value, dict) and isinstance(result.get(key), dict):
                result[key] = merge_deep(result[key], value)
            elif isinstance(value, dict):
                result[key] = merge_deep(value)
            else:
                result[key] = value
    return result


@dataclass
class Route:
    path: str
    defaults: dict[str, Any] = field(default_factory=dict)
    requirements: dict[str, str] = field(default_factory=dict)
    options: dict[str, Any] = field(default_factory=dict)
    methods: list[str] = field(default_factory=list)

    def add_defaults(self, defaults: dict[str, Any]) -> "Route":
        self.defaults.update(defaults)
        return self

    def get_default(self, name: str, default: Any = None) -> Any:
        return self.defaults.get(name, default)

    def get_option(self, name: str, default: Any = None) -> Any:
        return self.options.get(name, default)

    def set_option(self, name: str, value: Any) -> "Route":
        self.options[name] = value
        return self

    def get_variables(self) -> list[str]:
        return PLACEHOLDER_PATTERN.findall(self.path)


class RouteCollection:
    """Ordered, name-addressed set of routes. Built fresh on each rebuild."""

    def __init__(self):
        self._routes: dict[str, Route] = {}

    def add(self, name: str, route: Route) -> None:
        # Re-adding a name moves it to the end, like a fresh registration
        self._routes.pop(name, None)
        self._routes[name] = route

    def get(self, name: str | None) -> Route | None:
        if not name:
            return None
        return self._routes.get(name)

    def remove(self, name: str) -> None:
        self._routes.pop(name, None)

    def all(self) -> dict[str, Route]:
        return dict(self._routes)

    def names(self) -> list[str]:
        return list(self._routes)

    def __contains__(self, name: str) -> bool:
        return name in self._routes

    def __iter__(self) -> Iterator[tuple[str, Route]]:
        return iter(self._routes.items())

    def __len__(self) -> int:
        return len(self._routes)


@dataclass
class Url:
    route_name: str
    route_parameters: dict[str, Any] = field(default_factory=dict)

    def to_string(self, collection: RouteCollection) -> str:
        """Render the path of the named route with the parameters substituted."""
        route = collection.get(self.route_name)
        if route is None:
            raise RouteNotFoundError(self.route_name)

        def substitute(match: re.Match) -> str:
            name = match.group(1)
            if name in self.route_parameters:
                return str(self.route_parameters[name])
            if name in route.defaults and route.defaults[name] not in (None, ""):
                return str(route.defaults[name])
            raise ValueError(
                f'Missing parameter "{name}" to generate a URL for route "{self.route_name}"'
            )

        return PLACEHOLDER_PATTERN.sub(substitute, route.path)
