from dataclasses import dataclass, field
from typing import Any


@dataclass
class AccessResult:
    """
    Outcome of an access check.

    Carries the objects the decision depended on so callers that cache the
    outcome can invalidate it when one of them changes. Dependencies that
    expose ``get_cache_tags()`` contribute their tags to ``cache_tags``.
    """
    allowed: bool = False
    reason: str | None = None
    cache_dependencies: list[Any] = field(default_factory=list)
    cache_tags: list[str] = field(default_factory=list)

    @classmethod
    def allowed_if(cls, condition: bool, reason: str | None = None) -> "AccessResult":
        return cls(allowed=bool(condition), reason=None if condition else reason)

    @classmethod
    def neutral(cls, reason: str | None = None) -> "AccessResult":
        return cls(allowed=False, reason=reason)

    def is_allowed(self) -> bool:
        return self.allowed

    def add_cacheable_dependency(self, dependency: Any) -> "AccessResult":
        self.cache_dependencies.append(dependency)
        get_cache_tags = getattr(dependency, "get_cache_tags", None)
        if callable(get_cache_tags):
            for tag in get_cache_tags():
                if tag not in self.cache_tags:
                    self.cache_tags.append(tag)
        return self
