"""Class resolution for deserializing session attribute values.

The resolver is the deserialization context handed to
``load_session_attributes``. The store never inspects it; it is forwarded to
the unpickler, which calls :meth:`ClassResolver.resolve_class` for every
global referenced by a persisted attribute value.
"""

from __future__ import annotations

import importlib
from typing import Any, Iterable, Protocol, runtime_checkable

from .errors import ClassResolutionError


@runtime_checkable
class ClassResolver(Protocol):
    """Resolves a type (or other global) from its module and qualified name."""

    def resolve_class(self, module: str, name: str) -> Any:
        ...


class ImportClassResolver:
    """Resolve by importing the module, the same as plain pickle."""

    def resolve_class(self, module: str, name: str) -> Any:
        try:
            obj: Any = importlib.import_module(module)
            for part in name.split("."):
                obj = getattr(obj, part)
        except Exception as e:
            raise ClassResolutionError(f"Cannot resolve {module}.{name}") from e
        return obj


class AllowListClassResolver:
    """Resolve only explicitly allowed ``module.name`` globals.

    Use this when session files may come from a less trusted location and
    loading them must not instantiate arbitrary types.
    """

    def __init__(
        self,
        allowed: Iterable[str],
        delegate: ClassResolver | None = None,
    ) -> None:
        self._allowed = frozenset(allowed)
        self._delegate = delegate or ImportClassResolver()

    def resolve_class(self, module: str, name: str) -> Any:
        qualified = f"{module}.{name}"
        if qualified not in self._allowed:
            raise ClassResolutionError(f"Type not allowed in session data: {qualified}")
        return self._delegate.resolve_class(module, name)
