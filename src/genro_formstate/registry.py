# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""WidgetRegistry - explicit (kind, namespace, name) -> strategy mapping.

Strategies are registered up front, either directly with register() or by
marking classes with @strategy and handing them to add(). Lookups search
an ordered namespace path and always end with the default namespace, so a
form can put its own namespaces first and still fall back to the built-in
strategies.

Example:
    >>> registry = WidgetRegistry()
    >>> @strategy(StrategyKind.FIELD, namespace='AppNS')
    ... class Text(FieldWidget):
    ...     def render(self, node, config, renderer):
    ...         return f'<input class="app" name="{node.path}">'
    >>> registry.add(Text)
    >>> registry.resolve('field', 'Text', ['AppNS'])
    <...Text object at ...>
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Callable, Iterable, Sequence

from .config import DEFAULT_NAMESPACE
from .exceptions import DuplicateStrategyError, ResolutionError

logger = logging.getLogger(__name__)


class StrategyKind(str, enum.Enum):
    """The three families of rendering strategies."""

    FIELD = 'field'
    WRAPPER = 'wrapper'
    FORM = 'form'


StrategyKey = tuple[StrategyKind, str, str]


def strategy(
    kind: StrategyKind | str,
    name: str | None = None,
    namespace: str = DEFAULT_NAMESPACE,
    registry: WidgetRegistry | None = None,
) -> Callable[[type], type]:
    """Class decorator marking a strategy for registration.

    The mark is stored on the class and read by WidgetRegistry.add().
    A class may be marked several times to appear under several names.
    When registry is given, the class is also instantiated and registered
    there right away under this mark.

    Args:
        kind: Strategy kind ('field', 'wrapper' or 'form').
        name: Strategy name. Defaults to the class name.
        namespace: Namespace to register under.
        registry: Registry to register an instance in immediately.

    Raises:
        DuplicateStrategyError: If registry already holds the key.
    """
    kind = StrategyKind(kind)

    def decorator(cls: type) -> type:
        marks = tuple(cls.__dict__.get('_strategy_marks', ()))
        cls._strategy_marks = marks + ((kind, namespace, name or cls.__name__),)
        if registry is not None:
            registry.register(kind, name or cls.__name__, cls(), namespace=namespace)
        return cls

    return decorator


class WidgetRegistry:
    """Registry of rendering strategies keyed by (kind, namespace, name).

    resolve() results are memoised per (kind, name, namespace path). The
    cache is a plain dict: entries are published by a single assignment
    and recomputing one gives the same result, so concurrent renderers
    need no lock. Any registration change replaces the cache with a new
    dict; a lookup that was already running stores its result in the
    dict it started with, which is then discarded.
    """

    def __init__(self, default_namespace: str = DEFAULT_NAMESPACE) -> None:
        self.default_namespace = default_namespace
        self._strategies: dict[StrategyKey, Any] = {}
        self._cache: dict[tuple[StrategyKind, str, tuple[str, ...]], Any] = {}

    def __repr__(self) -> str:
        return f"WidgetRegistry({len(self._strategies)} strategies)"

    def __len__(self) -> int:
        return len(self._strategies)

    def __contains__(self, key: tuple[StrategyKind | str, str, str]) -> bool:
        kind, namespace, name = key
        return (StrategyKind(kind), namespace, name) in self._strategies

    # ==================== Registration ====================

    def register(
        self,
        kind: StrategyKind | str,
        name: str,
        implementation: Any,
        namespace: str | None = None,
        replace: bool = False,
    ) -> None:
        """Register a strategy instance.

        Args:
            kind: Strategy kind.
            name: Strategy name.
            implementation: The strategy object.
            namespace: Target namespace. Defaults to the default namespace.
            replace: Overwrite an existing entry instead of failing.

        Raises:
            DuplicateStrategyError: If the key is taken and replace is False.
        """
        key = (StrategyKind(kind), namespace or self.default_namespace, name)
        if key in self._strategies and not replace:
            raise DuplicateStrategyError(
                f"{key[0].value} strategy '{name}' already registered in "
                f"namespace '{key[1]}'"
            )
        self._strategies[key] = implementation
        self._cache = {}
        logger.debug(f"Registered {key[0].value} strategy {key[1]}:{name}")

    def unregister(
        self, kind: StrategyKind | str, name: str, namespace: str | None = None
    ) -> None:
        """Remove a strategy. Raises KeyError if it is not registered."""
        key = (StrategyKind(kind), namespace or self.default_namespace, name)
        del self._strategies[key]
        self._cache = {}

    def add(self, cls: type, replace: bool = False) -> None:
        """Instantiate a @strategy-marked class once and register every mark.

        Raises:
            ValueError: If the class carries no @strategy mark.
        """
        marks = cls.__dict__.get('_strategy_marks')
        if not marks:
            raise ValueError(f"{cls.__name__} is not marked with @strategy")
        instance = cls()
        for kind, namespace, name in marks:
            self.register(kind, name, instance, namespace=namespace, replace=replace)

    def add_all(self, classes: Iterable[type], replace: bool = False) -> None:
        for cls in classes:
            self.add(cls, replace=replace)

    # ==================== Lookup ====================

    def search_path(self, namespace_path: Sequence[str] = ()) -> tuple[str, ...]:
        """Return namespace_path with the default namespace appended once.

        Example:
            >>> registry.search_path(['AppNS'])
            ('AppNS', 'default')
            >>> registry.search_path(['default', 'AppNS'])
            ('default', 'AppNS')
        """
        path = tuple(namespace_path)
        if self.default_namespace not in path:
            path = path + (self.default_namespace,)
        return path

    def get(
        self, kind: StrategyKind | str, name: str, namespace: str | None = None
    ) -> Any | None:
        """Exact lookup in a single namespace, no fallback."""
        key = (StrategyKind(kind), namespace or self.default_namespace, name)
        return self._strategies.get(key)

    def resolve(
        self,
        kind: StrategyKind | str,
        name: str,
        namespace_path: Sequence[str] = (),
    ) -> Any:
        """Return the first strategy named name along the search path.

        Namespaces are scanned in the given order, the default namespace
        last. When the same name exists in two namespaces, the earlier one
        wins.

        Raises:
            ResolutionError: If no namespace on the path has the strategy.
        """
        kind = StrategyKind(kind)
        path = self.search_path(namespace_path)
        cache_key = (kind, name, path)
        cache = self._cache
        try:
            return cache[cache_key]
        except KeyError:
            pass

        for namespace in path:
            found = self._strategies.get((kind, namespace, name))
            if found is not None:
                logger.debug(f"Resolved {kind.value} '{name}' in namespace '{namespace}'")
                cache[cache_key] = found
                return found

        raise ResolutionError(kind, name, path)

    def clear_cache(self) -> None:
        self._cache = {}

    # ==================== Introspection ====================

    def namespaces(self) -> list[str]:
        """All namespaces holding at least one strategy, sorted."""
        return sorted({namespace for _kind, namespace, _name in self._strategies})

    def names(self, kind: StrategyKind | str, namespace: str | None = None) -> list[str]:
        """Strategy names of a kind in one namespace, sorted."""
        kind = StrategyKind(kind)
        namespace = namespace or self.default_namespace
        return sorted(
            name for k, ns, name in self._strategies if k is kind and ns == namespace
        )


# Global registry instance
_registry: WidgetRegistry | None = None


def default_registry() -> WidgetRegistry:
    """Get the process-wide registry, populated with built-in strategies."""
    global _registry
    if _registry is None:
        from .widgets import BUILTIN_STRATEGIES

        registry = WidgetRegistry()
        registry.add_all(BUILTIN_STRATEGIES)
        logger.info(f"Registered {len(registry)} built-in strategies")
        _registry = registry
    return _registry
