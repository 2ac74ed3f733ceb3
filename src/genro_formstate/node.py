# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""StateNode - read-only snapshot of one field's validation result."""

from __future__ import annotations

import weakref
from typing import Any, Iterable, Iterator

from .exceptions import StructuralError


class _Unset:
    """Marker for "never set", distinct from None."""

    __slots__ = ()

    def __repr__(self) -> str:
        return 'UNSET'

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _Unset:
        return self

    def __deepcopy__(self, memo: dict) -> _Unset:
        return self


UNSET: Any = _Unset()


class StateNode:
    """A node in a detached result-state tree.

    Each node carries the post-validation data of one field:
    - name: The field name, unique among siblings
    - path: Dotted full name inside the form ('' for the form root)
    - input / value: Submitted and validated values (UNSET when absent)
    - errors: Tuple of error messages reported for this field
    - init_value: Baseline value used for the fill-in value
    - children: Tuple of owned child nodes, in declared order
    - default_widget / overrides: The field type's widget and the widget
      settings it declared when the tree was built (None on the form root)
    - parent: Weak back-reference, for upward lookups only

    Nodes are frozen once constructed: assigning any attribute raises
    AttributeError, so a tree can be handed to another thread or
    rendered repeatedly without copying.

    Example:
        >>> street = StateNode('street', path='address.street', value='Main St')
        >>> address = StateNode('address', path='address', children=[street])
        >>> address.child('street').value
        'Main St'
        >>> street.parent is address
        True
    """

    __slots__ = (
        'name', 'path', 'input', 'value', 'errors', 'init_value',
        'label', 'active', 'children', 'default_widget', 'overrides',
        '_parent', '_index', '__weakref__',
    )

    def __init__(
        self,
        name: str,
        path: str | None = None,
        input: Any = UNSET,
        value: Any = UNSET,
        errors: Iterable[str] = (),
        init_value: Any = None,
        label: str | None = None,
        active: bool = True,
        children: Iterable[StateNode] = (),
        default_widget: str | None = None,
        overrides: Any = None,
    ) -> None:
        """Initialize a StateNode and adopt its children.

        Args:
            name: The field name.
            path: Dotted full name. Defaults to name.
            input: Raw submitted value, or UNSET.
            value: Validated value, or UNSET.
            errors: Error messages for this node only.
            init_value: Baseline value for the fill-in value.
            label: Display label. Derived from name if None.
            active: False for fields excluded from rendering.
            children: Child nodes. Each must be unowned.
            default_widget: Widget name of the field type.
            overrides: Frozen WidgetOverrides declared for the field.

        Raises:
            StructuralError: If two children share a name or a child
                already belongs to another node.
        """
        children = tuple(children)
        index: dict[str, StateNode] = {}
        for child in children:
            if child.name in index:
                raise StructuralError(
                    f"Duplicate child '{child.name}' under '{name}'"
                )
            if child.parent is not None:
                raise StructuralError(
                    f"Node '{child.name}' already belongs to another parent"
                )
            index[child.name] = child

        _set = object.__setattr__
        _set(self, 'name', name)
        _set(self, 'path', name if path is None else path)
        _set(self, 'input', input)
        _set(self, 'value', value)
        _set(self, 'errors', tuple(errors))
        _set(self, 'init_value', init_value)
        _set(self, 'label', default_label(name) if label is None else label)
        _set(self, 'active', bool(active))
        _set(self, 'children', children)
        _set(self, 'default_widget', default_widget)
        _set(self, 'overrides', overrides)
        _set(self, '_index', index)
        _set(self, '_parent', None)

        ref = weakref.ref(self)
        for child in children:
            _set(child, '_parent', ref)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"StateNode is read-only (cannot set '{name}')")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"StateNode is read-only (cannot delete '{name}')")

    def __repr__(self) -> str:
        parts = [repr(self.name)]
        if self.value is not UNSET:
            parts.append(f"value={self.value!r}")
        if self.errors:
            parts.append(f"errors={len(self.errors)}")
        if self.children:
            parts.append(f"children={len(self.children)}")
        return f"StateNode({', '.join(parts)})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StateNode):
            return NotImplemented
        return self._content() == other._content()

    __hash__ = None  # type: ignore[assignment]

    def _content(self) -> tuple:
        return (
            self.name, self.path, self.input, self.value, self.errors,
            self.init_value, self.label, self.active, self.children,
            self.default_widget, self.overrides,
        )

    # ==================== Navigation ====================

    @property
    def parent(self) -> StateNode | None:
        """The enclosing node, or None for a root or a discarded parent."""
        if self._parent is None:
            return None
        return self._parent()

    @property
    def root(self) -> StateNode:
        """The topmost reachable ancestor (self if there is none)."""
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    def child(self, name: str) -> StateNode:
        """Return the direct child called name.

        Raises:
            KeyError: If there is no such child.
        """
        try:
            return self._index[name]
        except KeyError:
            raise KeyError(f"'{self.path or self.name}' has no child '{name}'") from None

    def get_node(self, path: str) -> StateNode:
        """Return a descendant by dotted path relative to this node.

        Example:
            >>> form_node.get_node('address.street')
        """
        node = self
        for part in path.split('.'):
            node = node.child(part)
        return node

    def walk(self) -> Iterator[tuple[str, StateNode]]:
        """Yield (path, node) for every descendant, depth first."""
        for child in self.children:
            yield child.path, child
            yield from child.walk()

    # ==================== Derived state ====================

    @property
    def has_input(self) -> bool:
        return self.input is not UNSET

    @property
    def has_value(self) -> bool:
        return self.value is not UNSET

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def num_errors(self) -> int:
        return len(self.errors)

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    @property
    def num_children(self) -> int:
        return len(self.children)

    @property
    def validated(self) -> bool:
        """True if this node reports no errors.

        Only this node's own error list counts; children are not consulted.
        Use error_nodes() for a recursive view.
        """
        return not self.errors

    @property
    def fill_value(self) -> Any:
        """Value used to pre-populate the field for display.

        Submitted input wins, then the validated value, then init_value.
        Returns '' when none of them is available.
        """
        if self.input is not UNSET:
            return self.input
        if self.value is not UNSET:
            return self.value
        if self.init_value is not None:
            return self.init_value
        return ''

    def error_nodes(self) -> list[StateNode]:
        """Return this node and every descendant that has errors."""
        found = [self] if self.errors else []
        for _path, node in self.walk():
            if node.errors:
                found.append(node)
        return found

    def to_dict(self) -> dict[str, Any]:
        """Export the subtree as plain data. Absent input/value are omitted."""
        data: dict[str, Any] = {'name': self.name, 'path': self.path}
        if self.input is not UNSET:
            data['input'] = self.input
        if self.value is not UNSET:
            data['value'] = self.value
        data['errors'] = list(self.errors)
        data['init_value'] = self.init_value
        data['label'] = self.label
        data['active'] = self.active
        data['children'] = [child.to_dict() for child in self.children]
        return data


def default_label(name: str) -> str:
    """Build a display label from a field name ('first_name' -> 'First name')."""
    text = name.replace('_', ' ')
    return text[:1].upper() + text[1:]
