# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""StateTreeBuilder - snapshot a live Form or Field into a StateNode tree."""

from __future__ import annotations

import copy
import logging

from .exceptions import StructuralError
from .fields import Field, Form
from .node import StateNode

logger = logging.getLogger(__name__)


class StateTreeBuilder:
    """Build detached StateNode trees from live forms and fields.

    Every scalar and collection is deep-copied, so the resulting tree
    shares nothing mutable with the live objects: the form can be
    reprocessed while an earlier tree is still being rendered elsewhere.

    Each node also records the field's default widget and its effective
    widget overrides (field declarations updated by the form's config
    entry), so a renderer never has to look the path up in the live form.

    Each call to build() returns a fresh tree; building twice from an
    unchanged form yields two equal trees.

    Example:
        >>> tree = StateTreeBuilder().build(form)
        >>> [child.name for child in tree.children]
        ['title', 'address']
    """

    def build(self, live: Form | Field) -> StateNode:
        """Snapshot a Form (root path '') or a Field (root path = full name).

        Raises:
            StructuralError: On duplicate sibling names, empty names or cycles.
            TypeError: If live is neither a Form nor a Field.
        """
        if isinstance(live, Form):
            children = self._build_children(live, live, prefix='', seen={id(live)})
            root = StateNode(
                live.name,
                path='',
                errors=copy.deepcopy(live.errors),
                label='',
                children=children,
            )
        elif isinstance(live, Field):
            root = self._build_field(live, _owning_form(live), live.full_name, seen=set())
        else:
            raise TypeError(
                f"Can only build state from Form or Field, not {type(live).__name__}"
            )
        logger.debug(f"Built state tree for {live!r}")
        return root

    def _build_field(
        self, field: Field, form: Form | None, path: str, seen: set[int]
    ) -> StateNode:
        if not field.name:
            raise StructuralError(f"Field without a name under '{path or '<root>'}'")
        if id(field) in seen:
            raise StructuralError(f"Field '{path}' contains itself")
        seen = seen | {id(field)}

        if form is not None:
            overrides = form.field_overrides(field)
        else:
            overrides = field.widget_overrides()

        return StateNode(
            field.name,
            path=path,
            input=copy.deepcopy(field.input),
            value=copy.deepcopy(field.value),
            errors=[str(e) for e in field.errors],
            init_value=copy.deepcopy(field.init_value),
            label=field.label,
            active=field.active,
            children=self._build_children(field, form, prefix=f"{path}.", seen=seen),
            default_widget=field.default_widget,
            overrides=overrides,
        )

    def _build_children(
        self, container: Form | Field, form: Form | None, prefix: str, seen: set[int]
    ) -> list[StateNode]:
        ordered = container.sorted_children()
        names: set[str] = set()
        for child in ordered:
            if child.name in names:
                raise StructuralError(
                    f"Duplicate field name '{prefix}{child.name}'"
                )
            names.add(child.name)
        return [
            self._build_field(child, form, f"{prefix}{child.name}", seen)
            for child in ordered
        ]


def _owning_form(field: Field) -> Form | None:
    node = field.parent
    while isinstance(node, Field):
        node = node.parent
    return node if isinstance(node, Form) else None


_builder = StateTreeBuilder()


def build_state(live: Form | Field) -> StateNode:
    """Snapshot a live Form or Field. See StateTreeBuilder.build()."""
    return _builder.build(live)
