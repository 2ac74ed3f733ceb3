# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Strategy base classes for field, wrapper and form rendering."""

from __future__ import annotations

import html
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..config import WidgetConfig
    from ..node import StateNode
    from ..render import FormRenderer


class FieldWidget(ABC):
    """Renders the inner markup of one field from its StateNode.

    Subclass, implement render(), mark with @strategy and add the class to
    a WidgetRegistry:

        @strategy(StrategyKind.FIELD, namespace='AppNS')
        class Text(FieldWidget):
            def render(self, node, config, renderer):
                return f'<input class="app" name="{node.path}">'

    The same instance serves every render, possibly from several threads,
    so strategies must not keep per-render state on self.
    """

    @abstractmethod
    def render(self, node: StateNode, config: WidgetConfig, renderer: FormRenderer) -> str:
        """Return the field's inner markup.

        Args:
            node: Snapshot of the field. Must not be modified.
            config: The field's effective WidgetConfig.
            renderer: The calling renderer, for rendering child nodes.
        """


class WrapperWidget(ABC):
    """Wraps a field's inner markup (label, error messages, container)."""

    @abstractmethod
    def wrap(self, node: StateNode, content: str, config: WidgetConfig) -> str:
        """Return content surrounded by the wrapper markup.

        Wrapper markup is parameterised by config.tags.
        """


class FormWidget(ABC):
    """Renders a whole form: its own markup around every active field."""

    @abstractmethod
    def render(self, node: StateNode, config: WidgetConfig, renderer: FormRenderer) -> str:
        """Return the complete form markup for the root node."""


def escape(value: Any) -> str:
    """HTML-escape a value for text or attribute content. None becomes ''."""
    if value is None:
        return ''
    return html.escape(str(value), quote=True)


def attrs(**attributes: Any) -> str:
    """Format HTML attributes, skipping None values.

    A trailing underscore is dropped from names, so class_='x' gives class="x".

    Example:
        >>> attrs(type='text', name='title', class_=None)
        ' type="text" name="title"'
    """
    parts = [
        f'{name.rstrip("_")}="{escape(value)}"'
        for name, value in attributes.items()
        if value is not None
    ]
    return f" {' '.join(parts)}" if parts else ''
