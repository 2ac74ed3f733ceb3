# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""FormRenderer - resolve strategies and render StateNode trees.

Rendering a field is four steps:

1. resolve the field strategy (config.widget_name) along the namespace path
2. resolve the wrapper strategy (config.wrapper_name) along the same path
3. let the field strategy produce the inner markup from the node
4. let the wrapper strategy surround it, parameterised by config.tags

Compound strategies and form strategies call back into the renderer for
each active child, so nested fields go through the same four steps with
their own effective configuration.

Example:
    >>> renderer = FormRenderer(form)
    >>> html = renderer.render_form()              # snapshot + render
    >>> tree = build_state(form)                   # or snapshot once...
    >>> html = renderer.render_form(tree)          # ...and render anywhere
    >>> html = renderer.render(tree.get_node('address.city'))
"""

from __future__ import annotations

import logging
from typing import Any

from .builder import build_state
from .config import WidgetConfig, derive_field_config, form_widget_config
from .exceptions import StructuralError
from .fields import Field, Form
from .node import StateNode
from .registry import StrategyKind, WidgetRegistry, default_registry

logger = logging.getLogger(__name__)


class FormRenderer:
    """Render a form's StateNode trees with strategies from a registry.

    Field configurations are derived from the widget declarations each
    node captured when its tree was built, so an older tree renders with
    its own declarations even after the live form has changed shape.
    Derived configurations are cached per path and reused while a node
    carries the same declarations. The form-level configuration is read
    from the live form once; call reconfigure() after changing it.

    Rendering never modifies the node tree or the live form, and a
    ResolutionError raised anywhere in a nested render aborts the whole
    call without returning partial output.

    Args:
        form: The live form whose config supplies the form-level settings.
        registry: Strategy registry. Defaults to default_registry().
    """

    def __init__(self, form: Form, registry: WidgetRegistry | None = None) -> None:
        self.form = form
        self.registry = registry if registry is not None else default_registry()
        self._form_config: WidgetConfig | None = None
        self._configs: dict[str, WidgetConfig] = {}
        self._node_configs: dict[str, tuple[str, dict[str, Any], WidgetConfig]] = {}

    def __repr__(self) -> str:
        return f"FormRenderer({self.form.name!r})"

    # ==================== Configuration ====================

    @property
    def form_config(self) -> WidgetConfig:
        """Effective form-level configuration."""
        if self._form_config is None:
            self._form_config = form_widget_config(self.form.config)
        return self._form_config

    def config_for(self, path: str) -> WidgetConfig:
        """Effective configuration of the live form's field at path.

        The path '' returns the form-level config. Field configs are read
        from the live declarations once and cached until reconfigure().

        Every field, nested or not, inherits from the form-level config.
        A compound field's wrapper choice therefore does not leak into
        its sub-fields.

        Raises:
            StructuralError: If the live form has no field at path.
        """
        if not path:
            return self.form_config
        try:
            return self._configs[path]
        except KeyError:
            pass

        try:
            field = self.form.field(path)
        except KeyError as e:
            raise StructuralError(f"Form '{self.form.name}' has no field '{path}'") from e

        config = derive_field_config(
            self.form_config, self.form.field_overrides(field), field.default_widget
        )
        self._configs[path] = config
        logger.debug(f"Derived widget config for '{path}': {config}")
        return config

    def node_config(self, node: StateNode) -> WidgetConfig:
        """Effective configuration of a node, from the declarations it carries.

        Nodes built by hand carry no declarations; they fall back to
        config_for() on their path.
        """
        if not node.path:
            return self.form_config
        if node.default_widget is None:
            return self.config_for(node.path)

        explicit = node.overrides.explicit() if node.overrides is not None else {}
        cached = self._node_configs.get(node.path)
        if cached is not None and cached[0] == node.default_widget and cached[1] == explicit:
            return cached[2]

        config = derive_field_config(self.form_config, node.overrides, node.default_widget)
        self._node_configs[node.path] = (node.default_widget, explicit, config)
        logger.debug(f"Derived widget config for node '{node.path}': {config}")
        return config

    def reconfigure(self) -> None:
        """Drop cached configurations so they are derived again."""
        self._form_config = None
        self._configs = {}
        self._node_configs = {}

    # ==================== Rendering ====================

    def render(
        self,
        node: StateNode | None = None,
        config: WidgetConfig | None = None,
        field: Field | Form | None = None,
    ) -> str:
        """Render one node: field strategy output inside its wrapper.

        Args:
            node: The node to render. The form root node renders the whole
                form.
            config: Configuration to use instead of the derived one. For
                the form root it replaces the form-level config.
            field: Live field to snapshot when no node is given.

        Returns:
            The rendered markup, or '' for an inactive node.

        Raises:
            ResolutionError: If a field or wrapper strategy cannot be found.
            ValueError: If neither node nor field is given.
        """
        if node is None:
            if field is None:
                raise ValueError("render() needs a node or a live field")
            node = build_state(field)

        if not node.path:
            return self.render_form(node, config)
        if not node.active:
            return ''

        if config is None:
            config = self.node_config(node)
        namespaces = config.namespace_search_path
        widget = self.registry.resolve(StrategyKind.FIELD, config.widget_name, namespaces)
        wrapper = self.registry.resolve(StrategyKind.WRAPPER, config.wrapper_name, namespaces)

        content = widget.render(node, config, self)
        return wrapper.wrap(node, content, config)

    def render_form(
        self, root: StateNode | None = None, config: WidgetConfig | None = None
    ) -> str:
        """Render the whole form. Snapshots the live form if root is None.

        Raises:
            ResolutionError: If any strategy cannot be found.
        """
        if root is None:
            root = build_state(self.form)
        if config is None:
            config = self.form_config
        form_widget = self.registry.resolve(
            StrategyKind.FORM, config.widget_name, config.namespace_search_path
        )
        return form_widget.render(root, config, self)

    def render_field(self, path: str, root: StateNode | None = None) -> str:
        """Render one field by dotted path, from root or from the live form."""
        if root is None:
            return self.render(field=self.form.field(path))
        return self.render(root.get_node(path))
