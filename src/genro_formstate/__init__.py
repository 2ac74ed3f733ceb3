# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Genro-FormState - detached form result trees and pluggable rendering.

A live form is snapshotted into a read-only StateNode tree, which is then
rendered by strategies looked up by name along an ordered namespace path,
with per-field configuration inherited from the form.
"""

__version__ = "0.1.0"

from .builder import StateTreeBuilder, build_state
from .config import (
    DEFAULT_NAMESPACE,
    FormConfig,
    WidgetConfig,
    WidgetOverrides,
    derive_field_config,
    form_widget_config,
    load_form_config,
)
from .exceptions import (
    ConfigError,
    DuplicateStrategyError,
    FormStateError,
    ResolutionError,
    StructuralError,
)
from .fields import (
    CheckboxField,
    CompoundField,
    Field,
    Form,
    HiddenField,
    PasswordField,
    RepeatableField,
    TextareaField,
    TextField,
)
from .node import UNSET, StateNode
from .registry import StrategyKind, WidgetRegistry, default_registry, strategy
from .render import FormRenderer
from .widgets import FieldWidget, FormWidget, WrapperWidget

__all__ = [
    # State tree
    "StateNode",
    "StateTreeBuilder",
    "build_state",
    "UNSET",
    # Live model
    "Form",
    "Field",
    "TextField",
    "PasswordField",
    "HiddenField",
    "TextareaField",
    "CheckboxField",
    "CompoundField",
    "RepeatableField",
    # Configuration
    "DEFAULT_NAMESPACE",
    "FormConfig",
    "WidgetConfig",
    "WidgetOverrides",
    "derive_field_config",
    "form_widget_config",
    "load_form_config",
    # Strategies
    "StrategyKind",
    "WidgetRegistry",
    "default_registry",
    "strategy",
    "FieldWidget",
    "WrapperWidget",
    "FormWidget",
    # Rendering
    "FormRenderer",
    # Exceptions
    "FormStateError",
    "StructuralError",
    "ResolutionError",
    "DuplicateStrategyError",
    "ConfigError",
]
