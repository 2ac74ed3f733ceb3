# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Widget configuration models and the inheritance rules between them.

Three models are involved:

- FormConfig: form-level settings, as declared in code or loaded from YAML.
- WidgetOverrides: what a single field explicitly sets. Attributes that were
  never passed are "unset" (tracked by pydantic's model_fields_set), which is
  not the same as an explicitly empty list or dict.
- WidgetConfig: the effective, frozen configuration used by the renderer.

Example:
    >>> form = form_widget_config(FormConfig(widget_tags={'a': '1', 'b': '2'}))
    >>> field = derive_field_config(
    ...     form, WidgetOverrides(tags={'b': '3', 'c': '4'}), default_widget='Text'
    ... )
    >>> dict(field.tags)
    {'a': '1', 'b': '3', 'c': '4'}
"""

from __future__ import annotations

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_serializer,
    field_validator,
)

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = 'default'

_OVERRIDE_ATTRS = ('widget_name', 'wrapper_name', 'namespace_search_path', 'tags')


def _as_name_list(value: Any) -> Any:
    """Accept a single namespace name where a list is expected."""
    if isinstance(value, str):
        return [value]
    return value


def _read_only(value: Any) -> Any:
    """Freeze a validated tag map into a private read-only view."""
    if value is None:
        return None
    return MappingProxyType(dict(value))


class WidgetConfig(BaseModel):
    """Effective rendering configuration of a form or a field.

    Instances are shared by every render of the same field, so nothing in
    them can change: tags is a read-only mapping.
    """

    model_config = ConfigDict(frozen=True, extra='forbid')

    widget_name: str
    wrapper_name: str = 'Simple'
    namespace_search_path: tuple[str, ...] = ()
    tags: Mapping[str, str] = Field(default_factory=dict, validate_default=True)

    @field_validator('namespace_search_path', mode='before')
    @classmethod
    def normalize_path(cls, value: Any) -> Any:
        return _as_name_list(value)

    @field_validator('tags')
    @classmethod
    def freeze_tags(cls, value: Any) -> Any:
        return _read_only(value)

    @field_serializer('tags')
    def dump_tags(self, tags: Mapping[str, str]) -> dict[str, str]:
        return dict(tags)

    def tag(self, key: str, default: str | None = None) -> str | None:
        """Return a tag value or default."""
        return self.tags.get(key, default)


class WidgetOverrides(BaseModel):
    """Attributes a field sets explicitly. Anything omitted is inherited."""

    model_config = ConfigDict(frozen=True, extra='forbid')

    widget_name: Optional[str] = None
    wrapper_name: Optional[str] = None
    namespace_search_path: Optional[tuple[str, ...]] = None
    tags: Optional[Mapping[str, str]] = None

    @field_validator('namespace_search_path', mode='before')
    @classmethod
    def normalize_path(cls, value: Any) -> Any:
        return _as_name_list(value)

    @field_validator('tags')
    @classmethod
    def freeze_tags(cls, value: Any) -> Any:
        return _read_only(value)

    @field_serializer('tags')
    def dump_tags(self, tags: Mapping[str, str] | None) -> dict[str, str] | None:
        return None if tags is None else dict(tags)

    def is_set(self, attr: str) -> bool:
        """True if attr was passed explicitly with a non-None value."""
        return attr in self.model_fields_set and getattr(self, attr) is not None

    def explicit(self) -> dict[str, Any]:
        """Return only the explicitly set attributes."""
        return {attr: getattr(self, attr) for attr in _OVERRIDE_ATTRS if self.is_set(attr)}

    def overlay(self, other: WidgetOverrides | None) -> WidgetOverrides:
        """Return a new overrides object where other's explicit attributes win."""
        if other is None:
            return self
        return WidgetOverrides(**{**self.explicit(), **other.explicit()})


class FormConfig(BaseModel):
    """Form-level widget settings plus per-field overrides keyed by path.

    Example YAML::

        widget_form: Simple
        widget_wrapper: Simple
        widget_name_space: [AppNS]
        widget_tags:
          wrapper_start: '<p>'
          wrapper_end: '</p>'
        fields:
          title:
            widget_name: Custom
          address.street:
            tags: {wrapper_start: '<li>'}
    """

    model_config = ConfigDict(extra='forbid')

    widget_form: str = 'Simple'
    widget_wrapper: str = 'Simple'
    widget_name_space: list[str] = Field(default_factory=list)
    widget_tags: dict[str, str] = Field(default_factory=dict)
    fields: dict[str, WidgetOverrides] = Field(default_factory=dict)

    @field_validator('widget_name_space', mode='before')
    @classmethod
    def normalize_space(cls, value: Any) -> Any:
        return _as_name_list(value)


def load_form_config(path: str | Path) -> FormConfig:
    """Load a FormConfig from a YAML file.

    Args:
        path: Path to the YAML file. An empty file yields the defaults.

    Returns:
        The validated FormConfig.

    Raises:
        ConfigError: If the file cannot be read, parsed or validated.
    """
    path = Path(path)
    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read form configuration {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"Form configuration {path} must be a mapping, not {type(data).__name__}"
        )

    try:
        config = FormConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid form configuration {path}: {e}") from e

    logger.info(f"Loaded form configuration from {path} ({len(config.fields)} field overrides)")
    return config


# ==================== Inheritance ====================


def form_widget_config(form_config: FormConfig) -> WidgetConfig:
    """Build the effective form-level WidgetConfig."""
    return WidgetConfig(
        widget_name=form_config.widget_form,
        wrapper_name=form_config.widget_wrapper,
        namespace_search_path=tuple(form_config.widget_name_space),
        tags=dict(form_config.widget_tags),
    )


def derive_field_config(
    parent: WidgetConfig,
    overrides: WidgetOverrides | None,
    default_widget: str,
) -> WidgetConfig:
    """Compute a field's effective config from its parent's.

    Each attribute is resolved independently:
    - namespace_search_path, wrapper_name: the override if set, else parent's.
      A set namespace path replaces the parent's entirely.
    - widget_name: the override if set, else default_widget (the field
      type's own default; never inherited from the parent).
    - tags: parent's tags overlaid key by key with the override's tags.

    Args:
        parent: Effective config of the form or the enclosing field.
        overrides: What the field sets explicitly, or None.
        default_widget: Widget name used when the field sets none.

    Returns:
        A new frozen WidgetConfig.
    """
    if overrides is None:
        overrides = WidgetOverrides()

    tags = dict(parent.tags)
    if overrides.is_set('tags'):
        tags.update(overrides.tags)

    return WidgetConfig(
        widget_name=(
            overrides.widget_name if overrides.is_set('widget_name') else default_widget
        ),
        wrapper_name=(
            overrides.wrapper_name if overrides.is_set('wrapper_name') else parent.wrapper_name
        ),
        namespace_search_path=(
            overrides.namespace_search_path
            if overrides.is_set('namespace_search_path')
            else parent.namespace_search_path
        ),
        tags=tags,
    )
