# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Live Form and Field objects.

These are the mutable objects a validation pipeline fills in. They carry
no validation logic; they only hold input, value, errors and widget
settings, and are what build_state() snapshots.

Widget settings follow the same "unset" convention as WidgetOverrides:
a field that never sets widget_name_space inherits the form's, while
widget_name_space=[] explicitly searches the default namespace only.

Example:
    >>> form = Form('contact', widget_name_space=['AppNS'])
    >>> form.add_field(TextField('title', widget='Custom'))
    >>> address = form.add_field(CompoundField('address'))
    >>> address.add_field(TextField('street'))
    >>> address.add_field(TextField('city'))
    >>> form.field('address.city').full_name
    'address.city'
"""

from __future__ import annotations

from typing import Any

from .config import FormConfig, WidgetOverrides
from .node import UNSET


class Field:
    """A live form field.

    Attributes:
        name: Field name, unique among siblings.
        parent: The enclosing Form or Field.
        input: Raw submitted value (UNSET until something is submitted).
        value: Validated value (UNSET until validation produced one).
        errors: Mutable list of error messages.
        init_value: Baseline value for the fill-in value.
        label: Display label, or None to derive it from the name.
        active: Inactive fields are snapshotted but not rendered.
        order: Optional sort key among siblings; declaration order breaks ties.
    """

    default_widget = 'Text'

    def __init__(
        self,
        name: str,
        label: str | None = None,
        init_value: Any = None,
        active: bool = True,
        order: int | None = None,
        widget: str | None = None,
        widget_wrapper: str | None = None,
        widget_name_space: list[str] | str | None = None,
        widget_tags: dict[str, str] | None = None,
    ) -> None:
        self.name = name
        self.label = label
        self.init_value = init_value
        self.active = active
        self.order = order
        self.parent: Form | Field | None = None
        self.input: Any = UNSET
        self.value: Any = UNSET
        self.errors: list[str] = []
        self.children: list[Field] = []

        self.widget = widget
        self.widget_wrapper = widget_wrapper
        self.widget_name_space = widget_name_space
        self.widget_tags = widget_tags

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.full_name!r})"

    @property
    def full_name(self) -> str:
        """Dotted name inside the form ('address.street')."""
        parts = []
        node: Form | Field | None = self
        while isinstance(node, Field):
            parts.append(node.name)
            node = node.parent
        return '.'.join(reversed(parts))

    # ==================== Children ====================

    def add_field(self, field: Field) -> Field:
        """Append a child field and return it.

        No uniqueness check happens here; duplicates are reported when
        the field is snapshotted.
        """
        field.parent = self
        self.children.append(field)
        return field

    def field(self, path: str) -> Field:
        """Return a descendant by dotted path.

        Raises:
            KeyError: If a path segment does not exist.
        """
        return _lookup(self, path)

    def sorted_children(self) -> list[Field]:
        """Children in declared order: by order, then declaration position."""
        return _declared_order(self.children)

    # ==================== Processing state ====================

    def set_input(self, input: Any) -> None:
        self.input = input

    def set_value(self, value: Any) -> None:
        self.value = value

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def clear_state(self) -> None:
        """Forget input, value and errors, recursively."""
        self.input = UNSET
        self.value = UNSET
        self.errors = []
        for child in self.children:
            child.clear_state()

    # ==================== Widget settings ====================

    def widget_overrides(self) -> WidgetOverrides:
        """Return only the widget settings this field declares."""
        explicit: dict[str, Any] = {}
        if self.widget is not None:
            explicit['widget_name'] = self.widget
        if self.widget_wrapper is not None:
            explicit['wrapper_name'] = self.widget_wrapper
        if self.widget_name_space is not None:
            explicit['namespace_search_path'] = self.widget_name_space
        if self.widget_tags is not None:
            explicit['tags'] = self.widget_tags
        return WidgetOverrides(**explicit)


class TextField(Field):
    default_widget = 'Text'


class PasswordField(Field):
    default_widget = 'Password'


class HiddenField(Field):
    default_widget = 'Hidden'


class TextareaField(Field):
    default_widget = 'Textarea'


class CheckboxField(Field):
    default_widget = 'Checkbox'


class CompoundField(Field):
    """A field made of named sub-fields (e.g. an address)."""

    default_widget = 'Compound'


class RepeatableField(Field):
    """A field holding a list of instances of the same compound structure.

    Instances are CompoundField children named '0', '1', ...; the pipeline
    adds one per submitted element with add_instance().
    """

    default_widget = 'Repeatable'

    def add_instance(self) -> CompoundField:
        instance = CompoundField(str(len(self.children)), label='')
        self.add_field(instance)
        return instance


class Form:
    """A live form: an ordered set of top-level fields plus widget settings.

    Args:
        name: Form name, used as the root node name and the HTML id.
        widget_form: Form strategy name.
        widget_wrapper: Default wrapper strategy for every field.
        widget_name_space: Namespaces searched before the default one.
        widget_tags: Default tags for every field.
        config: A FormConfig. When given, it replaces the four widget
            arguments and supplies per-field overrides.
    """

    def __init__(
        self,
        name: str = 'form',
        widget_form: str = 'Simple',
        widget_wrapper: str = 'Simple',
        widget_name_space: list[str] | str | None = None,
        widget_tags: dict[str, str] | None = None,
        config: FormConfig | None = None,
    ) -> None:
        self.name = name
        self.children: list[Field] = []
        self.errors: list[str] = []
        if config is None:
            config = FormConfig(
                widget_form=widget_form,
                widget_wrapper=widget_wrapper,
                widget_name_space=widget_name_space or [],
                widget_tags=widget_tags or {},
            )
        self.config = config

    def __repr__(self) -> str:
        return f"Form({self.name!r}, fields={[f.name for f in self.children]})"

    def add_field(self, field: Field) -> Field:
        field.parent = self
        self.children.append(field)
        return field

    def field(self, path: str) -> Field:
        """Return a field by dotted path ('address.street')."""
        return _lookup(self, path)

    def sorted_children(self) -> list[Field]:
        return _declared_order(self.children)

    def add_error(self, message: str) -> None:
        """Record a form-level error (not tied to a single field)."""
        self.errors.append(message)

    def clear_state(self) -> None:
        self.errors = []
        for child in self.children:
            child.clear_state()

    def field_overrides(self, field: Field) -> WidgetOverrides:
        """Field-declared overrides, updated by this form's config entry."""
        return field.widget_overrides().overlay(self.config.fields.get(field.full_name))


def _declared_order(fields: list[Field]) -> list[Field]:
    # sorted() is stable, so unordered fields keep declaration order
    return sorted(fields, key=lambda f: (f.order is None, f.order or 0))


def _lookup(container: Form | Field, path: str) -> Field:
    node: Form | Field = container
    for part in path.split('.'):
        for child in node.children:
            if child.name == part:
                node = child
                break
        else:
            raise KeyError(f"No field '{part}' in '{path}'")
    return node  # type: ignore[return-value]
