# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Built-in HTML strategies, registered in the default namespace.

Fields:   Text, Password, Hidden, Textarea, Checkbox, Compound, Repeatable
Wrappers: Simple, Fieldset, None
Forms:    Simple

The Simple wrapper understands these tags:
    wrapper_start / wrapper_end  replace the surrounding <div>...</div>
    label_start / label_end      text placed around the <label> element
    error_class                  class added to the div when the field has errors

The Simple form understands form_start / form_end.

Example:
    Given a field 'title' with one error, the Simple wrapper around the
    Text widget produces::

        <div class="field error">
        <label for="title">Title</label>
        <input type="text" name="title" id="title" value="" />
        <span class="error_message">Required</span>
        </div>
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..registry import StrategyKind, strategy
from .base import FieldWidget, FormWidget, WrapperWidget, attrs, escape

if TYPE_CHECKING:
    from ..config import WidgetConfig
    from ..node import StateNode
    from ..render import FormRenderer


# ==================== Field widgets ====================


@strategy(StrategyKind.FIELD)
class Text(FieldWidget):
    input_type = 'text'

    def render(self, node: StateNode, config: WidgetConfig, renderer: FormRenderer) -> str:
        return f"<input{attrs(type=self.input_type, name=node.path, id=node.path, value=self.display_value(node))} />"

    def display_value(self, node: StateNode) -> object:
        return node.fill_value


@strategy(StrategyKind.FIELD)
class Password(Text):
    """Never echoes the fill-in value back."""

    input_type = 'password'

    def display_value(self, node: StateNode) -> object:
        return ''


@strategy(StrategyKind.FIELD)
class Hidden(Text):
    input_type = 'hidden'


@strategy(StrategyKind.FIELD)
class Textarea(FieldWidget):
    def render(self, node: StateNode, config: WidgetConfig, renderer: FormRenderer) -> str:
        return f"<textarea{attrs(name=node.path, id=node.path)}>{escape(node.fill_value)}</textarea>"


@strategy(StrategyKind.FIELD)
class Checkbox(FieldWidget):
    def render(self, node: StateNode, config: WidgetConfig, renderer: FormRenderer) -> str:
        checked = 'checked' if node.fill_value else None
        return f"<input{attrs(type='checkbox', name=node.path, id=node.path, value='1', checked=checked)} />"


@strategy(StrategyKind.FIELD, name='Repeatable')
@strategy(StrategyKind.FIELD)
class Compound(FieldWidget):
    """Renders each active sub-field through the renderer, in order."""

    def render(self, node: StateNode, config: WidgetConfig, renderer: FormRenderer) -> str:
        return '\n'.join(
            renderer.render(child) for child in node.children if child.active
        )


# ==================== Wrappers ====================


@strategy(StrategyKind.WRAPPER)
class Simple(WrapperWidget):
    def wrap(self, node: StateNode, content: str, config: WidgetConfig) -> str:
        css = 'field'
        if node.errors:
            css = f"field {config.tag('error_class', 'error')}"

        lines = [config.tag('wrapper_start', f'<div{attrs(class_=css)}>')]
        if node.label:
            lines.append(
                f"{config.tag('label_start', '')}"
                f"<label{attrs(for_=node.path)}>{escape(node.label)}</label>"
                f"{config.tag('label_end', '')}"
            )
        lines.append(content)
        lines.extend(_error_spans(node))
        lines.append(config.tag('wrapper_end', '</div>'))
        return '\n'.join(lines)


@strategy(StrategyKind.WRAPPER)
class Fieldset(WrapperWidget):
    """Groups compound content under a legend."""

    def wrap(self, node: StateNode, content: str, config: WidgetConfig) -> str:
        lines = [f'<fieldset{attrs(id=node.path, class_=node.name)}>']
        if node.label:
            lines.append(f"<legend>{escape(node.label)}</legend>")
        lines.append(content)
        lines.extend(_error_spans(node))
        lines.append('</fieldset>')
        return '\n'.join(lines)


@strategy(StrategyKind.WRAPPER, name='None')
class NoWrapper(WrapperWidget):
    def wrap(self, node: StateNode, content: str, config: WidgetConfig) -> str:
        return content


def _error_spans(node: StateNode) -> list[str]:
    return [f'<span class="error_message">{escape(error)}</span>' for error in node.errors]


# ==================== Forms ====================


@strategy(StrategyKind.FORM, name='Simple')
class SimpleForm(FormWidget):
    def render(self, node: StateNode, config: WidgetConfig, renderer: FormRenderer) -> str:
        lines = [config.tag('form_start', f'<form{attrs(id=node.name, method="post")}>')]
        if node.errors:
            lines.append('<div class="form_errors">')
            lines.extend(_error_spans(node))
            lines.append('</div>')
        for child in node.children:
            if child.active:
                lines.append(renderer.render(child))
        lines.append(config.tag('form_end', '</form>'))
        return '\n'.join(lines)


BUILTIN_STRATEGIES = (
    Text, Password, Hidden, Textarea, Checkbox, Compound,
    Simple, Fieldset, NoWrapper,
    SimpleForm,
)
