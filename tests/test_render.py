# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Tests for FormRenderer and the built-in strategies."""

import threading

import pytest

from genro_formstate import (
    CheckboxField,
    CompoundField,
    FieldWidget,
    Form,
    FormConfig,
    FormRenderer,
    HiddenField,
    PasswordField,
    RepeatableField,
    ResolutionError,
    StateNode,
    StrategyKind,
    StructuralError,
    TextareaField,
    TextField,
    WidgetConfig,
    WidgetOverrides,
    WidgetRegistry,
    build_state,
    strategy,
)
from genro_formstate.widgets import BUILTIN_STRATEGIES


@strategy(StrategyKind.FIELD, name='Custom')
class CustomWidget(FieldWidget):
    def render(self, node, config, renderer):
        return f'<custom>{node.fill_value}</custom>'


@strategy(StrategyKind.FIELD, name='Text', namespace='AppNS')
class AppText(FieldWidget):
    def render(self, node, config, renderer):
        return f'<app-input name="{node.path}">'


@pytest.fixture
def registry():
    registry = WidgetRegistry()
    registry.add_all(BUILTIN_STRATEGIES)
    return registry


@pytest.fixture
def form():
    form = Form('contact')
    form.add_field(TextField('title'))
    address = form.add_field(CompoundField('address', widget_wrapper='Fieldset'))
    address.add_field(TextField('street'))
    address.add_field(TextField('city'))
    return form


EXPECTED_FORM = """\
<form id="contact" method="post">
<div class="field">
<label for="title">Title</label>
<input type="text" name="title" id="title" value="Hi" />
</div>
<fieldset id="address" class="address">
<legend>Address</legend>
<div class="field">
<label for="address.street">Street</label>
<input type="text" name="address.street" id="address.street" value="" />
</div>
<div class="field">
<label for="address.city">City</label>
<input type="text" name="address.city" id="address.city" value="Rome" />
</div>
</fieldset>
</form>"""


class TestRenderField:
    """Tests for rendering single fields."""

    def test_simple_text_field(self, form, registry):
        """Test Text widget inside the Simple wrapper."""
        form.field('title').set_input('Hi <b>')
        html = FormRenderer(form, registry).render_field('title')
        assert html == (
            '<div class="field">\n'
            '<label for="title">Title</label>\n'
            '<input type="text" name="title" id="title" value="Hi &lt;b&gt;" />\n'
            '</div>'
        )

    def test_errors_are_rendered_not_raised(self, form, registry):
        """Test that validation errors become markup."""
        form.field('title').add_error('Required')
        html = FormRenderer(form, registry).render_field('title')
        assert html.startswith('<div class="field error">')
        assert '<span class="error_message">Required</span>\n</div>' in html

    def test_error_class_tag(self, form, registry):
        """Test the error_class tag."""
        form.config = FormConfig(widget_tags={'error_class': 'has-error'})
        form.field('title').add_error('Required')
        html = FormRenderer(form, registry).render_field('title')
        assert html.startswith('<div class="field has-error">')

    def test_render_from_live_field(self, form, registry):
        """Test that render() snapshots a live field when no node is given."""
        form.field('title').set_value('Live')
        renderer = FormRenderer(form, registry)
        assert renderer.render(field=form.field('title')) == renderer.render_field('title')
        assert 'value="Live"' in renderer.render(field=form.field('title'))

    def test_render_node_from_tree(self, form, registry):
        """Test rendering one node of a prebuilt tree."""
        form.field('address.city').set_value('Rome')
        tree = build_state(form)
        renderer = FormRenderer(form, registry)
        html = renderer.render(tree.get_node('address.city'))
        assert html == renderer.render_field('address.city', root=tree)
        assert 'value="Rome"' in html

    def test_render_requires_node_or_field(self, form, registry):
        """Test ValueError without arguments."""
        with pytest.raises(ValueError, match="needs a node or a live field"):
            FormRenderer(form, registry).render()

    def test_inactive_node_renders_nothing(self, form, registry):
        """Test that inactive fields produce an empty string."""
        form.field('title').active = False
        assert FormRenderer(form, registry).render_field('title') == ''

    def test_explicit_config(self, form, registry):
        """Test passing a config instead of the derived one."""
        renderer = FormRenderer(form, registry)
        node = build_state(form).child('title')
        config = renderer.config_for('title').model_copy(update={'wrapper_name': 'None'})
        assert renderer.render(node, config) == (
            '<input type="text" name="title" id="title" value="" />'
        )

    def test_unknown_path(self, form, registry):
        """Test StructuralError for a path the form does not declare."""
        with pytest.raises(StructuralError, match="has no field 'nope'"):
            FormRenderer(form, registry).config_for('nope')


class TestBuiltinWidgets:
    """Tests for the built-in field and wrapper strategies."""

    def render(self, field, registry):
        form = Form('f', widget_wrapper='None')
        form.add_field(field)
        return FormRenderer(form, registry).render_field(field.name)

    def test_password_never_echoes(self, registry):
        """Test that Password ignores the submitted value."""
        field = PasswordField('secret')
        field.set_input('hunter2')
        assert self.render(field, registry) == (
            '<input type="password" name="secret" id="secret" value="" />'
        )

    def test_hidden(self, registry):
        """Test Hidden uses the fill-in value."""
        field = HiddenField('token', init_value='abc')
        assert self.render(field, registry) == (
            '<input type="hidden" name="token" id="token" value="abc" />'
        )

    def test_textarea_escapes(self, registry):
        """Test Textarea content escaping."""
        field = TextareaField('notes', init_value='a & b')
        assert self.render(field, registry) == (
            '<textarea name="notes" id="notes">a &amp; b</textarea>'
        )

    def test_checkbox(self, registry):
        """Test Checkbox checked state follows the fill-in value."""
        field = CheckboxField('agree')
        assert 'checked' not in self.render(field, registry)
        field.set_value(True)
        assert self.render(field, registry) == (
            '<input type="checkbox" name="agree" id="agree" value="1" checked="checked" />'
        )

    def test_wrapper_tags(self, registry):
        """Test wrapper_start/wrapper_end with key-level merge."""
        form = Form(
            'f', widget_tags={'wrapper_start': '<p>', 'wrapper_end': '</p>', 'label_end': ': '}
        )
        form.add_field(TextField('title', widget_tags={'wrapper_end': '</p><hr>'}))
        html = FormRenderer(form, registry).render_field('title')
        assert html == (
            '<p>\n'
            '<label for="title">Title</label>: \n'
            '<input type="text" name="title" id="title" value="" />\n'
            '</p><hr>'
        )

    def test_repeatable_instances(self, registry):
        """Test that repeatable instances render their sub-fields."""
        form = Form('f')
        tags = form.add_field(RepeatableField('tags', widget_wrapper='None'))
        for value in ('red', 'blue'):
            instance = tags.add_instance()
            instance.widget_wrapper = 'None'
            name = instance.add_field(TextField('name'))
            name.set_value(value)
        html = FormRenderer(form, registry).render_field('tags')
        assert '<input type="text" name="tags.0.name" id="tags.0.name" value="red" />' in html
        assert '<input type="text" name="tags.1.name" id="tags.1.name" value="blue" />' in html
        assert html.index('tags.0.name') < html.index('tags.1.name')


class TestRenderForm:
    """Tests for whole-form rendering."""

    def test_full_form(self, form, registry):
        """Test the composed form markup."""
        form.field('title').set_input('Hi')
        form.field('address.city').set_value('Rome')
        assert FormRenderer(form, registry).render_form() == EXPECTED_FORM

    def test_render_root_node_is_render_form(self, form, registry):
        """Test that render() on the root node renders the form."""
        form.field('title').set_input('Hi')
        form.field('address.city').set_value('Rome')
        renderer = FormRenderer(form, registry)
        tree = build_state(form)
        assert renderer.render(tree) == renderer.render_form(tree) == EXPECTED_FORM
        assert renderer.render(field=form) == EXPECTED_FORM

    def test_inactive_fields_skipped(self, form, registry):
        """Test that inactive fields are left out without error."""
        form.field('address').active = False
        html = FormRenderer(form, registry).render_form()
        assert 'address' not in html
        assert 'name="title"' in html

    def test_inactive_nested_field_skipped(self, form, registry):
        """Test inactive sub-fields inside a compound."""
        form.field('address.street').active = False
        html = FormRenderer(form, registry).render_form()
        assert 'address.street' not in html
        assert 'address.city' in html

    def test_form_errors(self, form, registry):
        """Test that form-level errors are shown at the top."""
        form.add_error('Please fix the errors below')
        html = FormRenderer(form, registry).render_form()
        assert html.splitlines()[1:4] == [
            '<div class="form_errors">',
            '<span class="error_message">Please fix the errors below</span>',
            '</div>',
        ]

    def test_form_start_end_tags(self, registry):
        """Test form_start and form_end tags."""
        form = Form('f', widget_tags={'form_start': '<form action="/go">', 'form_end': '</form><!-- f -->'})
        html = FormRenderer(form, registry).render_form()
        assert html == '<form action="/go">\n</form><!-- f -->'

    def test_rendering_does_not_touch_tree(self, form, registry):
        """Test that the tree is unchanged by rendering."""
        form.field('title').add_error('Required')
        tree = build_state(form)
        before = tree.to_dict()
        FormRenderer(form, registry).render_form(tree)
        assert tree.to_dict() == before
        assert form.field('title').errors == ['Required']

    def test_tree_renders_old_state_after_reprocessing(self, form, registry):
        """Test rendering a snapshot while the live form moves on."""
        form.field('title').set_input('first')
        tree = build_state(form)
        form.clear_state()
        form.field('title').set_input('second')
        renderer = FormRenderer(form, registry)
        assert 'value="first"' in renderer.render_form(tree)
        assert 'value="second"' in renderer.render_form()

    def test_tree_rendered_on_other_thread(self, form, registry):
        """Test that a detached tree renders the same on another thread."""
        form.field('title').set_input('Hi')
        form.field('address.city').set_value('Rome')
        tree = build_state(form)
        renderer = FormRenderer(form, registry)
        results = []
        worker = threading.Thread(target=lambda: results.append(renderer.render_form(tree)))
        worker.start()
        form.field('title').set_input('changed meanwhile')
        worker.join()
        assert results == [EXPECTED_FORM]

    def test_old_tree_renders_after_live_structure_changes(self, registry):
        """Test that dropped instances and fields do not break an older tree."""
        form = Form('f', widget_wrapper='None')
        form.add_field(TextField('title'))
        tags = form.add_field(RepeatableField('tags'))
        for value in ('red', 'blue'):
            tags.add_instance().add_field(TextField('name')).set_value(value)
        tree = build_state(form)

        tags.children.pop()
        form.children.remove(form.field('title'))
        renderer = FormRenderer(form, registry)

        html = renderer.render_form(tree)
        assert '<input type="text" name="title" id="title" value="" />' in html
        assert 'value="red"' in html
        assert 'value="blue"' in html
        assert 'value="blue"' not in renderer.render_form()

    def test_old_tree_keeps_its_widget_declarations(self, form, registry):
        """Test that declarations changed after the build apply to new trees only."""
        tree = build_state(form)
        form.field('title').widget = 'Password'
        renderer = FormRenderer(form, registry)
        assert 'type="text" name="title"' in renderer.render_form(tree)
        assert 'type="password" name="title"' in renderer.render_form()
        assert 'type="text" name="title"' in renderer.render_form(tree)

    def test_root_node_with_explicit_config(self, form, registry):
        """Test that a config given for the root node is used for the form."""
        renderer = FormRenderer(form, registry)
        config = WidgetConfig(widget_name='Simple', tags={'form_start': '<form id="other">'})
        html = renderer.render(build_state(form), config)
        assert html.startswith('<form id="other">\n')
        assert html.endswith('</form>')


class TestNamespaces:
    """Tests for namespace search and resolution failures while rendering."""

    def test_fallback_to_default_namespace(self, registry):
        """Test a widget found only in the default namespace."""
        registry.add(CustomWidget)
        form = Form('f', widget_name_space=['AppNS'], widget_wrapper='None')
        title = form.add_field(TextField('title', widget='Custom'))
        title.set_value('x')
        assert FormRenderer(form, registry).render_field('title') == '<custom>x</custom>'

    def test_form_namespace_overrides_default(self, registry):
        """Test that a strategy in the form's namespace wins over the default."""
        registry.add(AppText)
        form = Form('f', widget_name_space=['AppNS'], widget_wrapper='None')
        form.add_field(TextField('title'))
        assert FormRenderer(form, registry).render_field('title') == '<app-input name="title">'

    def test_field_namespace_replaces_form_namespace(self, registry):
        """Test a field opting out of the form's namespaces."""
        registry.add(AppText)
        form = Form('f', widget_name_space=['AppNS'], widget_wrapper='None')
        form.add_field(TextField('title', widget_name_space=[]))
        assert FormRenderer(form, registry).render_field('title') == (
            '<input type="text" name="title" id="title" value="" />'
        )

    def test_missing_widget_aborts_render(self, form, registry):
        """Test that an unknown widget raises instead of partial output."""
        form.field('address.city').widget = 'Missing'
        renderer = FormRenderer(form, registry)
        with pytest.raises(ResolutionError) as exc_info:
            renderer.render_form()
        assert exc_info.value.name == 'Missing'
        assert exc_info.value.kind is StrategyKind.FIELD
        assert exc_info.value.namespace_path == ('default',)

    def test_missing_wrapper_aborts_render(self, form, registry):
        """Test ResolutionError for a wrapper strategy."""
        form.field('title').widget_wrapper = 'Table'
        with pytest.raises(ResolutionError, match="wrapper strategy named 'Table'"):
            FormRenderer(form, registry).render_field('title')

    def test_missing_form_strategy(self, form, registry):
        """Test ResolutionError for the form strategy."""
        form.config = FormConfig(widget_form='Table')
        with pytest.raises(ResolutionError, match="form strategy named 'Table'"):
            FormRenderer(form, registry).render_form()


class TestConfiguration:
    """Tests for configuration caching and config-file overrides."""

    def test_config_is_cached_until_reconfigure(self, form, registry):
        """Test that declarations are read once per renderer."""
        renderer = FormRenderer(form, registry)
        first = renderer.config_for('title')
        assert renderer.config_for('title') is first

        form.field('title').widget_wrapper = 'None'
        assert renderer.config_for('title') is first
        renderer.reconfigure()
        assert renderer.config_for('title').wrapper_name == 'None'

    def test_cached_config_cannot_be_changed(self, form, registry):
        """Test that a shared cached config rejects tag changes."""
        renderer = FormRenderer(form, registry)
        with pytest.raises(TypeError):
            renderer.config_for('title').tags['wrapper_start'] = '<p>'
        assert renderer.render_field('title').startswith('<div class="field">')

    def test_node_config_follows_node_declarations(self, form, registry):
        """Test per-node derivation and its reuse for equal declarations."""
        renderer = FormRenderer(form, registry)
        first = renderer.node_config(build_state(form).child('title'))
        assert renderer.node_config(build_state(form).child('title')) is first

        form.field('title').widget_wrapper = 'None'
        changed = renderer.node_config(build_state(form).child('title'))
        assert changed.wrapper_name == 'None'
        assert first.wrapper_name == 'Simple'

    def test_hand_built_node_uses_live_declarations(self, form, registry):
        """Test that a node without declarations falls back to config_for()."""
        renderer = FormRenderer(form, registry)
        node = StateNode('title', value='x')
        assert renderer.node_config(node) is renderer.config_for('title')
        assert renderer.render(node).startswith('<div class="field">')

    def test_nested_fields_inherit_from_form(self, form, registry):
        """Test that a compound's wrapper does not leak into sub-fields."""
        renderer = FormRenderer(form, registry)
        assert renderer.config_for('address').wrapper_name == 'Fieldset'
        assert renderer.config_for('address.street').wrapper_name == 'Simple'
        assert renderer.config_for('address').widget_name == 'Compound'
        assert renderer.config_for('address.street').widget_name == 'Text'

    def test_form_config_field_entry(self, registry):
        """Test per-field overrides from a FormConfig."""
        form = Form(config=FormConfig(
            widget_wrapper='None',
            fields={'title': WidgetOverrides(widget_name='Password')},
        ))
        form.add_field(TextField('title'))
        assert FormRenderer(form, registry).render_field('title') == (
            '<input type="password" name="title" id="title" value="" />'
        )
