"""
Tests for the ARIA role and attribute analyzer.
"""

import pytest
from template_a11y.analyzers import aria_roles
from template_a11y.config import AnalysisOptions
from template_a11y.diagnostics import AddAttribute, RemoveAttribute, Severity
from template_a11y.document_context import DocumentContext


def run(text):
    return aria_roles.analyze(text, DocumentContext.build(text), AnalysisOptions())


def rule_ids(diagnostics):
    return [d.rule_id for d in diagnostics]


class TestRoleValues:
    """Tests for role value validation."""

    def test_redundant_button_role(self):
        """role="button" on <button> is redundant and nothing else."""
        text = '<button role="button">Save</button>'
        diagnostics = run(text)
        assert rule_ids(diagnostics) == ['aria-role-redundant']
        assert diagnostics[0].fix == RemoveAttribute('role')
        assert diagnostics[0].span.start == 0
        assert diagnostics[0].span.end == len('<button role="button">')

    def test_invalid_role(self):
        """Test invalid role."""
        diagnostics = run('<div role="buton">x</div>')
        assert rule_ids(diagnostics) == ['aria-role-invalid']
        assert diagnostics[0].severity == Severity.ERROR

    def test_abstract_role(self):
        """Test abstract role."""
        diagnostics = run('<div role="widget">x</div>')
        assert rule_ids(diagnostics) == ['aria-role-abstract']

    def test_multiple_roles(self):
        """Test multiple roles."""
        diagnostics = run('<div role="button link" tabindex="0">x</div>')
        assert 'aria-role-multiple' in rule_ids(diagnostics)
        multiple = [d for d in diagnostics if d.rule_id == 'aria-role-multiple'][0]
        assert multiple.fix == AddAttribute('role', 'button')

    def test_role_is_case_insensitive(self):
        """Test role is case insensitive."""
        assert run('<nav role="NAVIGATION"></nav>')[0].rule_id == 'aria-role-redundant'

    def test_template_expression_role_ignored(self):
        """Test template expression role ignored."""
        assert run('<div role="{settings.role}">x</div>') == []

    def test_valid_role_passes(self):
        """Test valid role passes."""
        assert run('<div role="region" aria-label="News">x</div>') == []


class TestRequiredProperties:
    """Tests for required properties and states."""

    def test_checkbox_requires_checked(self):
        """Test checkbox requires checked."""
        diagnostics = run('<div role="checkbox" tabindex="0">Agree</div>')
        assert rule_ids(diagnostics) == ['aria-role-required-property']
        assert diagnostics[0].fix == AddAttribute('aria-checked', 'false')

    def test_slider_requires_all_values(self):
        """Test slider requires all values."""
        diagnostics = run('<div role="slider" aria-valuenow="5"></div>')
        missing = sorted(d.fix.name for d in diagnostics if d.rule_id == 'aria-role-required-property')
        assert missing == ['aria-valuemax', 'aria-valuemin']

    def test_native_input_exempt(self):
        """Native inputs expose their own checked state."""
        assert run('<input type="checkbox" role="switch">') == []
        assert rule_ids(run('<input type="checkbox" role="checkbox">')) == ['aria-role-redundant']

    def test_dialog_requires_label(self):
        """Test dialog requires label."""
        diagnostics = run('<div role="dialog"><p>Hi</p></div>')
        assert rule_ids(diagnostics) == ['aria-role-required-state']

    def test_dialog_with_labelledby(self):
        """Test dialog with labelledby."""
        assert run('<div role="dialog" aria-labelledby="t"><h2 id="t">Hi</h2></div>') == []


class TestRoleConflicts:
    """Tests for conflicting and inappropriate roles."""

    def test_link_on_button_conflicts(self):
        """Test link on button conflicts."""
        diagnostics = run('<button role="link">Go</button>')
        assert rule_ids(diagnostics) == ['aria-role-conflict']

    def test_input_type_mismatch(self):
        """Test input type mismatch."""
        diagnostics = run('<input type="checkbox" role="slider" aria-valuenow="1" aria-valuemin="0" aria-valuemax="2">')
        assert 'aria-role-input-mismatch' in rule_ids(diagnostics)

    def test_allowed_input_override(self):
        """Test allowed input override."""
        diagnostics = run('<input type="checkbox" role="switch">')
        assert 'aria-role-input-mismatch' not in rule_ids(diagnostics)

    def test_noninteractive_role_on_button(self):
        """Test noninteractive role on button."""
        diagnostics = run('<button role="img">x</button>')
        assert 'aria-role-noninteractive' in rule_ids(diagnostics)


class TestPresentationRole:
    """Tests for role="presentation"/"none" on semantic content."""

    def test_container_with_heading(self):
        """Test container with heading."""
        diagnostics = run('<div role="presentation"><h1>Title</h1></div>')
        assert len(diagnostics) == 1
        assert diagnostics[0].message == (
            "role='presentation' on semantic element <h1> removes accessibility information"
        )

    def test_directly_on_semantic_element(self):
        """Test directly on semantic element."""
        diagnostics = run('<ul role="none"><li>x</li></ul>')
        assert rule_ids(diagnostics) == ['aria-role-presentation-semantic']

    def test_looks_through_control_flow(self):
        """Test looks through control flow."""
        text = '<div role="presentation"><f:if condition="{x}"><h2>T</h2></f:if></div>'
        assert rule_ids(run(text)) == ['aria-role-presentation-semantic']

    def test_layout_table_allowed(self):
        """Test layout table allowed."""
        assert run('<table role="presentation"><tr><td><a href="/">x</a></td></tr></table>') == []


class TestAttributes:
    """Tests for aria-* attributes."""

    def test_hidden_interactive(self):
        """Test hidden interactive."""
        diagnostics = run('<a href="/" aria-hidden="true">x</a>')
        assert rule_ids(diagnostics) == ['aria-hidden-interactive']
        assert diagnostics[0].fix == RemoveAttribute('aria-hidden')

    def test_hidden_focusable_div(self):
        """Test hidden focusable div."""
        assert rule_ids(run('<div tabindex="0" aria-hidden="true">x</div>')) == ['aria-hidden-interactive']

    def test_hidden_decorative_ok(self):
        """Test hidden decorative ok."""
        assert run('<span aria-hidden="true" class="icon"></span>') == []

    def test_invalid_attribute_name(self):
        """Test invalid attribute name."""
        diagnostics = run('<div aria-lable="Menu">x</div>')
        assert rule_ids(diagnostics) == ['aria-attribute-invalid']
        assert "aria-lable" in diagnostics[0].message

    @pytest.mark.parametrize('attr', ['aria-label', 'aria-describedby', 'aria-current', 'aria-live'])
    def test_valid_attribute_names(self, attr):
        """Test valid attribute names."""
        assert run(f'<div {attr}="x">y</div>') == []


class TestToggles:
    """Tests for disclosure toggles and button-styled links."""

    def test_toggle_without_expanded(self):
        """Test toggle without expanded."""
        diagnostics = run('<button data-bs-toggle="collapse" data-bs-target="#a">More</button>')
        assert rule_ids(diagnostics) == ['aria-expanded-missing']
        assert diagnostics[0].fix == AddAttribute('aria-expanded', 'false')

    def test_toggle_with_expanded(self):
        """Test toggle with expanded."""
        assert run('<button class="navbar-toggler" aria-expanded="false">Menu</button>') == []

    def test_button_styled_link(self):
        """Test button styled link."""
        diagnostics = run('<a href="#" class="btn btn-primary">Open</a>')
        assert rule_ids(diagnostics) == ['aria-role-button-link']
        assert diagnostics[0].severity == Severity.WEAK_WARNING

    def test_button_styled_navigation_link_ok(self):
        """Test button styled navigation link ok."""
        assert run('<a href="/contact" class="btn">Contact</a>') == []
