"""
Tests for the live region analyzer.
"""

from template_a11y.analyzers import live_regions
from template_a11y.analyzers.live_regions import collect_live_regions
from template_a11y.config import AnalysisOptions
from template_a11y.diagnostics import AddAttribute, RemoveAttribute, Severity
from template_a11y.document_context import DocumentContext


def run(text):
    return live_regions.analyze(text, DocumentContext.build(text), AnalysisOptions())


def rule_ids(diagnostics):
    return [d.rule_id for d in diagnostics]


class TestCollection:
    """Tests for live region discovery."""

    def test_roles_and_attributes(self):
        """Test roles and attributes."""
        text = '<div role="alert">A</div><p aria-live="polite">B</p><div role="note">C</div>'
        regions = collect_live_regions(text)
        assert [(r.role, r.live, r.politeness) for r in regions] == [
            ('alert', None, 'assertive'),
            ('', 'polite', 'polite'),
        ]


class TestAttributeValues:
    """Tests for live region attribute values."""

    def test_invalid_live_value(self):
        """Test invalid live value."""
        diagnostics = run('<div aria-live="loud">Saved</div>')
        assert rule_ids(diagnostics) == ['live-region-invalid-value']
        assert diagnostics[0].fix == AddAttribute('aria-live', 'polite')

    def test_invalid_boolean(self):
        """Test invalid boolean."""
        diagnostics = run('<div aria-live="polite" aria-atomic="yes">Saved</div>')
        assert rule_ids(diagnostics) == ['live-region-invalid-value']

    def test_invalid_relevant(self):
        """Test invalid relevant."""
        assert rule_ids(run('<div aria-live="polite" aria-relevant="all text">Saved</div>')) == [
            'live-region-invalid-value'
        ]
        assert run('<div aria-live="polite" aria-relevant="additions text">Saved</div>') == []

    def test_busy_reminder(self):
        """Test busy reminder."""
        diagnostics = run('<div aria-live="polite" aria-busy="true">Loading</div>')
        assert rule_ids(diagnostics) == ['live-region-busy']
        assert diagnostics[0].severity == Severity.INFO


class TestRegions:
    """Tests for region-level checks."""

    def test_redundant_live_on_alert(self):
        """Test redundant live on alert."""
        diagnostics = run('<div role="alert" aria-live="assertive">Payment failed</div>')
        assert rule_ids(diagnostics) == ['live-region-redundant']
        assert diagnostics[0].fix == RemoveAttribute('aria-live')

    def test_duplicate_live_attribute(self):
        """Test two aria-live attributes on one element are an error."""
        diagnostics = run('<div aria-live="polite" aria-live="assertive">Saved</div>')
        assert rule_ids(diagnostics) == ['live-region-duplicate-attribute']
        assert diagnostics[0].severity == Severity.ERROR

    def test_nested_regions(self):
        """Test nested regions."""
        text = '<div aria-live="polite">Cart <span role="status" aria-label="Count">3</span></div>'
        assert 'live-region-nested' in rule_ids(run(text))

    def test_status_without_label(self):
        """Test status without label."""
        assert rule_ids(run('<div role="status">3 results</div>')) == ['live-region-label']

    def test_empty_region(self):
        """Test empty region."""
        assert rule_ids(run('<div aria-live="polite"></div>')) == ['live-region-empty']

    def test_empty_region_filled_by_template(self):
        """Test empty region filled by template."""
        assert run('<div aria-live="polite">{message}</div>') == []


class TestPriority:
    """Tests for politeness heuristics."""

    def test_assertive_for_success_message(self):
        """Test assertive for success message."""
        text = '<html lang="en"><body><div aria-live="assertive">Saved successfully</div></body></html>'
        diagnostics = run(text)
        assert rule_ids(diagnostics) == ['live-region-priority']
        assert diagnostics[0].fix == AddAttribute('aria-live', 'polite')

    def test_assertive_for_error_is_fine(self):
        """Test assertive for error is fine."""
        assert run('<div aria-live="assertive">Payment failed</div>') == []

    def test_polite_for_form_validation(self):
        """Test polite for form validation."""
        text = '<form><input type="submit"></form><div aria-live="polite">Field is required</div>'
        diagnostics = run(text)
        assert rule_ids(diagnostics) == ['live-region-priority']
        assert diagnostics[0].fix == AddAttribute('aria-live', 'assertive')


class TestCompetingRegions:
    """Tests for competing and numerous regions."""

    def test_adjacent_assertive_regions(self):
        """Test adjacent assertive regions."""
        text = '<div role="alert">Error one</div><div role="alert">Error two</div>'
        assert rule_ids(run(text)) == ['live-region-competing']

    def test_many_assertive_regions(self):
        """Test many assertive regions."""
        text = ''.join(f'<div role="alert">Error {i}</div>' for i in range(3))
        assert rule_ids(run(text)) == ['live-region-competing'] * 3

    def test_too_many_regions(self):
        """Test too many regions."""
        text = ''.join(f'<p aria-live="polite">Update {i}</p>' for i in range(6))
        assert rule_ids(run(text)) == ['live-region-count']


class TestStatusElements:
    """Tests for styled messages without a live region."""

    def test_error_class(self):
        """Test error class."""
        diagnostics = run('<div class="alert alert-danger">Payment failed</div>')
        assert rule_ids(diagnostics) == ['live-region-missing']
        assert diagnostics[0].severity == Severity.ERROR
        assert diagnostics[0].fix == AddAttribute('role', 'alert')

    def test_success_class(self):
        """Test success class."""
        diagnostics = run('<div class="flash-success">Saved</div>')
        assert rule_ids(diagnostics) == ['live-region-missing']
        assert diagnostics[0].fix == AddAttribute('role', 'status')

    def test_inside_live_region(self):
        """Test inside live region."""
        assert run('<div role="alert"><p class="error-text">Payment failed</p></div>') == []

    def test_exempt_tags(self):
        """Test exempt tags."""
        assert run('<input class="error" type="text"><a href="/" class="info">Info</a>') == []


class TestFlashMessages:
    """Tests for template flash messages."""

    def test_unwrapped(self):
        """Test unwrapped."""
        diagnostics = run('<f:flashMessages />')
        assert rule_ids(diagnostics) == ['live-region-flash-messages']

    def test_wrapped(self):
        """Test wrapped."""
        text = '<div role="status" aria-label="Messages"><f:flashMessages /></div>'
        assert run(text) == []
