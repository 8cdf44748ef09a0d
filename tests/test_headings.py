"""
Tests for the heading hierarchy analyzer.
"""

from template_a11y.analyzers import headings
from template_a11y.analyzers.headings import HeadingContext, collect_headings
from template_a11y.config import AnalysisOptions
from template_a11y.diagnostics import ChangeTagName, Severity
from template_a11y.document_context import DocumentContext


def run(text):
    return headings.analyze(text, DocumentContext.build(text), AnalysisOptions())


def rule_ids(diagnostics):
    return [d.rule_id for d in diagnostics]


class TestHeadingCollection:
    """Tests for heading collection and classification."""

    def test_contexts(self):
        """Test contexts."""
        text = (
            '<h1>Company</h1>'
            '<f:section name="Content"><h2>News</h2></f:section>'
            '<article><h2>Story</h2></article>'
            '<nav><h2>Menu</h2></nav>'
        )
        collected = collect_headings(text, DocumentContext.build(text))
        assert [h.context for h in collected] == [
            HeadingContext.MAIN_CONTENT,
            HeadingContext.TEMPLATE_SECTION,
            HeadingContext.SECTIONING_CONTENT,
            HeadingContext.NAVIGATION,
        ]

    def test_navigation_by_heading_text(self):
        """Test navigation by heading text."""
        text = '<h2>Table of contents</h2>'
        collected = collect_headings(text, DocumentContext.build(text))
        assert collected[0].context == HeadingContext.NAVIGATION

    def test_main_does_not_open_sectioning_context(self):
        """Test main does not open sectioning context."""
        text = '<main><h1>Title text</h1></main>'
        collected = collect_headings(text, DocumentContext.build(text))
        assert collected[0].context == HeadingContext.MAIN_CONTENT


class TestLevelSkips:
    """Tests for heading level skips."""

    def test_h1_then_h3(self):
        """Exactly one skip, naming the expected H2."""
        diagnostics = run('<h1>Annual report</h1><h3>Revenue figures</h3>')
        skips = [d for d in diagnostics if d.rule_id == 'heading-level-skipped']
        assert len(skips) == 1
        assert 'expected H2' in skips[0].message
        assert skips[0].fix == ChangeTagName('h2')
        assert rule_ids(diagnostics) == ['heading-level-skipped']

    def test_lookback_to_nearest_lower_level(self):
        """Test lookback to nearest lower level."""
        text = '<h1>Report</h1><h2>Sales</h2><h3>Europe</h3><h2>Costs</h2><h4>Travel</h4>'
        skips = [d for d in run(text) if d.rule_id == 'heading-level-skipped']
        assert len(skips) == 1
        assert 'H4 follows H2' in skips[0].message
        assert skips[0].fix == ChangeTagName('h3')

    def test_going_back_up_is_fine(self):
        """Test going back up is fine."""
        assert run('<h1>Report</h1><h2>Sales</h2><h3>Europe</h3><h2>Costs</h2>') == []

    def test_contexts_are_checked_separately(self):
        """Test contexts are checked separately."""
        text = '<h1>Report</h1><article><h2>Story</h2><h3>Detail</h3></article>'
        assert 'heading-level-skipped' not in rule_ids(run(text))

    def test_section_starting_deep(self):
        """Test section starting deep."""
        diagnostics = run('<h1>Report</h1><section><h3>Details</h3></section>')
        assert 'heading-section-start' in rule_ids(diagnostics)

    def test_deep_navigation_heading(self):
        """Test deep navigation heading."""
        diagnostics = run('<nav><h4>Quick links</h4></nav>')
        assert rule_ids(diagnostics) == ['heading-navigation-depth']
        assert diagnostics[0].severity == Severity.INFO

    def test_context_jump(self):
        """Test context jump."""
        text = '<h1>Report</h1><f:section name="Main"><h4>Numbers</h4></f:section>'
        assert 'heading-context-jump' in rule_ids(run(text))


class TestH1Usage:
    """Tests for H1 usage rules."""

    def test_multiple_h1(self):
        """Test multiple H1."""
        diagnostics = run('<h1>Report</h1><h1>Summary</h1>')
        assert rule_ids(diagnostics) == ['heading-multiple-h1']
        assert diagnostics[0].span.start == len('<h1>Report</h1>')

    def test_section_h1_with_main_h1(self):
        """Test section H1 with main H1."""
        diagnostics = run('<h1>Report</h1><section><h1>Summary</h1></section>')
        assert rule_ids(diagnostics) == ['heading-section-h1']

    def test_navigation_h1_with_main_h1(self):
        """Test an H1 inside <nav> competes with the main H1."""
        diagnostics = run('<h1>Products</h1><nav><h1>Site links</h1></nav>')
        assert rule_ids(diagnostics) == ['heading-navigation-h1']
        assert diagnostics[0].severity == Severity.WARNING
        assert diagnostics[0].fix == ChangeTagName('h2')
        assert 'aria-label on nav' in diagnostics[0].message

    def test_navigation_h1_by_heading_text(self):
        """Test an H1 named like a navigation block is treated as navigation."""
        diagnostics = run('<h1>Products</h1><h1>Navigation</h1>')
        assert rule_ids(diagnostics) == ['heading-navigation-h1', 'heading-navigation-label']

    def test_navigation_h1_alone(self):
        """Test a navigation H1 without content H1s is accepted."""
        assert run('<nav><h1>Site links</h1></nav>') == []

    def test_template_section_h1(self):
        """Test template section H1."""
        diagnostics = run('<f:section name="Main"><h1>Welcome page</h1></f:section>')
        assert rule_ids(diagnostics) == ['heading-template-section-h1']


class TestHeadingContent:
    """Tests for heading text."""

    def test_empty_heading(self):
        """Test empty heading."""
        diagnostics = run('<h2>  </h2>')
        assert rule_ids(diagnostics) == ['heading-empty']
        assert diagnostics[0].severity == Severity.ERROR

    def test_dynamic_heading_is_not_empty(self):
        """Test dynamic heading is not empty."""
        assert run('<h2>{page.title}</h2>') == []
        assert run('<h2><f:translate key="title" /></h2>') == []

    def test_image_only_heading(self):
        """Test image only heading."""
        diagnostics = run('<h1><img src="logo.png"></h1>')
        assert rule_ids(diagnostics) == ['heading-empty']
        assert 'only images' in diagnostics[0].message

    def test_image_with_alt(self):
        """Test image with alt."""
        assert run('<h1><img src="logo.png" alt="ACME Corp"></h1>') == []

    def test_generic_heading(self):
        """Test generic heading."""
        assert rule_ids(run('<h2>More</h2>')) == ['heading-generic']

    def test_single_character_heading(self):
        """Test single character heading."""
        assert rule_ids(run('<h2>7</h2>')) == ['heading-generic']

    def test_navigation_heading_label_hint(self):
        """Test navigation heading label hint."""
        diagnostics = run('<nav><h2>Navigation</h2></nav>')
        assert rule_ids(diagnostics) == ['heading-navigation-label']
