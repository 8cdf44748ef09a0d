"""
Tests for the table structure analyzer.
"""

from template_a11y.analyzers import tables
from template_a11y.analyzers.tables import TablePurpose, analyze_table, classify
from template_a11y.config import AnalysisOptions
from template_a11y.diagnostics import AddAttribute, Severity
from template_a11y.document_context import DocumentContext
from template_a11y.tag_utils import iter_tags


def run(text):
    return tables.analyze(text, DocumentContext.build(text), AnalysisOptions())


def rule_ids(diagnostics):
    return [d.rule_id for d in diagnostics]


def first_table(text):
    return analyze_table(text, next(iter_tags(text, ['table'])))


def rows(count, cells=1):
    return ''.join(
        '<tr>' + ''.join(f'<td>{r * cells + c}</td>' for c in range(cells)) + '</tr>'
        for r in range(count)
    )


class TestTableAnalysis:
    """Tests for structural analysis."""

    def test_counts(self):
        """Test counts."""
        analysis = first_table(f'<table>{rows(3, 2)}</table>')
        assert analysis.row_count == 3
        assert analysis.column_count == 2
        assert not analysis.has_headers

    def test_nested_tables_are_ignored(self):
        """Test nested tables are ignored."""
        text = f'<table><tr><td><table>{rows(7)}</table></td></tr></table>'
        analysis = first_table(text)
        assert analysis.row_count == 1

    def test_thead_header_rows(self):
        """Test thead header rows."""
        text = '<table><thead><tr><th>A</th></tr><tr><th>B</th></tr></thead><tbody><tr><td>1</td></tr></tbody></table>'
        analysis = first_table(text)
        assert analysis.header_rows_in_thead == 2
        assert analysis.is_complex

    def test_caption_first(self):
        """Test caption first."""
        analysis = first_table('<table><caption>Sales</caption><tr><th>Q1</th></tr></table>')
        assert analysis.caption_first


class TestClassification:
    """Tests for layout/data classification."""

    def test_presentation_role_is_layout(self):
        """Test presentation role is layout."""
        assert classify(first_table('<table role="presentation"><tr><td>x</td></tr></table>')) == TablePurpose.LAYOUT

    def test_layout_class(self):
        """Test layout class."""
        assert classify(first_table('<table class="layout-grid"><tr><td>x</td></tr></table>')) == TablePurpose.LAYOUT

    def test_small_table_with_controls(self):
        """Test small table with controls."""
        text = '<table><tr><td><input type="text" name="q"></td><td><button>Go</button></td></tr></table>'
        assert classify(first_table(text)) == TablePurpose.LAYOUT

    def test_headers_make_data(self):
        """Test headers make data."""
        assert classify(first_table('<table><tr><th>Name</th></tr><tr><td>A</td></tr></table>')) == TablePurpose.DATA

    def test_numeric_content_makes_data(self):
        """Test numeric content makes data."""
        assert classify(first_table('<table><tr><td>Price</td><td>$4.50</td></tr></table>')) == TablePurpose.DATA

    def test_ambiguous(self):
        """Test ambiguous."""
        assert classify(first_table('<table><tr><td>Hello</td></tr></table>')) == TablePurpose.AMBIGUOUS


class TestDataTables:
    """Tests for data table checks."""

    def test_eight_rows_without_headers(self):
        """Missing headers and missing caption, nothing else."""
        diagnostics = run(f'<table>{rows(8)}</table>')
        assert rule_ids(diagnostics) == ['table-missing-headers', 'table-missing-caption']
        assert diagnostics[0].severity == Severity.ERROR
        assert diagnostics[1].fix.tag_name == 'caption'

    def test_aria_label_names_large_table(self):
        """Test aria label names large table."""
        diagnostics = run(f'<table aria-label="Results" class="results"><tr><th>N</th></tr>{rows(7)}</table>')
        assert 'table-missing-caption' not in rule_ids(diagnostics)

    def test_summary_obsolete(self):
        """Test summary obsolete."""
        text = '<table summary="Quarterly sales"><caption>Sales</caption><tr><th>Q1</th></tr><tr><td>1</td></tr></table>'
        diagnostics = run(text)
        assert rule_ids(diagnostics) == ['table-summary-obsolete']
        assert diagnostics[0].fix.content == 'Quarterly sales'

    def test_caption_not_first(self):
        """Test caption not first."""
        text = '<table><tr><th>Q1</th></tr><caption>Sales</caption><tr><td>1</td></tr></table>'
        diagnostics = run(text)
        assert rule_ids(diagnostics) == ['table-caption-position']
        assert diagnostics[0].span.start == text.index('<caption>')

    def test_empty_caption(self):
        """Test empty caption."""
        text = '<table><caption> </caption><tr><th>Q1</th></tr><tr><td>1</td></tr></table>'
        assert rule_ids(run(text)) == ['table-caption-empty']

    def test_empty_and_generic_headers(self):
        """Test empty and generic headers."""
        text = ('<table><tr><th></th><th>Column 2</th><th></th></tr>'
                '<tr><th>Row</th><td>1</td><td>2</td></tr></table>')
        diagnostics = run(text)
        assert rule_ids(diagnostics) == ['table-header-generic', 'table-header-empty', 'table-header-generic']

    def test_first_row_looks_like_headers(self):
        """Test first row looks like headers."""
        text = ('<table><tr><td>Name</td><td>Score</td></tr>'
                '<tr><td>Ann</td><td>12.5</td></tr><tr><td>Bob</td><td>9.0</td></tr></table>')
        assert rule_ids(run(text)) == ['table-missing-headers', 'table-first-row-headers']

    def test_large_table_sections(self):
        """Test large table sections."""
        text = f'<table><tr><th>N</th></tr>{rows(11)}</table>'
        diagnostics = run(text)
        assert 'table-sections' in rule_ids(diagnostics)

    def test_tbody_without_thead(self):
        """Test tbody without thead."""
        text = '<table><tbody><tr><th>Name</th></tr><tr><td>A</td></tr></tbody></table>'
        assert rule_ids(run(text)) == ['table-thead-missing']


class TestComplexTables:
    """Tests for header associations in complex tables."""

    def test_spans_without_associations(self):
        """Test spans without associations."""
        text = ('<table><tr><th colspan="2">Totals</th></tr>'
                '<tr><td>1</td><td>2</td></tr></table>')
        diagnostics = run(text)
        assert rule_ids(diagnostics) == ['table-span-associations', 'table-header-scope']
        assert diagnostics[1].fix == AddAttribute('scope', 'row')

    def test_scoped_headers(self):
        """Test scoped headers."""
        text = ('<table><tr><th scope="col" colspan="2">Totals</th></tr>'
                '<tr><td>1</td><td>2</td></tr></table>')
        assert run(text) == []

    def test_scope_suggestion_in_thead(self):
        """Test scope suggestion in thead."""
        text = ('<table><thead><tr><th>A</th><th>B</th></tr><tr><th>C</th><th>D</th></tr></thead>'
                '<tbody><tr><td>1</td><td>2</td></tr></tbody></table>')
        diagnostics = run(text)
        scopes = [d.fix.value for d in diagnostics if d.rule_id == 'table-header-scope']
        assert scopes == ['col', 'col', 'col', 'col']


class TestLayoutAndReferences:
    """Tests for layout tables and id references."""

    def test_layout_table(self):
        """Test layout table."""
        diagnostics = run('<table role="presentation"><tr><td>x</td></tr></table>')
        assert rule_ids(diagnostics) == ['table-layout-css']
        assert diagnostics[0].severity == Severity.INFO

    def test_layout_table_with_semantics(self):
        """Test layout table with semantics."""
        diagnostics = run('<table class="layout"><caption>x</caption><tr><th>x</th></tr></table>')
        assert rule_ids(diagnostics) == ['table-layout-semantics', 'table-layout-css']

    def test_purpose_unclear(self):
        """Test purpose unclear."""
        assert rule_ids(run('<table><tr><td>Hello</td></tr></table>')) == ['table-purpose-unclear']

    def test_missing_references(self):
        """Test missing references."""
        text = ('<p id="note">Note</p><table aria-describedby="note gone">'
                '<tr><th id="h1">Name</th></tr><tr><td headers="h1 h9">A</td></tr></table>')
        diagnostics = [d for d in run(text) if d.rule_id == 'table-reference-missing']
        assert len(diagnostics) == 2
        assert "'gone'" in diagnostics[0].message
        assert "'h9'" in diagnostics[1].message
