"""
Tests for the diagnostic, fix and report model.
"""

import json

import pytest
from template_a11y.diagnostics import (
    AddAttribute,
    AddChildElement,
    AnalysisReport,
    ChangeTagName,
    Diagnostic,
    RemoveAttribute,
    Severity,
    SourceSpan,
    WrapInTag,
    describe_fix,
    diagnostic,
    fix_to_dict,
)


class TestSeverity:
    """Tests for Severity parsing and ranking."""

    @pytest.mark.parametrize('value,expected', [
        ('error', Severity.ERROR),
        ('WARNING', Severity.WARNING),
        ('weak-warning', Severity.WEAK_WARNING),
        ('weak_warning', Severity.WEAK_WARNING),
        (' info ', Severity.INFO),
    ])
    def test_parse(self, value, expected):
        """Test parse."""
        assert Severity.parse(value) == expected

    def test_parse_unknown(self):
        """Test parse unknown."""
        with pytest.raises(ValueError):
            Severity.parse('fatal')

    def test_rank_order(self):
        """Test rank order."""
        assert Severity.ERROR.rank < Severity.WARNING.rank < Severity.WEAK_WARNING.rank < Severity.INFO.rank


class TestSourceSpan:
    """Tests for SourceSpan."""

    def test_invalid_span(self):
        """Test invalid span."""
        with pytest.raises(ValueError):
            SourceSpan(5, 2)
        with pytest.raises(ValueError):
            SourceSpan(-1, 2)

    def test_clamped(self):
        """Test clamped."""
        assert SourceSpan.clamped(-3, 100, 10) == SourceSpan(0, 10)
        assert SourceSpan.clamped(8, 4, 10) == SourceSpan(8, 8)

    def test_contains_is_half_open(self):
        """Test contains is half open."""
        span = SourceSpan(2, 4)
        assert span.contains(2)
        assert span.contains(3)
        assert not span.contains(4)

    def test_diagnostic_helper_clamps(self):
        """Test diagnostic helper clamps."""
        diag = diagnostic('abc', 1, 50, 'msg', Severity.INFO, 'rule')
        assert diag.span == SourceSpan(1, 3)


class TestFixDescriptors:
    """Tests for fix serialization and descriptions."""

    def test_fix_to_dict(self):
        """Test fix to dict."""
        assert fix_to_dict(AddAttribute('lang', 'en')) == {
            'type': 'add_attribute', 'name': 'lang', 'value': 'en',
        }
        assert fix_to_dict(RemoveAttribute('summary')) == {'type': 'remove_attribute', 'name': 'summary'}
        assert fix_to_dict(AddChildElement('caption', 'Table caption', 'table')) == {
            'type': 'add_child_element',
            'tag_name': 'caption',
            'content': 'Table caption',
            'required_parent_tag': 'table',
        }

    def test_describe_fix(self):
        """Test describe fix."""
        assert describe_fix(AddAttribute('scope', 'col')) == 'Add scope="col"'
        assert describe_fix(ChangeTagName('th')) == 'Change the element to <th>'
        assert describe_fix(WrapInTag('ul')) == 'Wrap the element in <ul>'
        assert describe_fix(AddChildElement('legend')) == 'Add a <legend> element'
        assert describe_fix(AddChildElement('a', 'Skip', 'body')) == 'Add a <a> inside <body>'

    def test_diagnostic_to_dict(self):
        """Test diagnostic to dict."""
        diag = Diagnostic(SourceSpan(0, 6), 'Missing lang', Severity.ERROR, 'lang-missing',
                          AddAttribute('lang', 'en'))
        data = diag.to_dict()
        assert data['rule_id'] == 'lang-missing'
        assert data['span'] == {'start': 0, 'end': 6}
        assert data['severity'] == 'error'
        assert data['fix']['type'] == 'add_attribute'

    def test_diagnostic_without_fix(self):
        """Test diagnostic without fix."""
        diag = Diagnostic(SourceSpan(0, 1), 'x', Severity.INFO, 'r')
        assert 'fix' not in diag.to_dict()

    def test_with_severity(self):
        """Test with severity."""
        diag = Diagnostic(SourceSpan(0, 1), 'x', Severity.INFO, 'r')
        changed = diag.with_severity(Severity.ERROR)
        assert changed.severity == Severity.ERROR
        assert diag.severity == Severity.INFO
        assert changed.rule_id == 'r'


class TestAnalysisReport:
    """Tests for AnalysisReport."""

    def setup_method(self):
        self.text = '<html>\n<body><input type="text"></body>\n</html>'
        self.diagnostics = [
            Diagnostic(SourceSpan(13, 31), 'Missing label', Severity.ERROR, 'form-label-missing'),
            Diagnostic(SourceSpan(0, 6), 'Missing lang', Severity.ERROR, 'lang-missing'),
            Diagnostic(SourceSpan(0, 6), 'Check', Severity.WARNING, 'other-rule'),
            Diagnostic(SourceSpan(0, 6), 'Note', Severity.INFO, 'lang-change'),
        ]

    def test_counts(self):
        """Test counts."""
        report = AnalysisReport.from_diagnostics(self.diagnostics, 'page.html', '2024-01-01T00:00:00')
        assert report.total_issues == 4
        assert report.error_count == 2
        assert report.warning_count == 1
        assert report.info_count == 1
        assert report.summary['form-label-missing'] == 1
        assert not report.passed

    def test_passed_without_errors(self):
        """Test passed without errors."""
        warnings_only = [d for d in self.diagnostics if d.severity != Severity.ERROR]
        report = AnalysisReport.from_diagnostics(warnings_only, 'page.html', 'now')
        assert report.passed

        strict = AnalysisReport.from_diagnostics(warnings_only, 'page.html', 'now', strict_mode=True)
        assert not strict.passed

    def test_to_json(self):
        """Test to JSON."""
        report = AnalysisReport.from_diagnostics(self.diagnostics, 'page.html', 'now')
        data = json.loads(report.to_json())
        assert data['file_path'] == 'page.html'
        assert data['error_count'] == 2
        assert len(data['diagnostics']) == 4
        assert 'source_text' not in data

    def test_to_text_uses_line_and_column(self):
        """Test to text uses line and column."""
        report = AnalysisReport.from_diagnostics(
            self.diagnostics[:1], 'page.html', 'now', source_text=self.text,
        )
        text = report.to_text()
        assert 'TEMPLATE ACCESSIBILITY REPORT' in text
        assert 'form-label-missing' in text
        assert 'line 2, column 7' in text
        assert 'Passed: NO' in text

    def test_to_text_without_source(self):
        """Test to text without source."""
        report = AnalysisReport.from_diagnostics(self.diagnostics[:1], 'page.html', 'now')
        assert 'offset 13-31' in report.to_text()

    def test_skipped_analyzers_listed(self):
        """Test skipped analyzers listed."""
        report = AnalysisReport.from_diagnostics([], 'page.html', 'now', skipped_analyzers=['tables'])
        assert report.passed
        assert 'Skipped analyzers: tables' in report.to_text()
