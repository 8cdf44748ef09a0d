"""
Tests for the page language analyzer.
"""

from template_a11y.analyzers import page_language
from template_a11y.analyzers.page_language import is_fragment
from template_a11y.config import AnalysisOptions, FileHints
from template_a11y.diagnostics import AddAttribute, Severity
from template_a11y.document_context import DocumentContext


def run(text, options=None):
    return page_language.analyze(text, DocumentContext.build(text), options or AnalysisOptions())


def rule_ids(diagnostics):
    return [d.rule_id for d in diagnostics]


class TestFragmentDetection:
    """Tests for layout/partial detection."""

    def test_section_markers_without_document(self):
        """Test section markers without document."""
        assert is_fragment('<f:section name="Main"><p>Hi</p></f:section>', AnalysisOptions())

    def test_full_document_with_render(self):
        """Test full document with render."""
        assert not is_fragment('<html><body><f:render partial="Menu" /></body></html>', AnalysisOptions())

    def test_hint_wins(self):
        """Test hint wins."""
        options = AnalysisOptions(file_hints=FileHints(is_fragment=True))
        assert is_fragment('<html><body></body></html>', options)
        options = AnalysisOptions(file_hints=FileHints(is_fragment=False))
        assert not is_fragment('<f:section name="Main"></f:section>', options)


class TestDocumentLanguage:
    """Tests for the document language declaration."""

    def test_missing_lang(self):
        """Test missing lang."""
        diagnostics = run('<html><body></body></html>')
        assert rule_ids(diagnostics) == ['lang-missing']
        assert diagnostics[0].severity == Severity.ERROR
        assert diagnostics[0].fix == AddAttribute('lang', 'en')

    def test_declared_lang(self):
        """Test declared lang."""
        assert run('<html lang="en"><body></body></html>') == []

    def test_missing_html_element(self):
        """Test missing html element."""
        diagnostics = run('<!DOCTYPE html><body>Hello</body>')
        assert rule_ids(diagnostics) == ['lang-html-missing']
        assert diagnostics[0].span.start == 0

    def test_snippet_without_document_markers(self):
        """Test snippet without document markers."""
        assert run('<div>Hello</div>') == []

    def test_fragment_is_skipped(self):
        """Test fragment is skipped."""
        assert run('<f:section name="Main"><p lang="">x</p></f:section>') == []

    def test_fragment_hint_disabled(self):
        """Test fragment hint disabled."""
        options = AnalysisOptions(file_hints=FileHints(is_fragment=False))
        text = '<f:section name="Main"><p lang="">x</p></f:section>'
        assert rule_ids(run(text, options)) == ['lang-empty']

    def test_layout_hint_skips_page(self):
        """Test layout hint skips page."""
        options = AnalysisOptions(file_hints=FileHints.from_path('Resources/Private/Layouts/Default.html'))
        assert run('<html><body></body></html>', options) == []


class TestLangValues:
    """Tests for lang attribute values."""

    def test_empty(self):
        """Test empty."""
        diagnostics = run('<html lang=""><body></body></html>')
        assert rule_ids(diagnostics) == ['lang-empty']

    def test_invalid(self):
        """Test invalid."""
        diagnostics = run('<html lang="english"><body></body></html>')
        assert rule_ids(diagnostics) == ['lang-invalid']
        assert "'english'" in diagnostics[0].message

    def test_template_expression(self):
        """Test template expression."""
        assert run('<html lang="{data.lang}"><body></body></html>') == []

    def test_language_change(self):
        """Test language change."""
        diagnostics = run('<html lang="en"><body><p lang="de-AT">Servus</p></body></html>')
        assert rule_ids(diagnostics) == ['lang-change']
        assert diagnostics[0].severity == Severity.INFO


class TestXmlLang:
    """Tests for xml:lang consistency."""

    def test_mismatch(self):
        """Test mismatch."""
        diagnostics = run('<html lang="en" xml:lang="de"><body></body></html>')
        assert rule_ids(diagnostics) == ['lang-xml-mismatch']
        assert diagnostics[0].fix == AddAttribute('xml:lang', 'en')

    def test_matching_case_insensitive(self):
        """Test matching case insensitive."""
        assert run('<html lang="en-US" xml:lang="en-us"><body></body></html>') == []

    def test_xml_lang_only(self):
        """Test XML lang only."""
        diagnostics = run('<html lang="en"><body><p xml:lang="fr">Bonjour</p></body></html>')
        assert rule_ids(diagnostics) == ['lang-xml-only']
        assert diagnostics[0].fix == AddAttribute('lang', 'fr')


class TestScriptMismatch:
    """Tests for text written in another script."""

    def test_cyrillic_in_english_page(self):
        """Test cyrillic in english page."""
        diagnostics = run('<html lang="en"><body><p>Привет всем друзьям</p></body></html>')
        assert rule_ids(diagnostics) == ['lang-script-mismatch']
        assert 'Cyrillic' in diagnostics[0].message

    def test_marked_section_is_exempt(self):
        """Test marked section is exempt."""
        diagnostics = run('<html lang="en"><body><p lang="ru">Привет всем друзьям</p></body></html>')
        assert rule_ids(diagnostics) == ['lang-change']

    def test_matching_document_language(self):
        """Test matching document language."""
        assert run('<html lang="ru"><body><p>Привет всем друзьям</p></body></html>') == []

    def test_few_characters(self):
        """Test few characters."""
        assert run('<html lang="en"><body><p>Da, Привет</p></body></html>') == []
