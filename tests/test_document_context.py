"""
Tests for the document context model.
"""

import pytest
from template_a11y.document_context import DocumentContext


class TestDocumentContextBuild:
    """Tests for DocumentContext.build."""

    def test_empty_text(self):
        """Test empty text."""
        context = DocumentContext.build('')
        assert context.sectioning_spans == ()
        assert not context.has_id('main')

    def test_ids_recorded(self):
        """Test IDs recorded."""
        context = DocumentContext.build('<main id="main"><div id="x"></div></main>')
        assert context.has_id('main')
        assert context.has_id('x')
        assert context.tag_name_for_id('x') == 'div'
        assert not context.has_id('missing')

    def test_first_declaration_wins(self):
        """Test first declaration wins."""
        context = DocumentContext.build('<div id="a"></div><span id="a"></span>')
        assert context.tag_name_for_id('a') == 'div'

    def test_label_for(self):
        """Test label for."""
        context = DocumentContext.build('<label for="email">E-mail <b>address</b></label>')
        assert context.label_text_for('email') == 'E-mail address'
        assert context.label_text_for('other') is None

    def test_immutable(self):
        """Test immutable."""
        context = DocumentContext.build('<div id="a"></div>')
        with pytest.raises(Exception):
            context.ids = {}
        with pytest.raises(TypeError):
            context.ids['b'] = 'div'


class TestSectioningQueries:
    """Tests for offset-based containment."""

    def setup_method(self):
        self.text = '<h1>Top</h1><main><h2>Main</h2></main><section><h2>S</h2></section>'
        self.context = DocumentContext.build(self.text)

    def test_before_any_sectioning(self):
        """Test before any sectioning."""
        assert not self.context.is_in_sectioning_element(0)

    def test_after_main_opens(self):
        """Test after main opens."""
        offset = self.text.index('<h2>Main')
        assert self.context.is_in_sectioning_element(offset)
        assert not self.context.is_in_sectioning_element(offset, include_main=False)

    def test_after_section_opens(self):
        """Test after section opens."""
        offset = self.text.index('<h2>S')
        assert self.context.is_in_sectioning_element(offset, include_main=False)

    def test_containment_is_approximate(self):
        """A position after a closed section still counts as inside."""
        text = '<section></section><h2>After</h2>'
        context = DocumentContext.build(text)
        assert context.is_in_sectioning_element(text.index('<h2>'))


class TestNavigationAndTemplateSections:
    """Tests for navigation spans and template sections."""

    def test_navigation_covers_opening_tag_only(self):
        """Test navigation covers opening tag only."""
        text = '<nav class="main"><a href="/">Home</a></nav>'
        context = DocumentContext.build(text)
        assert context.is_in_navigation_context(0)
        assert context.is_in_navigation_context(len('<nav class="main">'))
        assert not context.is_in_navigation_context(text.index('Home'))

    def test_menu_class_counts_as_navigation(self):
        """Test menu class counts as navigation."""
        context = DocumentContext.build('<ul class="menu-main"><li>x</li></ul>')
        assert len(context.navigation_spans) == 1

    def test_template_sections(self):
        """Test template sections."""
        text = '<f:layout name="Default" /><f:section name="Main"><h2>x</h2></f:section>'
        context = DocumentContext.build(text)
        kinds = [(s.kind, s.name) for s in context.template_sections]
        assert kinds == [('layout', 'Default'), ('section', 'Main')]
        assert context.is_in_template_section(text.index('<h2>'))
        assert not DocumentContext.build('<h2>x</h2>').is_in_template_section(0)


class TestLabelQueries:
    """Tests for label association queries."""

    def test_label_for_anywhere(self):
        """Test label for anywhere."""
        text = '<input id="x"><label for="x">Name</label>'
        context = DocumentContext.build(text)
        assert context.is_labeled_by_label('x', 0)

    def test_wrapping_label(self):
        """Test wrapping label."""
        text = '<label>Name <input type="text"></label>'
        context = DocumentContext.build(text)
        assert context.is_labeled_by_label(None, text.index('<input'))

    def test_wrapping_label_with_id(self):
        """Test wrapping label with ID."""
        text = '<label>Name <input id="n" type="text"></label>'
        context = DocumentContext.build(text)
        assert context.is_labeled_by_label('n', 0)

    def test_unlabeled(self):
        """Test unlabeled."""
        text = '<input id="y" type="text">'
        context = DocumentContext.build(text)
        assert not context.is_labeled_by_label('y', 0)
        assert not context.is_labeled_by_label(None, 0)
