"""
Template Accessibility Linter

Static accessibility checks for HTML and server-side template files
(TYPO3 Fluid style markup included), reporting located diagnostics with
optional fix descriptors.

Features:
- ARIA roles, states and properties; accessible names
- Heading hierarchy per navigation/sectioning/template-section context
- Form labels and fieldset grouping
- Data table headers, captions and header associations
- Live regions, link text, list structure
- Page language declarations and skip links

Works on malformed and partial markup: tags are scanned, not parsed into a
tree, so unclosed elements and template control-flow tags degrade the
result instead of aborting it.
"""

from .diagnostics import (
    AddAttribute,
    AddChildElement,
    AnalysisReport,
    ChangeTagName,
    Diagnostic,
    RemoveAttribute,
    Severity,
    SourceSpan,
    WrapInTag,
)

from .config import (
    AnalysisOptions,
    FileHints,
)

from .document_context import DocumentContext

from .engine import (
    TemplateAccessibilityAnalyzer,
    analyze_file,
    analyze_html,
    analyze_path,
)

__version__ = '1.0.0'
__all__ = [
    # Diagnostics
    'Diagnostic',
    'Severity',
    'SourceSpan',
    'AnalysisReport',
    # Fix descriptors
    'AddAttribute',
    'RemoveAttribute',
    'ChangeTagName',
    'WrapInTag',
    'AddChildElement',
    # Configuration
    'AnalysisOptions',
    'FileHints',
    # Analysis
    'DocumentContext',
    'TemplateAccessibilityAnalyzer',
    'analyze_file',
    'analyze_html',
    'analyze_path',
]
