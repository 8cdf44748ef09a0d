"""
ARIA Label Analyzer

Validates aria-label / aria-labelledby usage against the element they sit on
and the visible text they compete with.

Features:
- Conflicting or empty labeling attributes
- aria-label on generic, non-interactive elements
- Labels that duplicate, shorten or genericize visible text
- aria-labelledby references to missing ids
- Icon-only controls without an accessible name
- Labels ignored because of aria-hidden, or overriding a visible <label>
- Verbose, instructional and untranslatable label text
"""

import logging
import re
from typing import List, Optional

from ..config import AnalysisOptions
from ..diagnostics import AddAttribute, Diagnostic, RemoveAttribute, Severity, diagnostic
from ..document_context import DocumentContext
from ..rules import RuleGroup
from ..tag_utils import (
    VOID_ELEMENTS,
    ElementRef,
    extract_text_content,
    has_unquoted_value,
    is_empty_or_whitespace,
    is_generic_placeholder_text,
    is_template_expression,
    iter_tags,
)

logger = logging.getLogger(__name__)

RULE_GROUP = RuleGroup(
    group_id='aria-label',
    display_name='ARIA labels',
    rule_ids=(
        'aria-label-conflict',
        'aria-label-empty',
        'aria-label-unnecessary',
        'aria-label-redundant',
        'aria-label-overrides-text',
        'aria-label-generic',
        'aria-labelledby-missing-target',
        'aria-label-icon-only',
        'aria-label-hidden',
        'aria-label-overrides-label',
        'aria-label-verbose',
        'aria-label-instructional',
        'aria-label-untranslatable',
    ),
)

# Generic containers and text-level elements where aria-label is ignored
# unless a role is given. Landmarks, tables and lists are left out: naming
# them is legitimate.
NON_INTERACTIVE_ELEMENTS = frozenset({
    'p', 'div', 'span', 'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'li', 'dl', 'dt', 'dd',
    'blockquote', 'pre', 'code', 'em', 'strong', 'b', 'u', 'tr', 'td', 'th',
    'tbody', 'thead', 'tfoot',
})

SELF_LABELING_ELEMENTS = frozenset({
    'button', 'a', 'label', 'legend', 'caption', 'figcaption', 'option',
    'optgroup', 'summary',
})

FORM_CONTROLS = frozenset({'input', 'select', 'textarea'})

GENERIC_LABELS = frozenset({
    'button', 'link', 'click', 'click here', 'image', 'icon', 'menu',
    'navigation', 'content', 'text', 'element',
})

ICON_GLYPHS = set('×✕✖✓✔➜→←↑↓+−✎☰≡╳⋮⋯…<>«»‹›^x✗⌂⚙★☆♥')

ICON_MARKUP_PATTERN = re.compile(
    r'<(?:i|span|svg|em)\b[^>]*class\s*=\s*["\'][^"\']*'
    r'(?:\bfa\b|fa-|icon|glyphicon|bi-|material-icons)[^"\']*["\']'
    r'|<svg\b',
    re.IGNORECASE
)

IMAGE_ALT_PATTERN = re.compile(r'<img\b[^>]*\balt\s*=\s*["\']\s*[^"\'\s][^"\']*["\']', re.IGNORECASE)

SVG_TITLE_PATTERN = re.compile(r'<title\b[^>]*>\s*\S', re.IGNORECASE)

INSTRUCTION_PATTERN = re.compile(
    r'\b(?:click|tap|press|swipe|double[- ]click)\b'
    r'|\b(?:select|choose|enter|type) (?:a|an|the|your)\b',
    re.IGNORECASE
)

UNTRANSLATABLE_PATTERN = re.compile(r'https?://|www\.|[\w.+-]+@[\w-]+\.\w+', re.IGNORECASE)

MAX_LABEL_LENGTH = 100


def _visible_text(text: str, tag: ElementRef) -> str:
    if tag.tag in VOID_ELEMENTS or tag.self_closing:
        return ''
    return extract_text_content(tag.inner_html(text))


def _is_glyph_only(visible: str) -> bool:
    stripped = visible.replace(' ', '')
    return bool(stripped) and all(ch in ICON_GLYPHS for ch in stripped)


def _has_icon_markup(inner: str) -> bool:
    return ICON_MARKUP_PATTERN.search(inner) is not None


def _check_label_value(text: str, tag: ElementRef, label: str,
                       context: DocumentContext) -> List[Diagnostic]:
    """Checks for a present, non-empty aria-label value."""
    diagnostics = []
    start, end = tag.start, tag.end
    role = tag.get('role')

    if (tag.get('aria-hidden') or '').strip().lower() == 'true':
        diagnostics.append(diagnostic(
            text, start, end,
            "aria-label on an element with aria-hidden='true' will be ignored",
            Severity.WARNING, 'aria-label-hidden', RemoveAttribute('aria-label'),
        ))

    if tag.tag in NON_INTERACTIVE_ELEMENTS and is_empty_or_whitespace(role):
        diagnostics.append(diagnostic(
            text, start, end,
            f"Unnecessary aria-label on <{tag.tag}> without a role; it is ignored by many screen readers",
            Severity.WARNING, 'aria-label-unnecessary', RemoveAttribute('aria-label'),
        ))

    if tag.tag in SELF_LABELING_ELEMENTS:
        visible = _visible_text(text, tag)
        if visible and not _is_glyph_only(visible):
            if label.strip().lower() == visible.lower():
                diagnostics.append(diagnostic(
                    text, start, end,
                    "aria-label is redundant, it duplicates the visible text content",
                    Severity.WEAK_WARNING, 'aria-label-redundant', RemoveAttribute('aria-label'),
                ))
            elif len(visible) > len(label.strip()) + 5:
                diagnostics.append(diagnostic(
                    text, start, end,
                    f"aria-label '{label}' overrides more descriptive visible text '{visible}'",
                    Severity.WARNING, 'aria-label-overrides-text', RemoveAttribute('aria-label'),
                ))
            elif label.strip().lower() in GENERIC_LABELS and not is_generic_placeholder_text(visible):
                diagnostics.append(diagnostic(
                    text, start, end,
                    f"Generic aria-label '{label}' overrides the specific visible text '{visible}'",
                    Severity.WARNING, 'aria-label-generic', RemoveAttribute('aria-label'),
                ))

    if tag.tag == 'input':
        input_type = (tag.get('type') or 'text').strip().lower()
        value = tag.get('value')
        if input_type in ('submit', 'reset', 'button') and value and value.strip().lower() == label.strip().lower():
            diagnostics.append(diagnostic(
                text, start, end,
                f"Redundant aria-label on input[type='{input_type}'] duplicates the value attribute",
                Severity.WEAK_WARNING, 'aria-label-redundant', RemoveAttribute('aria-label'),
            ))

    if tag.tag in FORM_CONTROLS:
        label_text = context.label_text_for(tag.get('id') or '')
        if label_text:
            if label_text.lower() == label.strip().lower():
                message = "aria-label duplicates the visible <label> text"
            else:
                message = f"aria-label '{label}' overrides the visible <label> text '{label_text}'"
            diagnostics.append(diagnostic(
                text, start, end, message,
                Severity.WARNING, 'aria-label-overrides-label', RemoveAttribute('aria-label'),
            ))

    if len(label) > MAX_LABEL_LENGTH:
        diagnostics.append(diagnostic(
            text, start, end,
            f"aria-label is too verbose ({len(label)} characters). "
            f"Consider using aria-describedby for additional information",
            Severity.WEAK_WARNING, 'aria-label-verbose',
        ))

    if INSTRUCTION_PATTERN.search(label):
        diagnostics.append(diagnostic(
            text, start, end,
            "Instructions should use aria-describedby instead of aria-label",
            Severity.WEAK_WARNING, 'aria-label-instructional',
        ))

    if UNTRANSLATABLE_PATTERN.search(label):
        diagnostics.append(diagnostic(
            text, start, end,
            "aria-label contains content that may not translate well (URL or e-mail address)",
            Severity.INFO, 'aria-label-untranslatable',
        ))

    return diagnostics


def _check_icon_only(text: str, tag: ElementRef) -> Optional[Diagnostic]:
    """Buttons (and glyph-only links) must have a name besides their icon."""
    role = (tag.get('role') or '').strip().lower()
    is_button = tag.tag == 'button' or role == 'button'
    if not (is_button or tag.tag == 'a'):
        return None
    if tag.tag in VOID_ELEMENTS or tag.self_closing:
        return None
    for attr in ('aria-label', 'aria-labelledby', 'title'):
        if not is_empty_or_whitespace(tag.get(attr)) or has_unquoted_value(tag.raw, attr):
            return None

    inner = tag.inner_html(text)
    visible = extract_text_content(inner)
    if IMAGE_ALT_PATTERN.search(inner) or SVG_TITLE_PATTERN.search(inner):
        return None

    if _is_glyph_only(visible):
        icon_only = True
    elif not visible and is_button:
        # Empty links are reported by the link text rules
        icon_only = _has_icon_markup(inner)
    else:
        icon_only = False

    if not icon_only:
        return None
    return diagnostic(
        text, tag.start, tag.end,
        f"Icon-only <{tag.tag}> needs accessible text (aria-label, aria-labelledby, or title)",
        Severity.ERROR, 'aria-label-icon-only', AddAttribute('aria-label', ''),
    )


def analyze(text: str, context: DocumentContext, options: AnalysisOptions) -> List[Diagnostic]:
    """
    Check aria-label / aria-labelledby usage of every element.

    Args:
        text: Full file text
        context: Shared document context (ids, label-for map)
        options: Analysis options

    Returns:
        Diagnostics in document order
    """
    diagnostics: List[Diagnostic] = []

    for tag in iter_tags(text):
        has_label = tag.has('aria-label')
        has_labelledby = tag.has('aria-labelledby')
        label = tag.get('aria-label')

        if has_label and has_labelledby:
            diagnostics.append(diagnostic(
                text, tag.start, tag.end,
                "Element has conflicting aria-label and aria-labelledby attributes; use one labeling mechanism",
                Severity.WARNING, 'aria-label-conflict', RemoveAttribute('aria-label'),
            ))

        # Unquoted values cannot be read reliably, so their text is not checked
        if has_label and not is_template_expression(label) \
                and not has_unquoted_value(tag.raw, 'aria-label'):
            if is_empty_or_whitespace(label):
                diagnostics.append(diagnostic(
                    text, tag.start, tag.end,
                    "Empty aria-label provides no accessible name",
                    Severity.ERROR, 'aria-label-empty', RemoveAttribute('aria-label'),
                ))
            else:
                diagnostics.extend(_check_label_value(text, tag, label, context))

        labelledby = tag.get('aria-labelledby')
        if labelledby and not is_template_expression(labelledby):
            for ref in labelledby.split():
                if not context.has_id(ref):
                    diagnostics.append(diagnostic(
                        text, tag.start, tag.end,
                        f"aria-labelledby references non-existent id '{ref}'",
                        Severity.ERROR, 'aria-labelledby-missing-target',
                    ))

        icon = _check_icon_only(text, tag)
        if icon is not None:
            diagnostics.append(icon)

    logger.debug(f"ARIA label analysis produced {len(diagnostics)} diagnostics")
    return diagnostics
