"""
Page Language Analyzer

Checks the document language declaration and language changes inside the page.

Features:
- <html> without lang (or a full document without <html>)
- Empty or malformed lang values on any element
- xml:lang that disagrees with lang, xml:lang without lang
- Informational note for each valid language change (WCAG 3.1.2)
- Runs of another script (Arabic, Hebrew, CJK, Korean, Cyrillic, Greek)
  that contradict the document language

Template layouts and partials are fragments rendered into a page that
declares the language, so the whole analyzer is skipped for them. Values
computed by the template engine ({data.lang}) are accepted as-is.
"""

import logging
import re
from typing import List, Optional

from ..config import AnalysisOptions
from ..diagnostics import AddAttribute, Diagnostic, Severity, diagnostic
from ..document_context import DocumentContext
from ..rules import RuleGroup
from ..tag_utils import (
    ElementRef,
    extract_text_content,
    is_template_expression,
    is_valid_bcp47_language_code,
    iter_tags,
)

logger = logging.getLogger(__name__)

RULE_GROUP = RuleGroup(
    group_id='page-language',
    display_name='Page language',
    rule_ids=(
        'lang-missing',
        'lang-html-missing',
        'lang-empty',
        'lang-invalid',
        'lang-xml-mismatch',
        'lang-xml-only',
        'lang-change',
        'lang-script-mismatch',
    ),
)

DEFAULT_LANGUAGE = 'en'

FRAGMENT_MARKER_PATTERN = re.compile(r'<f:(?:render|section)\b', re.IGNORECASE)
FULL_DOCUMENT_PATTERN = re.compile(r'<!DOCTYPE\b|<head\b|<body\b', re.IGNORECASE)

# Script -> (display name, character class, languages written in it)
SCRIPTS = (
    ('Arabic', re.compile('[\u0600-\u06FF\u0750-\u077F\u08A0-\u08FF\uFB50-\uFDFF\uFE70-\uFEFF]'),
     frozenset({'ar', 'fa', 'ur', 'ps'})),
    ('Hebrew', re.compile('[\u0590-\u05FF\uFB1D-\uFB4F]'), frozenset({'he', 'yi'})),
    ('Japanese', re.compile('[\u3040-\u309F\u30A0-\u30FF]'), frozenset({'ja'})),
    ('Chinese', re.compile('[\u4E00-\u9FFF\u3400-\u4DBF]'), frozenset({'zh', 'ja'})),
    ('Korean', re.compile('[\uAC00-\uD7AF\u1100-\u11FF\u3130-\u318F]'), frozenset({'ko'})),
    ('Cyrillic', re.compile('[\u0400-\u052F]'),
     frozenset({'ru', 'uk', 'bg', 'sr', 'be', 'mk', 'kk', 'ky', 'mn', 'tg'})),
    ('Greek', re.compile('[\u0370-\u03FF\u1F00-\u1FFF]'), frozenset({'el'})),
)

MIN_SCRIPT_CHARACTERS = 10


def is_fragment(text: str, options: AnalysisOptions) -> bool:
    """
    Decide whether the file is a layout/partial fragment.

    An explicit hint wins; otherwise a file with template section markers
    and no DOCTYPE/<head>/<body> is a fragment.
    """
    hint = options.file_hints.is_fragment
    if hint is not None:
        return hint
    return bool(FRAGMENT_MARKER_PATTERN.search(text)) and not FULL_DOCUMENT_PATTERN.search(text)


def _base_language(code: str) -> str:
    return code.strip().lower().split('-', 1)[0]


def _check_value(text: str, tag: ElementRef, value: str) -> Optional[Diagnostic]:
    """Empty / invalid lang value, or None when it is acceptable."""
    if is_template_expression(value):
        return None
    if not value.strip():
        if tag.tag == 'html':
            message = "Lang attribute is empty - must specify a valid language code"
        else:
            message = f"Empty lang attribute on <{tag.name}> element"
        return diagnostic(
            text, tag.start, tag.end, message,
            Severity.ERROR, 'lang-empty', AddAttribute('lang', DEFAULT_LANGUAGE),
        )
    if not is_valid_bcp47_language_code(value.strip()):
        return diagnostic(
            text, tag.start, tag.end,
            f"Invalid language code '{value}' on <{tag.name}> - use BCP 47 format (e.g., 'en', 'en-US', 'de')",
            Severity.ERROR, 'lang-invalid', AddAttribute('lang', DEFAULT_LANGUAGE),
        )
    return None


# =============================================================================
# Checks
# =============================================================================

def _check_document_language(text: str) -> List[Diagnostic]:
    html = next(iter_tags(text, ['html']), None)
    if html is None:
        marker = FULL_DOCUMENT_PATTERN.search(text)
        if marker is None:
            return []
        return [diagnostic(
            text, marker.start(), marker.end(),
            "Missing <html> element with lang attribute",
            Severity.ERROR, 'lang-html-missing',
        )]
    if not html.has('lang'):
        return [diagnostic(
            text, html.start, html.end,
            "Missing lang attribute on <html> element (WCAG 3.1.1 Level A)",
            Severity.ERROR, 'lang-missing', AddAttribute('lang', DEFAULT_LANGUAGE),
        )]
    return []


def _check_lang_attributes(text: str) -> List[Diagnostic]:
    diagnostics = []
    for tag in iter_tags(text):
        has_lang = tag.has('lang')
        lang = tag.get('lang') if has_lang else None
        if has_lang:
            problem = _check_value(text, tag, lang or '')
            if problem is not None:
                diagnostics.append(problem)
            elif tag.tag != 'html' and not is_template_expression(lang):
                diagnostics.append(diagnostic(
                    text, tag.start, tag.end,
                    f"Language change detected on <{tag.name}> element (lang='{lang}') - good for accessibility",
                    Severity.INFO, 'lang-change',
                ))

        xml_lang = tag.get('xml:lang')
        if xml_lang is None:
            continue
        if not has_lang:
            diagnostics.append(diagnostic(
                text, tag.start, tag.end,
                f"<{tag.name}> has xml:lang but missing lang attribute - both should be present for compatibility",
                Severity.WARNING, 'lang-xml-only', AddAttribute('lang', xml_lang),
            ))
        elif lang is not None and lang.strip().lower() != xml_lang.strip().lower():
            diagnostics.append(diagnostic(
                text, tag.start, tag.end,
                f"xml:lang='{xml_lang}' doesn't match lang='{lang}' on <{tag.name}> - they should be identical",
                Severity.WARNING, 'lang-xml-mismatch', AddAttribute('xml:lang', lang),
            ))
    return diagnostics


def _check_scripts(text: str) -> List[Diagnostic]:
    """Text in a script the document language is not written in."""
    html = next(iter_tags(text, ['html']), None)
    if html is None:
        return []
    document_lang = html.get('lang')
    if not document_lang or is_template_expression(document_lang) \
            or not is_valid_bcp47_language_code(document_lang.strip()):
        return []
    base = _base_language(document_lang)

    # Sections that declare their own language are exempt
    chars = list(text)
    for tag in iter_tags(text):
        if tag.tag != 'html' and tag.has('lang'):
            for i in range(tag.start, min(tag.element_end(text), len(chars))):
                chars[i] = ' '
    content = extract_text_content(''.join(chars))

    diagnostics = []
    for name, pattern, languages in SCRIPTS:
        if base in languages:
            continue
        count = len(pattern.findall(content))
        if count > MIN_SCRIPT_CHARACTERS:
            diagnostics.append(diagnostic(
                text, html.start, html.end,
                f"Content contains significant {name} text but document language is '{document_lang}'. "
                f"Consider adding lang attributes to specific sections",
                Severity.WARNING, 'lang-script-mismatch',
            ))
    return diagnostics


def analyze(text: str, context: DocumentContext, options: AnalysisOptions) -> List[Diagnostic]:
    """
    Check page and element language declarations.

    Args:
        text: Full file text
        context: Shared document context (unused)
        options: Analysis options; file_hints decide fragment handling

    Returns:
        Language diagnostics, or nothing for layout/partial fragments
    """
    if is_fragment(text, options):
        logger.debug("Skipping language checks for template fragment")
        return []

    diagnostics = []
    diagnostics.extend(_check_document_language(text))
    diagnostics.extend(_check_lang_attributes(text))
    diagnostics.extend(_check_scripts(text))
    return diagnostics
