"""
Skip Link Analyzer

Checks the "skip to main content" links that let keyboard users bypass
repeated navigation (WCAG 2.4.1 Bypass Blocks).

Features:
- Page with navigation and main content but no skip link
- Skip link pointing at an id that does not exist in the document
- Non-descriptive skip link target ids
- Screen-reader-only skip links that never become visible on focus
- Skip link that is not the first focusable element of <body>

Only full page templates are checked: files hinted as layout/partial
fragments, and files without <body>, <header>, <nav> or <main>, are skipped.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from ..config import AnalysisOptions
from ..diagnostics import AddAttribute, AddChildElement, Diagnostic, Severity, diagnostic
from ..document_context import DocumentContext
from ..rules import RuleGroup
from ..tag_utils import (
    ElementRef,
    extract_text_content,
    is_template_expression,
    iter_tags,
)

logger = logging.getLogger(__name__)

RULE_GROUP = RuleGroup(
    group_id='skip-links',
    display_name='Skip links',
    rule_ids=(
        'skip-link-missing',
        'skip-link-target-missing',
        'skip-link-target-name',
        'skip-link-focus-visible',
        'skip-link-placement',
    ),
)

PAGE_MARKER_PATTERN = re.compile(r'<(?:body|header|nav|main)\b', re.IGNORECASE)
NAVIGATION_PATTERN = re.compile(r'<nav\b|role\s*=\s*["\']navigation["\']', re.IGNORECASE)
MAIN_PATTERN = re.compile(r'<main\b|role\s*=\s*["\']main["\']', re.IGNORECASE)

SKIP_TEXT_PATTERN = re.compile(r'\b(?:skip|jump)\b', re.IGNORECASE)
SKIP_TARGET_PATTERN = re.compile(r'^(?:main|content|nav)$', re.IGNORECASE)
DESCRIPTIVE_TARGET_PATTERN = re.compile(r'^(?:main|content|navigation|nav|search)', re.IGNORECASE)

# Classes that hide an element visually but keep it for screen readers
HIDDEN_CLASS_PATTERN = re.compile(r'sr-only|visually-hidden|screen-reader', re.IGNORECASE)

# Tags that can take keyboard focus without a tabindex
FOCUSABLE_TAGS = frozenset({'a', 'button', 'input', 'select', 'textarea'})


@dataclass
class SkipLink:
    """A located skip link and the id it jumps to"""
    tag: ElementRef
    end: int
    target: str
    text: str

    @property
    def classes(self) -> List[str]:
        return (self.tag.get('class') or '').split()


def _link_target(tag: ElementRef) -> Optional[str]:
    """Fragment id an anchor or template link helper jumps to, if any."""
    if tag.tag == 'a':
        href = (tag.get('href') or '').strip()
        if href.startswith('#') and len(href) > 1:
            return href[1:]
        return None
    if tag.tag.startswith('f:link'):
        section = (tag.get('section') or '').strip()
        return section or None
    return None


def collect_skip_links(text: str) -> List[SkipLink]:
    """
    Find skip links: in-page links whose class mentions "skip", whose text
    says skip/jump, or whose target is #main, #content or #nav.
    """
    links = []
    for tag in iter_tags(text):
        if tag.tag != 'a' and not tag.tag.startswith('f:link'):
            continue
        target = _link_target(tag)
        if target is None or is_template_expression(target):
            continue
        end = tag.element_end(text)
        link_text = extract_text_content(tag.inner_html(text))
        css_class = tag.get('class') or ''
        if ('skip' in css_class.lower()
                or SKIP_TEXT_PATTERN.search(link_text)
                or SKIP_TARGET_PATTERN.match(target)):
            links.append(SkipLink(tag, end, target, link_text))
    return links


def is_page_template(text: str, options: AnalysisOptions) -> bool:
    if options.file_hints.is_fragment:
        return False
    return bool(PAGE_MARKER_PATTERN.search(text))


def _has_focus_rule(text: str, css_class: str) -> bool:
    """True if a CSS rule targets .css_class:focus (or :focus-visible)."""
    pattern = re.compile(
        r'\.' + re.escape(css_class) + r'(?![\w-])[^{},]*:focus(?:-visible|-within)?\b[^{]*\{',
        re.IGNORECASE
    )
    return bool(pattern.search(text))


# =============================================================================
# Checks
# =============================================================================

def _check_presence(text: str, links: List[SkipLink]) -> List[Diagnostic]:
    if links:
        return []
    if not (NAVIGATION_PATTERN.search(text) and MAIN_PATTERN.search(text)):
        return []
    anchor = next(iter_tags(text, ['body']), None) or next(iter_tags(text, ['nav', 'main']), None)
    start, end = (anchor.start, anchor.end) if anchor else (0, 0)
    return [diagnostic(
        text, start, end,
        "Page with navigation should have skip navigation links for keyboard users",
        Severity.WARNING, 'skip-link-missing',
        AddChildElement('a', 'Skip to main content', 'body'),
    )]


def _check_targets(text: str, links: List[SkipLink], context: DocumentContext) -> List[Diagnostic]:
    diagnostics = []
    for link in links:
        if not context.has_id(link.target):
            diagnostics.append(diagnostic(
                text, link.tag.start, link.end,
                f"Skip link target '#{link.target}' does not exist in the document",
                Severity.ERROR, 'skip-link-target-missing',
            ))
        if not DESCRIPTIVE_TARGET_PATTERN.match(link.target):
            diagnostics.append(diagnostic(
                text, link.tag.start, link.end,
                f"Skip link target ID '{link.target}' is not descriptive. "
                f"Use IDs like 'main-content', 'navigation', etc.",
                Severity.INFO, 'skip-link-target-name',
            ))
    return diagnostics


def _check_focus_visibility(text: str, links: List[SkipLink]) -> List[Diagnostic]:
    diagnostics = []
    for link in links:
        classes = link.classes
        hidden = [c for c in classes if HIDDEN_CLASS_PATTERN.search(c)]
        if not hidden:
            continue
        # Bootstrap style helpers already reveal the element on focus
        if any(c.lower().endswith('-focusable') for c in classes):
            continue
        if any(_has_focus_rule(text, c) for c in classes):
            continue
        class_value = ' '.join(classes + [f"{hidden[0]}-focusable"])
        diagnostics.append(diagnostic(
            text, link.tag.start, link.end,
            f"Skip link with class '{' '.join(classes)}' should become visible on focus",
            Severity.WARNING, 'skip-link-focus-visible',
            AddAttribute('class', class_value),
        ))
    return diagnostics


def _check_placement(text: str, links: List[SkipLink]) -> List[Diagnostic]:
    if not links:
        return []
    body = next(iter_tags(text, ['body']), None)
    if body is None:
        return []

    skip_starts = {link.tag.start for link in links}
    for tag in iter_tags(text, start=body.end):
        if tag.tag in FOCUSABLE_TAGS or tag.tag.startswith('f:link'):
            if tag.tag == 'input' and (tag.get('type') or '').lower() == 'hidden':
                continue
            if tag.tag == 'a' and not tag.has('href'):
                continue
            if tag.start in skip_starts:
                return []
            return [diagnostic(
                text, tag.start, tag.end,
                "Skip links should be the first focusable element in the page",
                Severity.INFO, 'skip-link-placement',
            )]
    return []


def analyze(text: str, context: DocumentContext, options: AnalysisOptions) -> List[Diagnostic]:
    """
    Check skip link presence, targets, focus visibility and placement.

    Args:
        text: Full file text
        context: Shared document context (declared ids)
        options: Analysis options; a fragment hint disables the analyzer

    Returns:
        Skip link diagnostics
    """
    if not is_page_template(text, options):
        return []

    links = collect_skip_links(text)
    logger.debug(f"Found {len(links)} skip links")

    diagnostics = []
    diagnostics.extend(_check_presence(text, links))
    diagnostics.extend(_check_targets(text, links, context))
    diagnostics.extend(_check_focus_visibility(text, links))
    diagnostics.extend(_check_placement(text, links))
    return diagnostics
