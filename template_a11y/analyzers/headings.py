"""
Heading Hierarchy Analyzer

Collects h1-h6 headings in document order, classifies each one by the
context it appears in and checks the outline per context.

Features:
- Multiple H1 in main content, H1 inside sections / navigation / template sections
- Skipped heading levels (per context, with lookback to the nearest lower level)
- Sections that start deep (H3+), deep navigation headings
- Large level jumps when moving between contexts
- Empty, image-only, generic and non-descriptive heading text

The outline is a linear scan with lookback over document order rather than a
tree built from real element nesting.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from ..config import AnalysisOptions
from ..diagnostics import ChangeTagName, Diagnostic, Severity, diagnostic
from ..document_context import DocumentContext
from ..rules import RuleGroup
from ..tag_utils import (
    extract_text_content,
    is_empty_or_whitespace,
    is_generic_placeholder_text,
    iter_tags,
)

logger = logging.getLogger(__name__)

RULE_GROUP = RuleGroup(
    group_id='heading-hierarchy',
    display_name='Heading hierarchy',
    rule_ids=(
        'heading-multiple-h1',
        'heading-section-h1',
        'heading-navigation-h1',
        'heading-level-skipped',
        'heading-section-start',
        'heading-navigation-depth',
        'heading-context-jump',
        'heading-empty',
        'heading-generic',
        'heading-navigation-label',
        'heading-template-section-h1',
    ),
)

HEADING_TAGS = ('h1', 'h2', 'h3', 'h4', 'h5', 'h6')

NAVIGATION_HEADINGS = frozenset({
    'navigation', 'menu', 'breadcrumb', 'breadcrumbs', 'sitemap', 'site map',
    'table of contents', 'contents', 'toc', 'skip links', 'skip navigation',
})

IMAGE_PATTERN = re.compile(r'<img\b[^>]*>', re.IGNORECASE)
IMAGE_ALT_PATTERN = re.compile(r'\balt\s*=\s*["\']\s*[^"\'\s]', re.IGNORECASE)
DYNAMIC_CONTENT_PATTERN = re.compile(r'<[\w.-]+:[\w.-]+|\{[^}]*\}')
NON_DESCRIPTIVE_PATTERN = re.compile(r'^(?:\d+|[a-zA-Z])$')


class HeadingContext(Enum):
    """Where a heading sits in the page outline"""
    MAIN_CONTENT = "main content"
    NAVIGATION = "navigation"
    SECTIONING_CONTENT = "sectioning element"
    TEMPLATE_SECTION = "template section"


@dataclass
class Heading:
    level: int
    text: str
    html: str
    start: int
    end: int
    context: HeadingContext


def collect_headings(text: str, context: DocumentContext) -> List[Heading]:
    """Collect every h1-h6 element with its context, in document order."""
    headings = []
    for tag in iter_tags(text, HEADING_TAGS):
        inner = tag.inner_html(text)
        content = extract_text_content(inner)
        headings.append(Heading(
            level=int(tag.tag[1]),
            text=content,
            html=inner,
            start=tag.start,
            end=tag.element_end(text),
            context=classify_heading(tag.start, content, context),
        ))
    return headings


def classify_heading(offset: int, content: str, context: DocumentContext) -> HeadingContext:
    if context.is_in_navigation_context(offset):
        return HeadingContext.NAVIGATION
    if context.is_in_sectioning_element(offset, include_main=False):
        return HeadingContext.SECTIONING_CONTENT
    if context.is_in_template_section(offset):
        return HeadingContext.TEMPLATE_SECTION
    if content.strip().lower() in NAVIGATION_HEADINGS:
        return HeadingContext.NAVIGATION
    return HeadingContext.MAIN_CONTENT


# =============================================================================
# Checks
# =============================================================================

def _check_h1_usage(text: str, headings: List[Heading]) -> List[Diagnostic]:
    diagnostics = []
    h1s: Dict[HeadingContext, List[Heading]] = {}
    for heading in headings:
        if heading.level == 1:
            h1s.setdefault(heading.context, []).append(heading)

    main_h1s = h1s.get(HeadingContext.MAIN_CONTENT, [])
    section_h1s = h1s.get(HeadingContext.SECTIONING_CONTENT, [])

    for heading in main_h1s[1:]:
        diagnostics.append(diagnostic(
            text, heading.start, heading.end,
            "Multiple H1 elements in main content - only one H1 should exist per page",
            Severity.ERROR, 'heading-multiple-h1', ChangeTagName('h2'),
        ))

    if main_h1s:
        for heading in section_h1s:
            diagnostics.append(diagnostic(
                text, heading.start, heading.end,
                "H1 in sectioning element when main H1 exists. Consider H2 for section heading",
                Severity.WARNING, 'heading-section-h1', ChangeTagName('h2'),
            ))

    if main_h1s or section_h1s:
        for heading in h1s.get(HeadingContext.NAVIGATION, []):
            diagnostics.append(diagnostic(
                text, heading.start, heading.end,
                "Navigation heading as H1 may compete with main content. "
                "Consider H2 or aria-label on nav element",
                Severity.WARNING, 'heading-navigation-h1', ChangeTagName('h2'),
            ))

    for heading in h1s.get(HeadingContext.TEMPLATE_SECTION, []):
        diagnostics.append(diagnostic(
            text, heading.start, heading.end,
            "H1 in template section may conflict with main page heading. Consider H2+ for section content",
            Severity.WARNING, 'heading-template-section-h1', ChangeTagName('h2'),
        ))

    return diagnostics


def _check_hierarchy(text: str, headings: List[Heading]) -> List[Diagnostic]:
    """Level skips inside each context, plus large jumps between contexts."""
    diagnostics = []
    by_context: Dict[HeadingContext, List[Heading]] = {}
    for heading in headings:
        by_context.setdefault(heading.context, []).append(heading)

    for heading_context, group in by_context.items():
        if heading_context == HeadingContext.NAVIGATION:
            for heading in group:
                if heading.level > 3:
                    diagnostics.append(diagnostic(
                        text, heading.start, heading.end,
                        f"Navigation heading H{heading.level} is quite deep. "
                        f"Consider H2-H3 for navigation or use aria-label on nav element",
                        Severity.INFO, 'heading-navigation-depth',
                    ))
            continue

        for index, current in enumerate(group):
            parent_level = _nearest_lower_level(group, index)
            if parent_level is not None:
                if current.level - parent_level > 1:
                    expected = parent_level + 1
                    diagnostics.append(diagnostic(
                        text, current.start, current.end,
                        f"Heading level skipped in {heading_context.value}: "
                        f"H{current.level} follows H{parent_level} (expected H{expected})",
                        Severity.WARNING, 'heading-level-skipped', ChangeTagName(f'h{expected}'),
                    ))
            elif current.level > 2 and heading_context == HeadingContext.SECTIONING_CONTENT:
                diagnostics.append(diagnostic(
                    text, current.start, current.end,
                    f"Section starts with H{current.level} - consider H1 for section title "
                    f"or H2 to continue hierarchy",
                    Severity.WARNING, 'heading-section-start', ChangeTagName('h2'),
                ))

    content_headings = [h for h in headings if h.context != HeadingContext.NAVIGATION]
    for previous, current in zip(content_headings, content_headings[1:]):
        if current.context != previous.context and current.level > previous.level + 2:
            diagnostics.append(diagnostic(
                text, current.start, current.end,
                f"Large heading level jump between contexts: H{previous.level} to H{current.level}. "
                f"Consider intermediate heading levels",
                Severity.INFO, 'heading-context-jump',
            ))

    return diagnostics


def _nearest_lower_level(group: List[Heading], index: int) -> Optional[int]:
    level = group[index].level
    for previous in reversed(group[:index]):
        if previous.level < level:
            return previous.level
    return None


def _check_content(text: str, headings: List[Heading]) -> List[Diagnostic]:
    diagnostics = []
    for heading in headings:
        where = heading.context.value
        if is_empty_or_whitespace(heading.text):
            if DYNAMIC_CONTENT_PATTERN.search(heading.html):
                continue
            images = IMAGE_PATTERN.findall(heading.html)
            if images:
                if any(IMAGE_ALT_PATTERN.search(img) for img in images):
                    continue
                message = (f"H{heading.level} contains only images - ensure images have alt text "
                           f"or add heading text")
            else:
                message = f"Empty H{heading.level} element in {where} - headings must contain text content"
            diagnostics.append(diagnostic(
                text, heading.start, heading.end, message, Severity.ERROR, 'heading-empty',
            ))
            continue

        if is_generic_placeholder_text(heading.text):
            diagnostics.append(diagnostic(
                text, heading.start, heading.end,
                f'H{heading.level} in {where} contains generic text "{heading.text}" '
                f'- use descriptive heading text',
                Severity.WARNING, 'heading-generic',
            ))
        elif NON_DESCRIPTIVE_PATTERN.match(heading.text.strip()):
            diagnostics.append(diagnostic(
                text, heading.start, heading.end,
                f'H{heading.level} in {where} contains non-descriptive text "{heading.text.strip()}"',
                Severity.WARNING, 'heading-generic',
            ))

        if (heading.context == HeadingContext.NAVIGATION
                and heading.text.strip().lower() in NAVIGATION_HEADINGS):
            diagnostics.append(diagnostic(
                text, heading.start, heading.end,
                f"Navigation heading '{heading.text}' could be replaced with aria-label "
                f"on nav element for cleaner markup",
                Severity.INFO, 'heading-navigation-label',
            ))
    return diagnostics


def analyze(text: str, context: DocumentContext, options: AnalysisOptions) -> List[Diagnostic]:
    """
    Check the heading outline of a file.

    Args:
        text: Full file text
        context: Shared document context (sectioning, navigation, template sections)
        options: Analysis options

    Returns:
        Heading diagnostics
    """
    headings = collect_headings(text, context)
    if not headings:
        return []

    logger.debug(f"Collected {len(headings)} headings")
    diagnostics = []
    diagnostics.extend(_check_h1_usage(text, headings))
    diagnostics.extend(_check_hierarchy(text, headings))
    diagnostics.extend(_check_content(text, headings))
    return diagnostics
