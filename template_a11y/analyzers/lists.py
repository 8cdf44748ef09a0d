"""
List Structure Analyzer

Checks <ul>, <ol> and <dl> markup and whether the list type fits its content.

Features:
- Lists without items, invalid direct children, direct text inside lists
- <dl> term/description pairing
- Empty items, items used as visual dividers, single-item lists
- div role="list" instead of a native list
- Purpose classification (navigation, breadcrumb, steps, social, tags)
  with <ul>/<ol> appropriateness and labeling suggestions
- Long lists and lists dominated by near-empty items

Template control-flow tags (<f:for>, <f:if>, ...) are transparent: their
children count as children of the surrounding list.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from ..config import AnalysisOptions
from ..diagnostics import ChangeTagName, Diagnostic, Severity, WrapInTag, diagnostic
from ..document_context import DocumentContext
from ..rules import RuleGroup
from ..tag_utils import (
    ElementRef,
    extract_text_content,
    is_control_flow_tag,
    iter_tags,
)

logger = logging.getLogger(__name__)

RULE_GROUP = RuleGroup(
    group_id='list-structure',
    display_name='List structure',
    rule_ids=(
        'list-no-items',
        'list-invalid-child',
        'list-direct-text',
        'list-dl-structure',
        'list-item-empty',
        'list-item-divider',
        'list-single-item',
        'list-div-role',
        'list-type',
        'list-navigation',
        'list-breadcrumb-label',
        'list-length',
        'list-low-content',
    ),
)

LIST_TAGS = ('ul', 'ol')
NON_RENDERED_CHILDREN = frozenset({'script', 'template', 'style'})

DIVIDER_TEXT_PATTERN = re.compile(r'^[-–—•·|/]{1,3}$')
DIVIDER_CLASS_PATTERN = re.compile(r'divider|separator', re.IGNORECASE)
LI_START_PATTERN = re.compile(r'<li\b', re.IGNORECASE)
LI_END_PATTERN = re.compile(r'</li\s*>\s*$', re.IGNORECASE)
BREAK_PATTERN = re.compile(r'<br\s*/?>', re.IGNORECASE)
DYNAMIC_CONTENT_PATTERN = re.compile(r'<[\w.-]+:[\w.-]+|\{[^}]*\}')

NAVIGATION_CLASS_PATTERN = re.compile(r'menu|nav', re.IGNORECASE)
BREADCRUMB_PATTERN = re.compile(r'breadcrumb', re.IGNORECASE)
SOCIAL_CLASS_PATTERN = re.compile(r'social|share|follow', re.IGNORECASE)
TAGS_CLASS_PATTERN = re.compile(r'\b(?:tags?|labels?|chips?|badges?)\b', re.IGNORECASE)
STEPS_CLASS_PATTERN = re.compile(r'steps?|wizard|progress|timeline', re.IGNORECASE)

SEQUENTIAL_ITEM_PATTERN = re.compile(
    r'\b(?:first|second|third|fourth|fifth|next|then|finally)\b|^\d+[.)]|\bstep \d+',
    re.IGNORECASE
)
STEP_ITEM_PATTERN = re.compile(r'\b(?:step|phase|stage)\b|^(?:click|select|enter)\b', re.IGNORECASE)

MIN_ITEMS_FOR_CONTENT_ANALYSIS = 3
SEQUENTIAL_RATIO = 0.6
MAX_LIST_ITEMS = 20
LOW_CONTENT_LENGTH = 3
LOW_CONTENT_RATIO = 0.3


class ListPurpose(Enum):
    NAVIGATION = "navigation"
    BREADCRUMB = "breadcrumb"
    STEPS = "steps"
    SOCIAL = "social"
    TAGS = "tags"
    GENERAL = "general"


@dataclass
class ListStructure:
    """A list element split into its direct children"""
    tag: ElementRef
    end: int
    children: List[Tuple[ElementRef, int]] = field(default_factory=list)
    text_segments: List[Tuple[int, int]] = field(default_factory=list)
    has_control_flow: bool = False

    @property
    def items(self) -> List[Tuple[ElementRef, int]]:
        return [(child, end) for child, end in self.children if child.tag == 'li']


def scan_children(text: str, element: ElementRef) -> ListStructure:
    """
    Split an element into direct children, looking through control-flow tags.

    Unclosed children end at the next <li> (or the end of the element).
    """
    inner_start, inner_end = element.inner_span(text)
    structure = ListStructure(tag=element, end=element.element_end(text))
    position = inner_start

    while position < inner_end:
        tag = next(iter_tags(text, include_closing=True, start=position, end=inner_end), None)
        if tag is None:
            structure.text_segments.append((position, inner_end))
            break
        if tag.start > position:
            structure.text_segments.append((position, tag.start))

        if tag.tag == 'f:comment' and not tag.closing:
            position = max(tag.end, min(tag.element_end(text), inner_end))
            continue
        if tag.closing or is_control_flow_tag(tag.name):
            if not tag.closing:
                structure.has_control_flow = True
            position = tag.end
            continue

        child_end = tag.element_end(text)
        if child_end > inner_end:
            next_item = LI_START_PATTERN.search(text, tag.end, inner_end)
            child_end = next_item.start() if next_item else inner_end
        structure.children.append((tag, child_end))
        position = max(child_end, tag.end)

    return structure


def classify_list(tag: ElementRef) -> ListPurpose:
    css = tag.get('class') or ''
    label = tag.get('aria-label') or ''
    role = (tag.get('role') or '').strip().lower()
    if BREADCRUMB_PATTERN.search(css) or BREADCRUMB_PATTERN.search(label):
        return ListPurpose.BREADCRUMB
    if role in ('menu', 'menubar') or NAVIGATION_CLASS_PATTERN.search(css):
        return ListPurpose.NAVIGATION
    if STEPS_CLASS_PATTERN.search(css):
        return ListPurpose.STEPS
    if SOCIAL_CLASS_PATTERN.search(css):
        return ListPurpose.SOCIAL
    if TAGS_CLASS_PATTERN.search(css):
        return ListPurpose.TAGS
    return ListPurpose.GENERAL


def _enclosing_nav(text: str, offset: int) -> Optional[ElementRef]:
    for nav in iter_tags(text, ['nav'], end=offset):
        if nav.element_end(text) > offset:
            return nav
    return None


def _in_outer_navigation(context: DocumentContext, tag: ElementRef) -> bool:
    """True if a navigation span opened by something other than the list itself covers it."""
    return any(nav.start <= tag.start <= nav.end and nav.start != tag.start
               for nav in context.navigation_spans)


def _item_inner(text: str, item: ElementRef, end: int) -> str:
    return LI_END_PATTERN.sub('', text[item.end:end])


def _item_texts(text: str, structure: ListStructure) -> List[str]:
    return [extract_text_content(_item_inner(text, item, end)) for item, end in structure.items]


# =============================================================================
# Checks
# =============================================================================

def _check_structure(text: str, structure: ListStructure) -> List[Diagnostic]:
    diagnostics = []
    tag = structure.tag
    list_type = tag.tag

    if not structure.items and not structure.has_control_flow:
        diagnostics.append(diagnostic(
            text, tag.start, tag.end,
            f"List <{list_type}> has no <li> elements",
            Severity.ERROR, 'list-no-items',
        ))

    for child, _ in structure.children:
        if child.tag == 'li' or child.tag in NON_RENDERED_CHILDREN:
            continue
        if child.tag in LIST_TAGS:
            message = "Put nested lists inside a list item (<li>)"
        else:
            message = (f"<{list_type}> should only contain <li> elements or control flow "
                       f"tags as direct children, found: <{child.name}>")
        diagnostics.append(diagnostic(
            text, child.start, child.end, message,
            Severity.WARNING, 'list-invalid-child', WrapInTag('li'),
        ))

    for start, end in structure.text_segments:
        segment = extract_text_content(text[start:end])
        if segment and not DYNAMIC_CONTENT_PATTERN.fullmatch(segment):
            diagnostics.append(diagnostic(
                text, start, end,
                f"<{list_type}> contains direct text content. Text must be wrapped in <li> elements",
                Severity.WARNING, 'list-direct-text', WrapInTag('li'),
            ))

    for item, end in structure.items:
        inner = _item_inner(text, item, end)
        content = extract_text_content(inner)
        css = item.get('class') or ''
        if DIVIDER_CLASS_PATTERN.search(css) or DIVIDER_TEXT_PATTERN.match(content):
            diagnostics.append(diagnostic(
                text, item.start, item.end,
                "Don't use list items as visual dividers; use CSS instead",
                Severity.WARNING, 'list-item-divider',
            ))
        elif not content and '<' not in BREAK_PATTERN.sub('', inner) \
                and not DYNAMIC_CONTENT_PATTERN.search(inner):
            diagnostics.append(diagnostic(
                text, item.start, item.end,
                "Remove empty list items; each <li> should have content",
                Severity.WARNING, 'list-item-empty',
            ))

    if len(structure.items) == 1 and not structure.has_control_flow:
        diagnostics.append(diagnostic(
            text, tag.start, tag.end,
            "List with only one item. Consider if a list is appropriate here",
            Severity.INFO, 'list-single-item',
        ))

    return diagnostics


def _check_description_list(text: str, structure: ListStructure) -> List[Diagnostic]:
    diagnostics = []
    tag = structure.tag
    terms = 0
    descriptions = 0

    # <div> wrappers group a dt/dd pair
    entries = []
    for child, end in structure.children:
        if child.tag == 'div':
            entries.extend(scan_children(text, child).children)
        else:
            entries.append((child, end))

    for child, _ in entries:
        if child.tag == 'dt':
            terms += 1
        elif child.tag == 'dd':
            descriptions += 1
            if terms == 0:
                diagnostics.append(diagnostic(
                    text, child.start, child.end,
                    "<dd> element without preceding <dt> element",
                    Severity.ERROR, 'list-dl-structure',
                ))
        elif child.tag not in NON_RENDERED_CHILDREN:
            diagnostics.append(diagnostic(
                text, child.start, child.end,
                f"<dl> should only contain <dt>, <dd> or <div> groups, found: <{child.name}>",
                Severity.WARNING, 'list-invalid-child',
            ))

    if (terms == 0 or descriptions == 0) and not structure.has_control_flow:
        diagnostics.append(diagnostic(
            text, tag.start, tag.end,
            "Description list <dl> must contain both <dt> and <dd> elements",
            Severity.ERROR, 'list-dl-structure',
        ))
    return diagnostics


def _check_purpose(text: str, structure: ListStructure, context: DocumentContext) -> List[Diagnostic]:
    diagnostics = []
    tag = structure.tag
    purpose = classify_list(tag)
    items = _item_texts(text, structure)
    nav = _enclosing_nav(text, tag.start)

    if purpose == ListPurpose.NAVIGATION and nav is None and not _in_outer_navigation(context, tag):
        diagnostics.append(diagnostic(
            text, tag.start, tag.end,
            "Wrap navigation lists in <nav> (or add role='navigation')",
            Severity.INFO, 'list-navigation', WrapInTag('nav'),
        ))

    if purpose == ListPurpose.BREADCRUMB:
        labeled = any(element is not None and (element.get('aria-label') or element.get('aria-labelledby'))
                      for element in (tag, nav))
        if not labeled:
            diagnostics.append(diagnostic(
                text, tag.start, tag.end,
                "Add a short label to the breadcrumb (e.g., aria-label='Breadcrumb')",
                Severity.WARNING, 'list-breadcrumb-label',
            ))
        if tag.tag == 'ul':
            diagnostics.append(diagnostic(
                text, tag.start, tag.end,
                "Breadcrumb navigation should use <ol> to indicate hierarchical sequence",
                Severity.INFO, 'list-type', ChangeTagName('ol'),
            ))

    if tag.tag == 'ul' and len(items) >= MIN_ITEMS_FOR_CONTENT_ANALYSIS:
        sequential = sum(1 for item in items if SEQUENTIAL_ITEM_PATTERN.search(item))
        steps = sum(1 for item in items if STEP_ITEM_PATTERN.search(item))
        if purpose == ListPurpose.STEPS or max(sequential, steps) >= len(items) * SEQUENTIAL_RATIO:
            diagnostics.append(diagnostic(
                text, tag.start, tag.end,
                "Consider using <ol> instead of <ul> for sequential or step-by-step content",
                Severity.INFO, 'list-type', ChangeTagName('ol'),
            ))

    if tag.tag == 'ol' and purpose in (ListPurpose.TAGS, ListPurpose.SOCIAL):
        diagnostics.append(diagnostic(
            text, tag.start, tag.end,
            f"Consider using <ul> instead of <ol> for {purpose.value} links that don't have inherent order",
            Severity.INFO, 'list-type', ChangeTagName('ul'),
        ))

    if purpose == ListPurpose.SOCIAL and not tag.get('aria-label') and not tag.get('aria-labelledby'):
        diagnostics.append(diagnostic(
            text, tag.start, tag.end,
            "Add aria-label to the social links list so its purpose is announced",
            Severity.INFO, 'list-navigation',
        ))

    if len(items) > MAX_LIST_ITEMS:
        diagnostics.append(diagnostic(
            text, tag.start, tag.end,
            f"Long list with {len(items)} items. Consider grouping into sublists or using pagination",
            Severity.INFO, 'list-length',
        ))
    if len(items) >= MIN_ITEMS_FOR_CONTENT_ANALYSIS:
        low = sum(1 for item in items if len(item) < LOW_CONTENT_LENGTH)
        if low > len(items) * LOW_CONTENT_RATIO:
            diagnostics.append(diagnostic(
                text, tag.start, tag.end,
                f"List has many items ({low}/{len(items)}) with minimal content. "
                f"Consider if list structure is appropriate",
                Severity.INFO, 'list-low-content',
            ))

    return diagnostics


def analyze(text: str, context: DocumentContext, options: AnalysisOptions) -> List[Diagnostic]:
    """
    Check the structure and semantics of every list in the file.

    Args:
        text: Full file text
        context: Shared document context (navigation spans)
        options: Analysis options

    Returns:
        List diagnostics
    """
    diagnostics: List[Diagnostic] = []
    list_count = 0

    for tag in iter_tags(text, ['ul', 'ol', 'dl', 'div']):
        if tag.tag == 'div':
            if (tag.get('role') or '').strip().lower() == 'list':
                diagnostics.append(diagnostic(
                    text, tag.start, tag.end,
                    "Consider using semantic <ul> or <ol> instead of div with role='list'",
                    Severity.INFO, 'list-div-role', ChangeTagName('ul'),
                ))
            continue

        list_count += 1
        structure = scan_children(text, tag)
        if tag.tag == 'dl':
            diagnostics.extend(_check_description_list(text, structure))
        else:
            diagnostics.extend(_check_structure(text, structure))
            diagnostics.extend(_check_purpose(text, structure, context))

    logger.debug(f"Analyzed {list_count} lists")
    return diagnostics
