"""
Link Text Analyzer

Checks that every link (<a> and template link helpers such as
<f:link.page> or <f:link.action>) has text that describes its destination.

Features:
- Empty and icon-only links without an accessible name
- Non-descriptive phrases ("click here"), with contextual phrases ("read more")
  accepted when a nearby heading, list item or sentence names the topic
- Single-character, URL-shaped, over-long and whitespace-only link text
- Identical link text pointing to different destinations
- Runs of links that should be grouped in a list or <nav>
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..config import AnalysisOptions
from ..diagnostics import AddAttribute, Diagnostic, Severity, WrapInTag, diagnostic
from ..document_context import DocumentContext
from ..rules import RuleGroup
from ..tag_utils import (
    ElementRef,
    extract_text_content,
    is_empty_or_whitespace,
    is_url_like_text,
    iter_tags,
)

logger = logging.getLogger(__name__)

RULE_GROUP = RuleGroup(
    group_id='link-text',
    display_name='Link text',
    rule_ids=(
        'link-text-empty',
        'link-text-icon-title',
        'link-text-label-generic',
        'link-text-non-descriptive',
        'link-text-single-character',
        'link-text-url',
        'link-text-too-long',
        'link-text-whitespace',
        'link-text-duplicate',
        'link-text-cluster',
    ),
)

NON_DESCRIPTIVE_PHRASES = frozenset({
    'click here', 'here', 'read more', 'learn more', 'more', 'click',
    'download', 'link', 'this link', 'this page', 'more info', 'info',
    'details', 'view', 'see more', 'view more', 'continue', 'continue reading',
    'find out more', 'go', 'start', 'submit', 'follow this link',
    'click this link', 'visit', 'check out', 'click to', 'go to', 'tap here',
    'press here', 'follow', 'open', 'view details', 'more details',
    'further information', 'additional information', 'click for more',
    'find out', 'discover', 'explore',
})

# Phrases that are acceptable when the surrounding content names the topic
CONTEXTUAL_PHRASES = frozenset({
    'read more', 'learn more', 'see more', 'view more', 'details',
    'more info', 'continue reading', 'find out more',
})

TOPIC_KEYWORDS = (
    'article', 'blog', 'story', 'about', 'guide', 'tutorial', 'news',
    'project', 'product', 'service', 'company', 'research', 'study',
    'report', 'analysis', 'review', 'feature', 'update', 'release',
    'event', 'conference', 'workshop', 'course', 'training',
)

# Attributes of link helpers that identify the destination
DESTINATION_ATTRIBUTES = ('href', 'pageuid', 'uri', 'action', 'controller', 'extensionname', 'parameters')

ICON_PATTERN = re.compile(
    r'<(?:i|span)\s+[^>]*class\s*=\s*["\'][^"\']*'
    r'(?:icon|fa-|fas|far|fab|glyphicon|material-icons|bi-|ion-)[^"\']*["\'][^>]*>'
    r'|<img\s+[^>]*(?:class|src)\s*=\s*["\'][^"\']*icon[^"\']*["\'][^>]*>'
    r'|<svg\b'
    r'|<core:icon\b',
    re.IGNORECASE
)
IMAGE_ALT_PATTERN = re.compile(r'<img\b[^>]*\balt\s*=\s*["\']([^"\']*)["\']', re.IGNORECASE)
HEADING_PATTERN = re.compile(r'<h[1-6]\b[^>]*>(.*?)</h[1-6]\s*>', re.IGNORECASE | re.DOTALL)
SENTENCE_SPLIT_PATTERN = re.compile(r'[.!?]')
SINGLE_CHARACTER_PATTERN = re.compile(r'^(?:[a-zA-Z]|\d+)$')
DYNAMIC_CONTENT_PATTERN = re.compile(r'<[\w.-]+:[\w.-]+|\{[^}]*\}')

MAX_LINK_TEXT_LENGTH = 100
CONTEXT_WINDOW = 200
HEADING_DISTANCE = 500
MIN_CONTEXT_LENGTH = 10
CLUSTER_DISTANCE = 500
CLUSTER_GAP_TEXT = 20


@dataclass
class Link:
    """A link element with the facts the checks need"""
    tag: ElementRef
    end: int
    inner: str
    text: str
    href: Optional[str]
    aria_label: Optional[str]
    title: Optional[str]
    has_icon: bool

    @property
    def start(self) -> int:
        return self.tag.start

    @property
    def has_label(self) -> bool:
        return not is_empty_or_whitespace(self.aria_label) or bool(self.tag.get('aria-labelledby'))


def is_link_tag(tag: ElementRef) -> bool:
    """<a> or a template link helper (f:link, f:link.page, vhs:link.typolink ...)."""
    if tag.tag == 'a':
        return True
    if ':' not in tag.tag:
        return False
    local_name = tag.tag.split(':', 1)[1]
    return local_name == 'link' or local_name.startswith('link.')


def _destination(tag: ElementRef) -> str:
    parts = []
    for attr in DESTINATION_ATTRIBUTES:
        value = tag.get(attr)
        if value is not None:
            parts.append(f'{attr}={value.strip()}')
    return '&'.join(parts)


def collect_links(text: str) -> List[Link]:
    links = []
    for tag in iter_tags(text):
        if not is_link_tag(tag) or tag.self_closing:
            continue
        inner = tag.inner_html(text)
        content = extract_text_content(inner)
        if not content:
            # Images inside the link name it through their alt text
            alts = [alt.strip() for alt in IMAGE_ALT_PATTERN.findall(inner) if alt.strip()]
            content = ' '.join(alts)
        links.append(Link(
            tag=tag,
            end=tag.element_end(text),
            inner=inner,
            text=content,
            href=_destination(tag),
            aria_label=tag.get('aria-label'),
            title=tag.get('title'),
            has_icon=ICON_PATTERN.search(inner) is not None,
        ))
    return links


# =============================================================================
# Context Extraction
# =============================================================================

def _heading_context(text: str, offset: int) -> Optional[str]:
    """Text of the closest heading ending within HEADING_DISTANCE before offset."""
    last = None
    for match in HEADING_PATTERN.finditer(text, max(0, offset - HEADING_DISTANCE * 4), offset):
        last = match
    if last is None or offset - last.end() >= HEADING_DISTANCE:
        return None
    return extract_text_content(last.group(1))


def _list_item_context(text: str, offset: int) -> Optional[str]:
    """Text of the enclosing list item that precedes the link."""
    li_start = text.rfind('<li', 0, offset)
    li_end = text.find('</li>', offset)
    if li_start == -1 or li_end == -1:
        return None
    if text.rfind('</li>', li_start, offset) != -1:
        return None
    return extract_text_content(text[li_start:offset]) or None


def extract_context(text: str, offset: int) -> str:
    """
    The content that explains a link: the nearest preceding heading, else the
    enclosing list item, else the last sentence of the preceding text.
    """
    heading = _heading_context(text, offset)
    if heading:
        return heading
    list_item = _list_item_context(text, offset)
    if list_item:
        return list_item
    preceding = extract_text_content(text[max(0, offset - CONTEXT_WINDOW):offset])
    sentences = [s.strip() for s in SENTENCE_SPLIT_PATTERN.split(preceding) if s.strip()]
    return sentences[-1] if sentences else ''


def has_descriptive_context(context: str) -> bool:
    if len(context.strip()) < MIN_CONTEXT_LENGTH:
        return False
    lowered = context.lower()
    return any(keyword in lowered for keyword in TOPIC_KEYWORDS)


# =============================================================================
# Checks
# =============================================================================

def _check_link(text: str, link: Link) -> List[Diagnostic]:
    diagnostics = []
    start, end = link.start, link.end

    if not link.text:
        if DYNAMIC_CONTENT_PATTERN.search(link.inner):
            return diagnostics
        if link.has_label:
            label = (link.aria_label or '').strip()
            if label.lower() in NON_DESCRIPTIVE_PHRASES:
                diagnostics.append(diagnostic(
                    text, start, end,
                    f"aria-label '{label}' is not descriptive",
                    Severity.WARNING, 'link-text-label-generic',
                ))
        elif link.has_icon and not is_empty_or_whitespace(link.title):
            diagnostics.append(diagnostic(
                text, start, end,
                "Icon-only link should use aria-label instead of title for better accessibility",
                Severity.WARNING, 'link-text-icon-title', AddAttribute('aria-label', link.title.strip()),
            ))
        elif link.has_icon:
            diagnostics.append(diagnostic(
                text, start, end,
                "Icon-only link must have aria-label or meaningful text to be accessible",
                Severity.ERROR, 'link-text-empty', AddAttribute('aria-label', ''),
            ))
        elif link.inner and '<' not in link.inner and is_empty_or_whitespace(link.inner.replace('&nbsp;', ' ')):
            diagnostics.append(diagnostic(
                text, start, end,
                "Link contains only whitespace characters and no meaningful text",
                Severity.ERROR, 'link-text-whitespace', AddAttribute('aria-label', ''),
            ))
        else:
            diagnostics.append(diagnostic(
                text, start, end,
                "Link has no text content and no accessible label",
                Severity.ERROR, 'link-text-empty', AddAttribute('aria-label', ''),
            ))
        return diagnostics

    lowered = link.text.lower()
    label = (link.aria_label or '').strip()
    labeled_descriptively = bool(label) and label.lower() not in NON_DESCRIPTIVE_PHRASES

    if lowered in NON_DESCRIPTIVE_PHRASES and not labeled_descriptively:
        if lowered in CONTEXTUAL_PHRASES:
            if not has_descriptive_context(extract_context(text, start)):
                diagnostics.append(diagnostic(
                    text, start, end,
                    f"Link text '{link.text}' needs context. Either improve the link text "
                    f"or ensure preceding text describes the destination",
                    Severity.ERROR, 'link-text-non-descriptive',
                ))
        else:
            diagnostics.append(diagnostic(
                text, start, end,
                f"Link text '{link.text}' is not descriptive. "
                f"Use words that describe the destination or action",
                Severity.ERROR, 'link-text-non-descriptive',
            ))

    if SINGLE_CHARACTER_PATTERN.match(link.text) and not labeled_descriptively:
        diagnostics.append(diagnostic(
            text, start, end,
            f"Single character '{link.text}' as link text is not descriptive. "
            f"Add aria-label or use descriptive text",
            Severity.WARNING, 'link-text-single-character',
        ))

    if is_url_like_text(link.text):
        diagnostics.append(diagnostic(
            text, start, end,
            "URL as link text is not user-friendly. Use descriptive text that explains the link's purpose",
            Severity.WARNING, 'link-text-url',
        ))

    if len(link.text) > MAX_LINK_TEXT_LENGTH:
        diagnostics.append(diagnostic(
            text, start, end,
            f"Link text is too long ({len(link.text)} characters). "
            f"Consider making it more concise (under {MAX_LINK_TEXT_LENGTH} characters)",
            Severity.WARNING, 'link-text-too-long',
        ))

    return diagnostics


def _check_duplicates(text: str, links: List[Link]) -> List[Diagnostic]:
    diagnostics = []
    by_text: Dict[str, List[Link]] = {}
    for link in links:
        if link.text and not link.has_label:
            by_text.setdefault(link.text.lower(), []).append(link)

    for link_text, group in by_text.items():
        destinations = {link.href for link in group}
        if len(group) < 2 or len(destinations) < 2:
            continue
        for link in group:
            diagnostics.append(diagnostic(
                text, link.start, link.end,
                f"Multiple links with text '{link_text}' point to different destinations. "
                f"Make link text more specific",
                Severity.ERROR, 'link-text-duplicate',
            ))
    return diagnostics


def _check_clusters(text: str, links: List[Link], context: DocumentContext) -> List[Diagnostic]:
    """Three or more links separated by little text, outside lists and navigation."""
    diagnostics = []
    nav_spans = [(nav.start, nav.element_end(text)) for nav in iter_tags(text, ['nav'])]

    def is_tight(previous: Link, following: Link) -> bool:
        between = text[previous.end:following.start]
        if '<li' in between.lower():
            return False
        return len(extract_text_content(between)) < CLUSTER_GAP_TEXT

    def in_navigation(offset: int) -> bool:
        if context.is_in_navigation_context(offset):
            return True
        return any(start < offset < end for start, end in nav_spans)

    index = 0
    while index < len(links) - 2:
        first = links[index]
        if (in_navigation(first.start)
                or links[index + 2].start - first.end >= CLUSTER_DISTANCE
                or not is_tight(first, links[index + 1])):
            index += 1
            continue

        last = index + 1
        while (last + 1 < len(links) and is_tight(links[last], links[last + 1])
               and links[last + 1].start - first.end < CLUSTER_DISTANCE):
            last += 1
        if last - index + 1 >= 3:
            diagnostics.append(diagnostic(
                text, first.start, links[last].end,
                "Multiple links clustered together. Consider grouping related links "
                "in a list or navigation element for better accessibility",
                Severity.WEAK_WARNING, 'link-text-cluster', WrapInTag('ul'),
            ))
        index = last + 1
    return diagnostics


def analyze(text: str, context: DocumentContext, options: AnalysisOptions) -> List[Diagnostic]:
    """
    Check link text of every link in the file.

    Args:
        text: Full file text
        context: Shared document context (navigation spans)
        options: Analysis options

    Returns:
        Link diagnostics
    """
    links = collect_links(text)
    if not links:
        return []

    logger.debug(f"Collected {len(links)} links")
    diagnostics = []
    for link in links:
        diagnostics.extend(_check_link(text, link))
    diagnostics.extend(_check_duplicates(text, links))
    diagnostics.extend(_check_clusters(text, links, context))
    return diagnostics
