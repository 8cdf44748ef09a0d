"""
Text and Tag Utilities

Regex-based helpers for reading markup that is "almost HTML": plain HTML
interleaved with template-engine tags such as <f:if>, <f:for> or
<f:link.page>. Every helper is total. Malformed input degrades to a
conservative answer (None, False, or the end of the text) instead of raising,
so one broken region never aborts analysis of the rest of a file.

All tag and offset scanning used by the analyzers goes through this module.

Usage:
    from template_a11y.tag_utils import get_attribute_value, find_element_end

    title = get_attribute_value('<a href="/x" title="Home">', 'title')
    end = find_element_end(text, start)
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple

from bs4 import BeautifulSoup, Comment

logger = logging.getLogger(__name__)


# =============================================================================
# Constant Tables
# =============================================================================

# Elements that never have a closing tag
VOID_ELEMENTS = frozenset({
    'area', 'base', 'br', 'col', 'embed', 'hr', 'img', 'input', 'link',
    'meta', 'param', 'source', 'track', 'wbr',
})

# Template control-flow pseudo elements (lowercased); they carry no semantics
CONTROL_FLOW_TAGS = frozenset({
    'f:for', 'f:if', 'f:else', 'f:then', 'f:switch', 'f:case',
    'f:defaultcase', 'f:groupedfor', 'f:cycle', 'f:variable', 'f:alias',
    'f:comment', 'f:spaceless', 'f:cobject', 'f:debug', 'f:render',
    'f:section', 'f:layout',
})

GENERIC_TEXTS = frozenset({
    'click here', 'read more', 'more', 'link', 'button', 'image', 'icon',
    'untitled', 'title', 'heading', 'page', 'document', 'here', 'this',
    'more info', 'more information', 'learn more', 'see more', 'view more',
    'details', 'info', 'information',
})

INPUT_TYPE_DESCRIPTIONS = {
    'text': 'text field',
    'email': 'email field',
    'password': 'password field',
    'tel': 'telephone field',
    'url': 'URL field',
    'search': 'search field',
    'number': 'number field',
    'date': 'date field',
    'time': 'time field',
    'datetime-local': 'date and time field',
    'month': 'month field',
    'week': 'week field',
    'color': 'color picker',
    'file': 'file upload',
    'range': 'range slider',
    'checkbox': 'checkbox',
    'radio': 'radio button',
}

# Opening tag, closing tag or comment. Quoted attribute values may contain '>'.
TAG_PATTERN = re.compile(
    r'<!--.*?-->'
    r'|<(/?)([a-zA-Z][\w:.-]*)((?:[^>"\']|"[^"]*"|\'[^\']*\')*)>',
    re.DOTALL
)

TAG_NAME_PATTERN = re.compile(r'[a-zA-Z][\w:.-]*')

ATTRIBUTE_PATTERN = re.compile(
    r'([^\s"\'=<>/{}]+)(?:\s*=\s*(?:"([^"]*)"|\'([^\']*)\'|([^\s"\'>]+)))?'
)

LANGUAGE_TAG_PATTERN = re.compile(
    r'^[a-zA-Z]{2,3}'
    r'(?:-[a-zA-Z]{4})?'
    r'(?:-(?:[a-zA-Z]{2}|\d{3}))?'
    r'(?:-(?:[a-zA-Z0-9]{5,8}|\d[a-zA-Z0-9]{3}))*'
    r'(?:-x(?:-[a-zA-Z0-9]{1,8})+)?$'
)

URL_TEXT_PATTERN = re.compile(
    r'^(?:(?:https?|ftp)://|www\.)\S+$'
    r'|^[a-z0-9-]+(?:\.[a-z0-9-]+)*\.(?:com|org|net|edu|gov|io|de|at|ch|uk|eu|info|biz|co)(?:/\S*)?$',
    re.IGNORECASE
)

WHITESPACE_PATTERN = re.compile(r'\s+')


# =============================================================================
# Element References
# =============================================================================

@dataclass(frozen=True)
class ElementRef:
    """A located tag occurrence, derived on demand from the raw text."""
    name: str
    start: int
    end: int
    raw: str
    self_closing: bool = False
    closing: bool = False

    @property
    def tag(self) -> str:
        """Lowercased tag name."""
        return self.name.lower()

    @property
    def attributes(self) -> str:
        """Raw attribute string of the tag."""
        return _attribute_part(self.raw)

    def get(self, attr_name: str) -> Optional[str]:
        return get_attribute_value(self.raw, attr_name)

    def has(self, attr_name: str) -> bool:
        return has_attribute(self.raw, attr_name)

    def element_end(self, text: str) -> int:
        """Offset just past the element's closing tag (or its own tag when void)."""
        if self.self_closing or self.closing or self.tag in VOID_ELEMENTS:
            return self.end
        return find_element_end(text, self.start)

    def inner_span(self, text: str) -> Tuple[int, int]:
        """Span of the element's inner content; empty for void/self-closing tags."""
        if self.self_closing or self.closing or self.tag in VOID_ELEMENTS:
            return self.end, self.end
        close_end = self.element_end(text)
        close_start = text.rfind('</', self.end, close_end)
        if close_start == -1 or not text[close_start + 2:close_end].lower().startswith(self.tag):
            return self.end, close_end
        return self.end, close_start

    def inner_html(self, text: str) -> str:
        start, end = self.inner_span(text)
        return text[start:end]


def iter_tags(text: str, names: Optional[Iterable[str]] = None,
              include_closing: bool = False, start: int = 0,
              end: Optional[int] = None) -> Iterator[ElementRef]:
    """
    Iterate over tags in document order.

    Args:
        text: Markup to scan
        names: Optional tag names to keep (case-insensitive)
        include_closing: Also yield closing tags
        start: Offset to start scanning at
        end: Offset to stop scanning at (default: end of text)

    Yields:
        ElementRef for each matching tag; comments are skipped
    """
    wanted = {n.lower() for n in names} if names else None
    stop = len(text) if end is None else end
    for match in TAG_PATTERN.finditer(text, start, stop):
        name = match.group(2)
        if name is None:
            continue
        is_closing = bool(match.group(1))
        if is_closing and not include_closing:
            continue
        if wanted is not None and name.lower() not in wanted:
            continue
        yield ElementRef(
            name=name,
            start=match.start(),
            end=match.end(),
            raw=match.group(0),
            self_closing=_is_self_closing(match.group(3)),
            closing=is_closing,
        )


def tag_at(text: str, offset: int) -> Optional[ElementRef]:
    """Return the tag starting exactly at offset, or None."""
    if offset < 0 or offset >= len(text):
        return None
    match = TAG_PATTERN.match(text, offset)
    if not match or match.group(2) is None:
        return None
    return ElementRef(
        name=match.group(2),
        start=match.start(),
        end=match.end(),
        raw=match.group(0),
        self_closing=_is_self_closing(match.group(3)),
        closing=bool(match.group(1)),
    )


# =============================================================================
# Tag Text Helpers
# =============================================================================

def extract_tag_name(raw_tag: str) -> Optional[str]:
    """
    Extract the tag name from raw tag text such as '<a href="#">' or '</div>'.

    Returns:
        The tag name as written, or None for malformed input
    """
    if not raw_tag:
        return None
    body = raw_tag.strip()
    if body.startswith('<'):
        body = body[1:]
    if body.endswith('>'):
        body = body[:-1]
    body = body.lstrip('/')
    tokens = body.split()
    if not tokens:
        return None
    name = tokens[0].rstrip('/')
    if not TAG_NAME_PATTERN.fullmatch(name):
        return None
    return name


def parse_attributes(raw_tag: str) -> List[Tuple[str, Optional[str]]]:
    """
    Tokenize a tag's attributes in source order.

    Returns:
        List of (lowercased name, value) pairs; value is None for bare
        attributes and for unquoted values
    """
    pairs = []
    for match in ATTRIBUTE_PATTERN.finditer(_attribute_part(raw_tag or '')):
        name = match.group(1).lower()
        if match.group(2) is not None:
            value = match.group(2)
        elif match.group(3) is not None:
            value = match.group(3)
        else:
            value = None
        pairs.append((name, value))
    return pairs


def get_attribute_value(raw_tag: str, attr_name: str) -> Optional[str]:
    """
    Look up a quoted attribute value, case-insensitively.

    Unquoted values are not supported and yield None.

    Args:
        raw_tag: Raw tag text or attribute string
        attr_name: Attribute to look up

    Returns:
        The first matching attribute's value, or None
    """
    wanted = attr_name.lower()
    for name, value in parse_attributes(raw_tag):
        if name == wanted and value is not None:
            return value
    return None


def has_attribute(raw_tag: str, attr_name: str) -> bool:
    """True if the attribute is present (with or without a value)."""
    wanted = attr_name.lower()
    return any(name == wanted for name, _ in parse_attributes(raw_tag))


def has_unquoted_value(raw_tag: str, attr_name: str) -> bool:
    """True if the attribute carries an unquoted value (aria-label=Close)."""
    wanted = attr_name.lower()
    for match in ATTRIBUTE_PATTERN.finditer(_attribute_part(raw_tag or '')):
        if match.group(1).lower() == wanted and match.group(4) is not None:
            return True
    return False


def aria_attribute_names(raw_tag: str) -> List[str]:
    """All aria-* attribute names of a tag, lowercased, in source order."""
    return [name for name, _ in parse_attributes(raw_tag) if name.startswith('aria-')]


def find_element_start(text: str, position: int) -> int:
    """Walk back from position to the nearest '<'; 0 if there is none."""
    if position <= 0 or not text:
        return 0
    position = min(position, len(text) - 1)
    found = text.rfind('<', 0, position + 1)
    return found if found != -1 else 0


def find_element_end(text: str, start: int) -> int:
    """
    Find the end of the element whose opening tag starts at start.

    Nested elements with the same name are counted so the matching closing
    tag is found; self-closing and void tags end at their own '>'. Quoted
    attribute values may contain '<' or '>' without confusing the scan.

    Args:
        text: Full markup text
        start: Offset of the opening '<'

    Returns:
        Offset just past the matching closing tag's '>', or len(text) when
        the element is never closed or start is not a tag
    """
    length = len(text)
    if start < 0 or start >= length or text[start] != '<':
        return length
    opening = TAG_PATTERN.match(text, start)
    if opening is None:
        return length
    if opening.group(2) is None or opening.group(1):
        return opening.end()

    name = opening.group(2).lower()
    if _is_self_closing(opening.group(3)) or name in VOID_ELEMENTS:
        return opening.end()

    depth = 1
    for match in TAG_PATTERN.finditer(text, opening.end()):
        other = match.group(2)
        if other is None or other.lower() != name:
            continue
        if match.group(1):
            depth -= 1
            if depth == 0:
                return match.end()
        elif not _is_self_closing(match.group(3)):
            depth += 1
    return length


def strip_tags(html: str) -> str:
    """Remove every <...> span and collapse whitespace."""
    if not html:
        return ''
    without_tags = re.sub(r'<[^>]*>', ' ', html)
    return WHITESPACE_PATTERN.sub(' ', without_tags).strip()


def extract_text_content(html: str) -> str:
    """
    Extract the human-readable text of a markup fragment.

    Scripts, styles, comments and <f:comment> blocks are dropped, entities
    are decoded and whitespace is collapsed.
    """
    if not html:
        return ''
    try:
        soup = BeautifulSoup(html, 'html.parser')
        for tag in soup.find_all(['script', 'style', 'f:comment']):
            tag.decompose()
        for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
            comment.extract()
        text = soup.get_text(' ')
    except Exception as e:
        logger.debug(f"Lenient parse failed, falling back to tag stripping: {e}")
        return strip_tags(html)
    return WHITESPACE_PATTERN.sub(' ', text).strip()


def collapse_whitespace(text: str) -> str:
    return WHITESPACE_PATTERN.sub(' ', text or '').strip()


# =============================================================================
# Predicates
# =============================================================================

def is_empty_or_whitespace(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def is_generic_placeholder_text(text: Optional[str]) -> bool:
    """True for placeholder phrases like 'click here', 'title' or 'more'."""
    if not text:
        return False
    return text.strip().lower() in GENERIC_TEXTS


def is_valid_bcp47_language_code(code: Optional[str]) -> bool:
    """True if code has the shape of a BCP 47 tag ('en', 'en-US', 'zh-Hant-TW')."""
    if not code:
        return False
    return LANGUAGE_TAG_PATTERN.match(code) is not None


def is_template_expression(value: Optional[str]) -> bool:
    """True if the value is computed by the template engine ('{data.lang}')."""
    return bool(value) and '{' in value


def is_url_like_text(text: Optional[str]) -> bool:
    if not text:
        return False
    return URL_TEXT_PATTERN.match(text.strip()) is not None


def is_control_flow_tag(name: Optional[str]) -> bool:
    return bool(name) and name.lower() in CONTROL_FLOW_TAGS


def is_template_tag(name: Optional[str]) -> bool:
    """Namespaced template-engine tag such as 'f:link.page' or 'core:icon'."""
    return bool(name) and ':' in name


def input_type_description(input_type: Optional[str]) -> str:
    if not input_type:
        return 'text field'
    return INPUT_TYPE_DESCRIPTIONS.get(input_type.lower(), f'{input_type.lower()} input')


# =============================================================================
# Position Helpers
# =============================================================================

def offset_to_line_column(text: str, offset: int) -> Tuple[int, int]:
    """Convert an offset into a 1-based (line, column) pair."""
    offset = max(0, min(offset, len(text)))
    line = text.count('\n', 0, offset) + 1
    column = offset - (text.rfind('\n', 0, offset) + 1) + 1
    return line, column


def _attribute_part(raw_tag: str) -> str:
    """Drop the leading '<name' (and trailing '>') so the tag name is never an attribute."""
    match = re.match(r'\s*</?([^\s/>]*)', raw_tag)
    if match and raw_tag.lstrip().startswith('<'):
        body = raw_tag[match.end():]
    else:
        body = raw_tag
    if body.endswith('>'):
        body = body[:-1]
    return body


def _is_self_closing(attributes: Optional[str]) -> bool:
    return bool(attributes) and attributes.rstrip().endswith('/')
