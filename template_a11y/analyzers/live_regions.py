"""
Live Region Analyzer

Checks markup whose updates are announced by screen readers: aria-live,
role="alert" / "status" / "log" and the related aria-atomic, aria-relevant
and aria-busy attributes.

Features:
- Attribute value validation (aria-live, aria-atomic, aria-busy, aria-relevant)
- aria-live duplicating the politeness a role already implies
- Status-styled elements (class="alert", "success", ...) without a live region
- Politeness heuristics: assertive without an urgent context, polite for form errors
- Competing assertive regions, nested regions, too many regions
- Empty regions, aria-busy reminders, <f:flashMessages> without a status wrapper
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from ..config import AnalysisOptions
from ..diagnostics import AddAttribute, Diagnostic, RemoveAttribute, Severity, WrapInTag, diagnostic
from ..document_context import DocumentContext
from ..rules import RuleGroup
from ..tag_utils import (
    ElementRef,
    extract_text_content,
    is_template_expression,
    iter_tags,
    parse_attributes,
)

logger = logging.getLogger(__name__)

RULE_GROUP = RuleGroup(
    group_id='live-region',
    display_name='Live regions',
    rule_ids=(
        'live-region-invalid-value',
        'live-region-redundant',
        'live-region-missing',
        'live-region-priority',
        'live-region-competing',
        'live-region-nested',
        'live-region-duplicate-attribute',
        'live-region-busy',
        'live-region-empty',
        'live-region-count',
        'live-region-label',
        'live-region-flash-messages',
    ),
)

LIVE_REGION_ROLES = frozenset({'alert', 'alertdialog', 'log', 'marquee', 'status', 'timer'})
LIVE_VALUES = frozenset({'polite', 'assertive', 'off'})
BOOLEAN_VALUES = frozenset({'true', 'false'})
RELEVANT_TOKENS = frozenset({'additions', 'removals', 'text', 'all'})

# Live roles that read better with a name
LABELED_ROLES = frozenset({'log', 'status', 'timer'})

ERROR_CLASS_KEYWORDS = frozenset({'error', 'alert', 'danger'})
STATUS_CLASS_KEYWORDS = frozenset({'message', 'notification', 'status', 'success', 'info', 'warning'})

# Elements that are announced through their own semantics, never as status containers
STATUS_EXEMPT_TAGS = frozenset({
    'a', 'button', 'input', 'select', 'textarea', 'label', 'img', 'svg', 'i',
    'option', 'html', 'body', 'form', 'table', 'td', 'th', 'tr',
})

URGENT_KEYWORDS = (
    'error', 'failed', 'invalid', 'required', 'alert',
    'critical', 'urgent', 'emergency', 'immediate',
)
FORM_ERROR_KEYWORDS = ('error', 'failed', 'invalid', 'required')

CONTEXT_WINDOW = 200
FLASH_MESSAGE_WINDOW = 300
COMPETING_DISTANCE = 500
MAX_ASSERTIVE_REGIONS = 2
MAX_LIVE_REGIONS = 5

CLASS_SPLIT_PATTERN = re.compile(r'[\s_-]+')
FLASH_MESSAGES_PATTERN = re.compile(r'<f:flashMessages\b[^>]*>', re.IGNORECASE)
FLASH_WRAPPER_PATTERN = re.compile(
    r'role\s*=\s*["\'](?:status|alert)["\']|aria-live\s*=\s*["\'](?:polite|assertive)["\']',
    re.IGNORECASE
)


@dataclass
class LiveRegion:
    tag: ElementRef
    end: int
    role: str
    live: Optional[str]

    @property
    def start(self) -> int:
        return self.tag.start

    @property
    def politeness(self) -> str:
        """Explicit aria-live value, or the one the role implies."""
        if self.live:
            return self.live
        if self.role in ('alert', 'alertdialog'):
            return 'assertive'
        return 'polite'


def collect_live_regions(text: str) -> List[LiveRegion]:
    regions = []
    for tag in iter_tags(text):
        role = (tag.get('role') or '').strip().lower()
        live = tag.get('aria-live')
        if live is None and role not in LIVE_REGION_ROLES:
            continue
        regions.append(LiveRegion(
            tag=tag,
            end=tag.element_end(text),
            role=role,
            live=live.strip().lower() if live is not None else None,
        ))
    return regions


def _class_keywords(tag: ElementRef) -> set:
    value = tag.get('class') or ''
    return {part.lower() for part in CLASS_SPLIT_PATTERN.split(value) if part}


def _surrounding(text: str, offset: int, window: int) -> str:
    return text[max(0, offset - window):offset + window].lower()


# =============================================================================
# Checks
# =============================================================================

def _check_values(text: str) -> List[Diagnostic]:
    diagnostics = []
    for tag in iter_tags(text):
        live = tag.get('aria-live')
        if live is not None and not is_template_expression(live) and live.strip().lower() not in LIVE_VALUES:
            diagnostics.append(diagnostic(
                text, tag.start, tag.end,
                f"Invalid aria-live value '{live}'. Must be 'polite', 'assertive', or 'off'",
                Severity.ERROR, 'live-region-invalid-value', AddAttribute('aria-live', 'polite'),
            ))

        for attr in ('aria-atomic', 'aria-busy'):
            value = tag.get(attr)
            if value is not None and not is_template_expression(value) and value.strip().lower() not in BOOLEAN_VALUES:
                diagnostics.append(diagnostic(
                    text, tag.start, tag.end,
                    f"{attr} must be 'true' or 'false', not '{value}'",
                    Severity.ERROR, 'live-region-invalid-value', AddAttribute(attr, 'false'),
                ))

        relevant = tag.get('aria-relevant')
        if relevant is not None and not is_template_expression(relevant):
            tokens = set(relevant.lower().split())
            if not tokens or not tokens <= RELEVANT_TOKENS or ('all' in tokens and len(tokens) > 1):
                diagnostics.append(diagnostic(
                    text, tag.start, tag.end,
                    f"Invalid aria-relevant value '{relevant}'. "
                    f"Use 'additions', 'removals', 'text', 'all', or valid combinations",
                    Severity.ERROR, 'live-region-invalid-value', AddAttribute('aria-relevant', 'additions text'),
                ))

        if (tag.get('aria-busy') or '').strip().lower() == 'true':
            diagnostics.append(diagnostic(
                text, tag.start, tag.end,
                "Ensure aria-busy='true' is removed when loading completes",
                Severity.INFO, 'live-region-busy',
            ))
    return diagnostics


def _check_regions(text: str, regions: List[LiveRegion]) -> List[Diagnostic]:
    diagnostics = []
    for region in regions:
        tag = region.tag

        if (region.role == 'alert' and region.live == 'assertive') or \
                (region.role == 'status' and region.live == 'polite'):
            diagnostics.append(diagnostic(
                text, tag.start, tag.end,
                f"Redundant aria-live='{region.live}' with role='{region.role}' (already implicit)",
                Severity.WARNING, 'live-region-redundant', RemoveAttribute('aria-live'),
            ))

        live_attributes = [name for name, _ in parse_attributes(tag.raw) if name == 'aria-live']
        if len(live_attributes) > 1:
            diagnostics.append(diagnostic(
                text, tag.start, tag.end,
                "Element has multiple aria-live attributes",
                Severity.ERROR, 'live-region-duplicate-attribute',
            ))

        if any(region.start < other.start < region.end for other in regions):
            diagnostics.append(diagnostic(
                text, tag.start, tag.end,
                "Avoid nesting live regions - it can cause duplicate announcements",
                Severity.WARNING, 'live-region-nested',
            ))

        if region.role in LABELED_ROLES and not tag.get('aria-label') and not tag.get('aria-labelledby'):
            diagnostics.append(diagnostic(
                text, tag.start, tag.end,
                f"Consider adding aria-label to provide context for the {region.role} region",
                Severity.INFO, 'live-region-label',
            ))

        if region.live != 'off':
            inner = tag.inner_html(text)
            if (not extract_text_content(inner) and not tag.get('aria-label')
                    and '<f:' not in inner and '{' not in inner):
                diagnostics.append(diagnostic(
                    text, tag.start, tag.end,
                    "Empty live region detected - ensure it will be populated with meaningful content when updated",
                    Severity.INFO, 'live-region-empty',
                ))

        priority = _check_priority(text, region)
        if priority is not None:
            diagnostics.append(priority)

    return diagnostics


def _check_priority(text: str, region: LiveRegion) -> Optional[Diagnostic]:
    """Match the announced politeness against the surrounding content."""
    tag = region.tag
    if region.live is None:
        return None
    context = _surrounding(text, tag.start, CONTEXT_WINDOW)
    has_error = any(keyword in context for keyword in FORM_ERROR_KEYWORDS)
    is_validation = 'form' in context and ('submit' in context or 'validat' in context)

    if region.live == 'assertive':
        if is_validation or any(keyword in context for keyword in URGENT_KEYWORDS):
            return None
        return diagnostic(
            text, tag.start, tag.end,
            "aria-live='assertive' should be reserved for critical errors or urgent messages. "
            "Consider 'polite' for status updates",
            Severity.WARNING, 'live-region-priority', AddAttribute('aria-live', 'polite'),
        )

    if region.live == 'polite' and has_error and is_validation:
        return diagnostic(
            text, tag.start, tag.end,
            "Form validation errors should use aria-live='assertive' or role='alert' for immediate attention",
            Severity.WARNING, 'live-region-priority', AddAttribute('aria-live', 'assertive'),
        )
    return None


def _check_competing(text: str, regions: List[LiveRegion]) -> List[Diagnostic]:
    diagnostics = []
    assertive = [region for region in regions if region.politeness == 'assertive']

    if len(assertive) > MAX_ASSERTIVE_REGIONS:
        for region in assertive:
            diagnostics.append(diagnostic(
                text, region.tag.start, region.tag.end,
                f"Multiple assertive live regions detected ({len(assertive)} total). "
                f"Consider using only one for critical messages",
                Severity.WARNING, 'live-region-competing',
            ))
    else:
        for current, following in zip(regions, regions[1:]):
            if (current.politeness == 'assertive' and following.politeness == 'assertive'
                    and following.start - current.start < COMPETING_DISTANCE):
                diagnostics.append(diagnostic(
                    text, current.tag.start, current.tag.end,
                    "Multiple assertive live regions in close proximity may interrupt each other's announcements",
                    Severity.WARNING, 'live-region-competing',
                ))

    if len(regions) > MAX_LIVE_REGIONS:
        first = regions[0].tag
        diagnostics.append(diagnostic(
            text, first.start, first.end,
            f"High number of live regions detected ({len(regions)}). "
            f"Consider consolidating to avoid overwhelming screen readers",
            Severity.INFO, 'live-region-count',
        ))
    return diagnostics


def _check_status_elements(text: str, regions: List[LiveRegion]) -> List[Diagnostic]:
    """Elements styled as messages must be (or sit inside) a live region."""
    diagnostics = []
    for tag in iter_tags(text):
        if tag.tag in STATUS_EXEMPT_TAGS or ':' in tag.tag:
            continue
        keywords = _class_keywords(tag)
        is_error = bool(keywords & ERROR_CLASS_KEYWORDS)
        if not is_error and not keywords & STATUS_CLASS_KEYWORDS:
            continue
        if any(region.start <= tag.start < region.end for region in regions):
            continue

        if is_error:
            diagnostics.append(diagnostic(
                text, tag.start, tag.end,
                "Error/alert message should have role='alert' or aria-live='assertive' "
                "for screen reader announcement",
                Severity.ERROR, 'live-region-missing', AddAttribute('role', 'alert'),
            ))
        else:
            diagnostics.append(diagnostic(
                text, tag.start, tag.end,
                "Status message should have role='status' or aria-live='polite' "
                "for screen reader announcement",
                Severity.WARNING, 'live-region-missing', AddAttribute('role', 'status'),
            ))
    return diagnostics


def _check_flash_messages(text: str) -> List[Diagnostic]:
    diagnostics = []
    for match in FLASH_MESSAGES_PATTERN.finditer(text):
        window = text[max(0, match.start() - FLASH_MESSAGE_WINDOW):match.end() + FLASH_MESSAGE_WINDOW]
        if FLASH_WRAPPER_PATTERN.search(window):
            continue
        diagnostics.append(diagnostic(
            text, match.start(), match.end(),
            "Flash messages should be announced via aria-live or role='status'",
            Severity.WARNING, 'live-region-flash-messages', WrapInTag('div'),
        ))
    return diagnostics


def analyze(text: str, context: DocumentContext, options: AnalysisOptions) -> List[Diagnostic]:
    """
    Check live region markup and announcement politeness.

    Args:
        text: Full file text
        context: Shared document context (unused; live regions are self-contained)
        options: Analysis options

    Returns:
        Live region diagnostics
    """
    regions = collect_live_regions(text)
    logger.debug(f"Found {len(regions)} live regions")

    diagnostics = []
    diagnostics.extend(_check_values(text))
    diagnostics.extend(_check_regions(text, regions))
    diagnostics.extend(_check_competing(text, regions))
    diagnostics.extend(_check_status_elements(text, regions))
    diagnostics.extend(_check_flash_messages(text))
    return diagnostics
