"""
ARIA Role & Attribute Analyzer

Checks every element that carries ARIA semantics.

Features:
- Invalid, abstract and multiple role values
- Required properties and required alternative states per role
- Redundant roles (equal to the element's implicit role) and conflicting roles
- aria-hidden on interactive or focusable elements
- Unknown aria-* attribute names
- Input type vs. explicit role consistency
- role="presentation"/"none" that strips a semantic element
- Interactive elements given a non-interactive role
- Disclosure toggles without aria-expanded, links styled as buttons
"""

import logging
from typing import Dict, FrozenSet, List, Optional, Tuple

from ..config import AnalysisOptions
from ..diagnostics import AddAttribute, Diagnostic, RemoveAttribute, Severity, diagnostic
from ..document_context import DocumentContext
from ..rules import RuleGroup
from ..tag_utils import (
    ElementRef,
    aria_attribute_names,
    is_control_flow_tag,
    is_template_expression,
    iter_tags,
)

logger = logging.getLogger(__name__)

RULE_GROUP = RuleGroup(
    group_id='aria-role',
    display_name='ARIA roles and attributes',
    rule_ids=(
        'aria-role-multiple',
        'aria-role-abstract',
        'aria-role-invalid',
        'aria-role-required-property',
        'aria-role-required-state',
        'aria-role-redundant',
        'aria-role-conflict',
        'aria-hidden-interactive',
        'aria-attribute-invalid',
        'aria-role-input-mismatch',
        'aria-role-presentation-semantic',
        'aria-role-noninteractive',
        'aria-expanded-missing',
        'aria-role-button-link',
    ),
)


# =============================================================================
# Role Tables
# =============================================================================

VALID_ROLES = frozenset({
    # Widget roles
    'button', 'checkbox', 'combobox', 'dialog', 'gridcell', 'link', 'listbox',
    'menu', 'menubar', 'menuitem', 'menuitemcheckbox', 'menuitemradio',
    'option', 'progressbar', 'radio', 'scrollbar', 'searchbox', 'separator',
    'slider', 'spinbutton', 'switch', 'tab', 'tablist', 'tabpanel', 'textbox',
    'timer', 'tooltip', 'tree', 'treegrid', 'treeitem', 'grid',
    # Document structure roles
    'article', 'application', 'blockquote', 'caption', 'cell', 'code',
    'columnheader', 'definition', 'deletion', 'directory', 'document',
    'emphasis', 'feed', 'figure', 'generic', 'group', 'heading', 'img',
    'insertion', 'list', 'listitem', 'math', 'meter', 'none', 'note',
    'paragraph', 'presentation', 'row', 'rowgroup', 'rowheader', 'strong',
    'subscript', 'superscript', 'table', 'term', 'time', 'toolbar',
    # Landmark roles
    'banner', 'complementary', 'contentinfo', 'form', 'main', 'navigation',
    'region', 'search',
    # Live region roles
    'alert', 'alertdialog', 'log', 'marquee', 'status',
})

ABSTRACT_ROLES = frozenset({
    'command', 'composite', 'input', 'landmark', 'range', 'roletype',
    'section', 'sectionhead', 'select', 'structure', 'widget', 'window',
})

# Every listed property must be present
REQUIRED_PROPERTIES: Dict[str, Tuple[str, ...]] = {
    'checkbox': ('aria-checked',),
    'combobox': ('aria-expanded',),
    'heading': ('aria-level',),
    'menuitemcheckbox': ('aria-checked',),
    'menuitemradio': ('aria-checked',),
    'option': ('aria-selected',),
    'radio': ('aria-checked',),
    'scrollbar': ('aria-controls', 'aria-valuenow'),
    'slider': ('aria-valuenow', 'aria-valuemin', 'aria-valuemax'),
    'spinbutton': ('aria-valuenow', 'aria-valuemin', 'aria-valuemax'),
    'switch': ('aria-checked',),
    'tab': ('aria-selected',),
}

# At least one of the listed attributes must be present
REQUIRED_STATES: Dict[str, Tuple[str, ...]] = {
    'dialog': ('aria-labelledby', 'aria-label'),
    'alertdialog': ('aria-labelledby', 'aria-label'),
}

PROPERTY_DEFAULTS = {
    'aria-checked': 'false',
    'aria-expanded': 'false',
    'aria-level': '2',
    'aria-selected': 'false',
    'aria-valuenow': '0',
    'aria-valuemin': '0',
    'aria-valuemax': '100',
    'aria-controls': '',
}

IMPLICIT_ROLES = {
    'button': 'button',
    'nav': 'navigation',
    'main': 'main',
    'header': 'banner',
    'footer': 'contentinfo',
    'aside': 'complementary',
    'article': 'article',
    'section': 'region',
    'form': 'form',
    'img': 'img',
    'ul': 'list',
    'ol': 'list',
    'li': 'listitem',
    'h1': 'heading', 'h2': 'heading', 'h3': 'heading',
    'h4': 'heading', 'h5': 'heading', 'h6': 'heading',
    'textarea': 'textbox',
    'select': 'listbox',
    'table': 'table',
    'dialog': 'dialog',
}

INPUT_TYPE_ROLES = {
    'button': 'button',
    'submit': 'button',
    'reset': 'button',
    'image': 'button',
    'checkbox': 'checkbox',
    'radio': 'radio',
    'range': 'slider',
    'number': 'spinbutton',
    'search': 'searchbox',
    'email': 'textbox',
    'tel': 'textbox',
    'url': 'textbox',
    'text': 'textbox',
}

# Explicit roles that legitimately replace an input's implicit role
INPUT_ROLE_OVERRIDES: Dict[str, FrozenSet[str]] = {
    'button': frozenset({'menuitem', 'tab', 'switch', 'link', 'option', 'radio',
                         'checkbox', 'menuitemcheckbox', 'menuitemradio'}),
    'checkbox': frozenset({'switch', 'menuitemcheckbox', 'option', 'button'}),
    'radio': frozenset({'menuitemradio'}),
    'textbox': frozenset({'combobox', 'searchbox', 'spinbutton'}),
    'searchbox': frozenset({'combobox'}),
}

ROLE_CONFLICTS: Dict[str, FrozenSet[str]] = {
    'button': frozenset({'link'}),
    'link': frozenset({'button'}),
    'navigation': frozenset({'main', 'banner', 'contentinfo'}),
    'main': frozenset({'navigation', 'banner', 'contentinfo', 'complementary'}),
    'form': frozenset({'navigation', 'main', 'banner'}),
    'list': frozenset({'table', 'tree', 'grid'}),
}

INTERACTIVE_ROLES = frozenset({
    'button', 'checkbox', 'combobox', 'link', 'listbox', 'menu', 'menubar', 'menuitem',
    'menuitemcheckbox', 'menuitemradio', 'option', 'radio', 'scrollbar', 'searchbox',
    'slider', 'spinbutton', 'switch', 'tab', 'tablist', 'textbox', 'tree', 'treegrid',
    'treeitem', 'gridcell', 'columnheader', 'rowheader',
})

PRESENTATION_ROLES = frozenset({'presentation', 'none'})

# Elements whose meaning is lost under role="presentation"
SEMANTIC_TAGS = frozenset({
    'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'button', 'a', 'input', 'select',
    'textarea', 'ul', 'ol',
})

NON_INTERACTIVE_ROLES = frozenset({'article', 'region', 'img', 'figure', 'text'})

VALID_ARIA_ATTRIBUTES = frozenset({
    # Widget attributes
    'aria-autocomplete', 'aria-checked', 'aria-disabled', 'aria-errormessage',
    'aria-expanded', 'aria-haspopup', 'aria-hidden', 'aria-invalid', 'aria-label',
    'aria-level', 'aria-modal', 'aria-multiline', 'aria-multiselectable',
    'aria-orientation', 'aria-placeholder', 'aria-pressed', 'aria-readonly',
    'aria-required', 'aria-selected', 'aria-sort', 'aria-valuemax', 'aria-valuemin',
    'aria-valuenow', 'aria-valuetext',
    # Live region attributes
    'aria-atomic', 'aria-busy', 'aria-live', 'aria-relevant',
    # Drag and drop attributes
    'aria-dropeffect', 'aria-grabbed',
    # Relationship attributes
    'aria-activedescendant', 'aria-colcount', 'aria-colindex', 'aria-colindextext',
    'aria-colspan', 'aria-controls', 'aria-describedby', 'aria-description',
    'aria-details', 'aria-flowto', 'aria-labelledby', 'aria-owns', 'aria-posinset',
    'aria-rowcount', 'aria-rowindex', 'aria-rowindextext', 'aria-rowspan', 'aria-setsize',
    # Global attributes
    'aria-current', 'aria-keyshortcuts', 'aria-roledescription',
    'aria-braillelabel', 'aria-brailleroledescription',
})

TOGGLE_TARGETS = frozenset({'collapse', 'dropdown', 'tab', 'modal', 'offcanvas'})


# =============================================================================
# Element Helpers
# =============================================================================

def implicit_role(tag: ElementRef) -> Optional[str]:
    """The ARIA role an element has without an explicit role attribute."""
    name = tag.tag
    if name == 'a':
        return 'link' if tag.has('href') else None
    if name == 'input':
        input_type = (tag.get('type') or 'text').strip().lower()
        return INPUT_TYPE_ROLES.get(input_type)
    return IMPLICIT_ROLES.get(name)


def is_interactive_element(tag: ElementRef) -> bool:
    """Natively focusable/operable element."""
    name = tag.tag
    if name == 'a':
        return tag.has('href')
    if name == 'input':
        return (tag.get('type') or '').strip().lower() != 'hidden'
    return name in ('button', 'select', 'textarea', 'summary', 'iframe')


def tabindex_value(tag: ElementRef) -> Optional[int]:
    value = tag.get('tabindex')
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def class_tokens(tag: ElementRef) -> List[str]:
    return (tag.get('class') or '').lower().split()


def _first_child_tag(text: str, tag: ElementRef) -> Optional[ElementRef]:
    """First element inside tag, looking through template control-flow tags."""
    inner_start, inner_end = tag.inner_span(text)
    for child in iter_tags(text, start=inner_start, end=inner_end):
        if is_control_flow_tag(child.name):
            continue
        return child
    return None


# =============================================================================
# Checks
# =============================================================================

def _check_role(text: str, tag: ElementRef, role_value: str) -> List[Diagnostic]:
    """Role value checks for one element; role_value is already normalized."""
    diagnostics = []
    start, end = tag.start, tag.end

    tokens = role_value.split()
    if len(tokens) > 1:
        diagnostics.append(diagnostic(
            text, start, end,
            f"Multiple ARIA roles are not allowed ('{role_value}'). Use a single role",
            Severity.WARNING, 'aria-role-multiple', AddAttribute('role', tokens[0]),
        ))
    role = tokens[0]

    if role in ABSTRACT_ROLES:
        diagnostics.append(diagnostic(
            text, start, end,
            f"Abstract ARIA role '{role}' should not be used directly",
            Severity.ERROR, 'aria-role-abstract', RemoveAttribute('role'),
        ))
        return diagnostics
    if role not in VALID_ROLES:
        diagnostics.append(diagnostic(
            text, start, end,
            f"Invalid ARIA role '{role}'",
            Severity.ERROR, 'aria-role-invalid', RemoveAttribute('role'),
        ))
        return diagnostics

    implicit = implicit_role(tag)

    # Native controls already expose their state, an explicit copy of the
    # implicit role needs no extra properties either
    if implicit != role and tag.tag != 'input':
        for prop in REQUIRED_PROPERTIES.get(role, ()):
            if not tag.has(prop):
                diagnostics.append(diagnostic(
                    text, start, end,
                    f"Role '{role}' requires '{prop}' property",
                    Severity.ERROR, 'aria-role-required-property',
                    AddAttribute(prop, PROPERTY_DEFAULTS.get(prop, '')),
                ))
        alternatives = REQUIRED_STATES.get(role)
        if alternatives and not any(tag.has(attr) for attr in alternatives):
            diagnostics.append(diagnostic(
                text, start, end,
                f"Role '{role}' requires {' or '.join(alternatives)}",
                Severity.ERROR, 'aria-role-required-state',
                AddAttribute(alternatives[0], ''),
            ))

    if implicit is not None:
        if implicit == role:
            diagnostics.append(diagnostic(
                text, start, end,
                f"Redundant role='{role}' on <{tag.tag}> element. This role is implicit",
                Severity.WARNING, 'aria-role-redundant', RemoveAttribute('role'),
            ))
        elif role in ROLE_CONFLICTS.get(implicit, ()):
            diagnostics.append(diagnostic(
                text, start, end,
                f"Role='{role}' conflicts with implicit role '{implicit}' of <{tag.tag}>",
                Severity.ERROR, 'aria-role-conflict', RemoveAttribute('role'),
            ))

    if tag.tag == 'input' and implicit is not None and implicit != role:
        if role not in INPUT_ROLE_OVERRIDES.get(implicit, ()) and role not in ROLE_CONFLICTS.get(implicit, ()):
            input_type = (tag.get('type') or 'text').lower()
            diagnostics.append(diagnostic(
                text, start, end,
                f"Role='{role}' is inappropriate for input type='{input_type}'. "
                f"Consider '{implicit}' or remove role",
                Severity.WARNING, 'aria-role-input-mismatch', RemoveAttribute('role'),
            ))

    if role in PRESENTATION_ROLES:
        semantic_name = None
        if tag.tag in SEMANTIC_TAGS:
            semantic_name = tag.tag
        elif tag.tag != 'table':
            child = _first_child_tag(text, tag)
            if child is not None and child.tag in SEMANTIC_TAGS:
                semantic_name = child.tag
        if semantic_name:
            diagnostics.append(diagnostic(
                text, start, end,
                f"role='{role}' on semantic element <{semantic_name}> removes accessibility information",
                Severity.WARNING, 'aria-role-presentation-semantic', RemoveAttribute('role'),
            ))

    if tag.tag in ('button', 'a', 'input') and role in NON_INTERACTIVE_ROLES:
        diagnostics.append(diagnostic(
            text, start, end,
            f"Interactive element <{tag.tag}> with role='{role}' may not be accessible",
            Severity.WARNING, 'aria-role-noninteractive', RemoveAttribute('role'),
        ))

    return diagnostics


def _check_hidden_interactive(text: str, tag: ElementRef, role: Optional[str]) -> Optional[Diagnostic]:
    hidden = (tag.get('aria-hidden') or '').strip().lower()
    if hidden != 'true':
        return None
    tabindex = tabindex_value(tag)
    focusable = tabindex is not None and tabindex >= 0
    if is_interactive_element(tag) or focusable or (role in INTERACTIVE_ROLES):
        return diagnostic(
            text, tag.start, tag.end,
            "Element with aria-hidden='true' should not be interactive or focusable",
            Severity.ERROR, 'aria-hidden-interactive', RemoveAttribute('aria-hidden'),
        )
    return None


def _check_attribute_names(text: str, tag: ElementRef) -> List[Diagnostic]:
    diagnostics = []
    for name in aria_attribute_names(tag.raw):
        if name not in VALID_ARIA_ATTRIBUTES:
            diagnostics.append(diagnostic(
                text, tag.start, tag.end,
                f"Invalid ARIA attribute '{name}'. Check the ARIA specification",
                Severity.ERROR, 'aria-attribute-invalid', RemoveAttribute(name),
            ))
    return diagnostics


def _is_disclosure_toggle(tag: ElementRef) -> bool:
    for attr in ('data-toggle', 'data-bs-toggle'):
        target = (tag.get(attr) or '').strip().lower()
        if target in TOGGLE_TARGETS:
            return True
    return any('toggle' in token or token == 'accordion-button' for token in class_tokens(tag))


def _check_disclosure(text: str, tag: ElementRef, role: Optional[str]) -> Optional[Diagnostic]:
    if tag.has('aria-expanded') or not _is_disclosure_toggle(tag):
        return None
    if not (tag.tag in ('button', 'a') or role == 'button'):
        return None
    return diagnostic(
        text, tag.start, tag.end,
        "Interactive elements that control collapsible content should have aria-expanded attribute",
        Severity.WARNING, 'aria-expanded-missing', AddAttribute('aria-expanded', 'false'),
    )


def _check_button_link(text: str, tag: ElementRef) -> Optional[Diagnostic]:
    if tag.tag != 'a' or tag.has('role'):
        return None
    if not any(t == 'btn' or t.startswith('btn-') or t == 'button' for t in class_tokens(tag)):
        return None
    href = (tag.get('href') or '').strip()
    if href not in ('', '#') and not href.lower().startswith('javascript:'):
        return None
    return diagnostic(
        text, tag.start, tag.end,
        "Link styled as button that does not navigate should have role='button'",
        Severity.WEAK_WARNING, 'aria-role-button-link', AddAttribute('role', 'button'),
    )


# =============================================================================
# Entry Point
# =============================================================================

def analyze(text: str, context: DocumentContext, options: AnalysisOptions) -> List[Diagnostic]:
    """
    Check roles and aria-* attributes of every element.

    Args:
        text: Full file text
        context: Shared document context
        options: Analysis options

    Returns:
        Diagnostics in document order
    """
    diagnostics: List[Diagnostic] = []

    for tag in iter_tags(text):
        raw_role = tag.get('role')
        role = None
        if raw_role is not None and raw_role.strip() and not is_template_expression(raw_role):
            normalized = ' '.join(raw_role.lower().split())
            role = normalized.split()[0]
            diagnostics.extend(_check_role(text, tag, normalized))

        hidden = _check_hidden_interactive(text, tag, role)
        if hidden is not None:
            diagnostics.append(hidden)

        diagnostics.extend(_check_attribute_names(text, tag))

        for check in (_check_disclosure(text, tag, role), _check_button_link(text, tag)):
            if check is not None:
                diagnostics.append(check)

    logger.debug(f"ARIA role analysis produced {len(diagnostics)} diagnostics")
    return diagnostics
