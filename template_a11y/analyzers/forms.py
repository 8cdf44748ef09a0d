"""
Form Labeling Analyzer

Checks that every form control has an accessible name and that related
options are grouped.

Features:
- Unlabeled <input>/<textarea>/<select> and template form helpers (f:form.*)
- Radio groups and checkbox clusters outside a <fieldset>
- Fieldsets without a first, non-empty <legend>
- Placeholder used as the only label, placeholder announcing "required"
- Conflicting required / aria-required="false"

A control counts as labeled when a <label for> targets its id, a <label>
wraps it, or it carries aria-label, aria-labelledby or a non-empty title.
Template form helpers bound to a model property are treated as labeled.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..config import AnalysisOptions
from ..diagnostics import AddChildElement, Diagnostic, Severity, WrapInTag, diagnostic
from ..document_context import DocumentContext
from ..rules import RuleGroup
from ..tag_utils import (
    ElementRef,
    extract_text_content,
    input_type_description,
    is_control_flow_tag,
    is_empty_or_whitespace,
    iter_tags,
)

logger = logging.getLogger(__name__)

RULE_GROUP = RuleGroup(
    group_id='form-label',
    display_name='Form labels and grouping',
    rule_ids=(
        'form-label-missing',
        'form-radio-group-fieldset',
        'form-checkbox-group-fieldset',
        'form-fieldset-legend-missing',
        'form-fieldset-legend-position',
        'form-fieldset-legend-empty',
        'form-placeholder-only',
        'form-placeholder-required',
        'form-required-conflict',
    ),
)

# Input types whose value/alt is their name or which are never announced
SELF_LABELING_TYPES = frozenset({'submit', 'reset', 'button', 'hidden', 'image'})

# Template form helper -> equivalent input type
FORM_HELPER_TYPES = {
    'f:form.textfield': 'text',
    'f:form.password': 'password',
    'f:form.hidden': 'hidden',
    'f:form.submit': 'submit',
    'f:form.button': 'button',
    'f:form.checkbox': 'checkbox',
    'f:form.radio': 'radio',
    'f:form.textarea': 'textarea',
    'f:form.select': 'select',
    'f:form.upload': 'file',
    'f:form.datepicker': 'date',
}

GROUP_ROLES = frozenset({'radiogroup', 'group'})

CHECKBOX_CLUSTER_DISTANCE = 500
MIN_CHECKBOX_CLUSTER = 3
MIN_PLACEHOLDER_LENGTH = 10

PLACEHOLDER_HINT_PATTERN = re.compile(r'example|e\.g\.|z\.b\.|format:', re.IGNORECASE)
LEGEND_PATTERN = re.compile(r'<legend\b[^>]*>(.*?)</legend\s*>', re.IGNORECASE | re.DOTALL)


@dataclass
class FormControl:
    """A located form control, HTML or template helper"""
    tag: ElementRef
    kind: str           # 'input', 'textarea', 'select'
    input_type: str     # lowercased type; 'textarea'/'select' for those elements
    is_helper: bool

    @property
    def start(self) -> int:
        return self.tag.start

    @property
    def group_name(self) -> Optional[str]:
        name = self.tag.get('name')
        if name is None and self.is_helper:
            name = self.tag.get('property')
        return name


def collect_controls(text: str) -> List[FormControl]:
    """All form controls in document order."""
    controls = []
    for tag in iter_tags(text):
        name = tag.tag
        if name in ('input', 'textarea', 'select'):
            if name == 'input':
                input_type = (tag.get('type') or 'text').strip().lower()
            else:
                input_type = name
            controls.append(FormControl(tag, name, input_type, is_helper=False))
        elif name in FORM_HELPER_TYPES:
            input_type = FORM_HELPER_TYPES[name]
            kind = input_type if input_type in ('textarea', 'select') else 'input'
            controls.append(FormControl(tag, kind, input_type, is_helper=True))
    return controls


def is_labeled(control: FormControl, context: DocumentContext) -> bool:
    tag = control.tag
    if context.is_labeled_by_label(tag.get('id'), tag.start):
        return True
    for attr in ('aria-label', 'aria-labelledby', 'title'):
        if not is_empty_or_whitespace(tag.get(attr)):
            return True
    if control.is_helper and tag.get('property') is not None:
        return True
    return False


def _container_spans(text: str) -> Tuple[List[Tuple[int, int]], List[ElementRef]]:
    """Spans of fieldsets and role=radiogroup/group containers, plus the fieldsets."""
    spans = []
    fieldsets = []
    for tag in iter_tags(text):
        role = (tag.get('role') or '').strip().lower()
        if tag.tag == 'fieldset':
            fieldsets.append(tag)
            spans.append((tag.start, tag.element_end(text)))
        elif role in GROUP_ROLES:
            spans.append((tag.start, tag.element_end(text)))
    return spans, fieldsets


def _is_grouped(offset: int, spans: List[Tuple[int, int]]) -> bool:
    return any(start < offset < end for start, end in spans)


def _missing_label_message(control: FormControl) -> str:
    if control.is_helper:
        helper = control.tag.tag.split('.', 1)[-1]
        return f"Form helper '{helper}' missing label"
    if control.kind == 'textarea':
        return "Textarea missing label for accessibility"
    if control.kind == 'select':
        return "Select element missing label for accessibility"
    description = input_type_description(control.input_type)
    return f"{description[0].upper()}{description[1:]} missing label for accessibility"


# =============================================================================
# Checks
# =============================================================================

def _check_labels(text: str, controls: List[FormControl], context: DocumentContext) -> List[Diagnostic]:
    diagnostics = []
    for control in controls:
        tag = control.tag
        if control.input_type in SELF_LABELING_TYPES:
            continue
        labeled = is_labeled(control, context)

        if not labeled:
            diagnostics.append(diagnostic(
                text, tag.start, tag.end,
                _missing_label_message(control),
                Severity.ERROR, 'form-label-missing',
                WrapInTag('label'),
            ))

        placeholder = tag.get('placeholder')
        if placeholder:
            if (not labeled and len(placeholder.strip()) > MIN_PLACEHOLDER_LENGTH
                    and not PLACEHOLDER_HINT_PATTERN.search(placeholder)):
                diagnostics.append(diagnostic(
                    text, tag.start, tag.end,
                    "Placeholder text should not be the only form of labeling. Add a proper label",
                    Severity.WARNING, 'form-placeholder-only',
                    WrapInTag('label'),
                ))
            if 'required' in placeholder.lower() or '*' in placeholder:
                diagnostics.append(diagnostic(
                    text, tag.start, tag.end,
                    "Placeholder should not indicate required status. Use aria-required or visual indicators",
                    Severity.WARNING, 'form-placeholder-required',
                ))

        if tag.has('required') and (tag.get('aria-required') or '').strip().lower() == 'false':
            diagnostics.append(diagnostic(
                text, tag.start, tag.end,
                "Conflicting required indicators: required attribute present but aria-required='false'",
                Severity.ERROR, 'form-required-conflict',
            ))
    return diagnostics


def _check_groups(text: str, controls: List[FormControl],
                  spans: List[Tuple[int, int]]) -> List[Diagnostic]:
    diagnostics = []

    radio_groups: Dict[str, List[FormControl]] = {}
    for control in controls:
        if control.input_type == 'radio' and control.group_name:
            radio_groups.setdefault(control.group_name, []).append(control)

    for name, radios in radio_groups.items():
        if len(radios) < 2 or _is_grouped(radios[0].start, spans):
            continue
        first = radios[0].tag
        diagnostics.append(diagnostic(
            text, first.start, first.end,
            f"Group related options ('{name}') in a <fieldset> with a <legend> "
            f"so the question is read with each option",
            Severity.ERROR, 'form-radio-group-fieldset', WrapInTag('fieldset'),
        ))

    checkboxes = [c for c in controls if c.input_type == 'checkbox']
    clusters: List[List[FormControl]] = []
    current: List[FormControl] = []
    for checkbox in checkboxes:
        if current and checkbox.start - current[-1].start >= CHECKBOX_CLUSTER_DISTANCE:
            clusters.append(current)
            current = []
        current.append(checkbox)
    if current:
        clusters.append(current)

    for cluster in clusters:
        if len(cluster) < MIN_CHECKBOX_CLUSTER or _is_grouped(cluster[0].start, spans):
            continue
        first = cluster[0].tag
        diagnostics.append(diagnostic(
            text, first.start, first.end,
            "Group related checkboxes in a <fieldset> with a <legend> so the purpose is announced",
            Severity.WARNING, 'form-checkbox-group-fieldset', WrapInTag('fieldset'),
        ))

    return diagnostics


def _first_child(text: str, fieldset: ElementRef) -> Optional[ElementRef]:
    inner_start, inner_end = fieldset.inner_span(text)
    for child in iter_tags(text, start=inner_start, end=inner_end):
        if is_control_flow_tag(child.name):
            continue
        return child
    return None


def _check_fieldsets(text: str, fieldsets: List[ElementRef]) -> List[Diagnostic]:
    diagnostics = []
    for fieldset in fieldsets:
        inner_start, inner_end = fieldset.inner_span(text)
        legend = LEGEND_PATTERN.search(text, inner_start, inner_end)
        if legend is None:
            diagnostics.append(diagnostic(
                text, fieldset.start, fieldset.end,
                "Add a <legend> to this fieldset to label the group",
                Severity.ERROR, 'form-fieldset-legend-missing',
                AddChildElement(tag_name='legend', content='Group label', required_parent_tag='fieldset'),
            ))
            continue

        first = _first_child(text, fieldset)
        if first is None or first.start != legend.start():
            diagnostics.append(diagnostic(
                text, legend.start(), legend.end(),
                "Place the <legend> first inside the <fieldset> so it's read as the group label",
                Severity.WARNING, 'form-fieldset-legend-position',
            ))

        legend_html = legend.group(1)
        if not extract_text_content(legend_html) and '<f:' not in legend_html and '{' not in legend_html:
            diagnostics.append(diagnostic(
                text, legend.start(), legend.end(),
                "Legend element is empty",
                Severity.ERROR, 'form-fieldset-legend-empty',
            ))
    return diagnostics


def analyze(text: str, context: DocumentContext, options: AnalysisOptions) -> List[Diagnostic]:
    """
    Check form control labeling and grouping.

    Args:
        text: Full file text
        context: Shared document context (label-for map, implicit labels)
        options: Analysis options

    Returns:
        Form diagnostics
    """
    controls = collect_controls(text)
    spans, fieldsets = _container_spans(text)
    if not controls and not fieldsets:
        return []

    logger.debug(f"Found {len(controls)} form controls and {len(fieldsets)} fieldsets")
    diagnostics = []
    diagnostics.extend(_check_labels(text, controls, context))
    diagnostics.extend(_check_groups(text, controls, spans))
    diagnostics.extend(_check_fieldsets(text, fieldsets))
    return diagnostics
