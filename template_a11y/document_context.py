"""
Document Context Model

A read-only snapshot of whole-file facts that several analyzers need: where
sectioning elements, template sections and navigation regions open, which
ids are declared, and which controls are labeled by a <label>. It is built
once per analysis run, before any analyzer starts, and discarded afterwards.

Containment is approximated by offsets rather than real tag matching:
a position counts as "inside" a sectioning element or template section as
soon as any such element opened before it, and navigation regions only
cover the matched opening tag. Analyzers rely on these approximations, so
they must not be tightened here without revisiting every caller.

Usage:
    from template_a11y.document_context import DocumentContext

    context = DocumentContext.build(text)
    if context.is_in_sectioning_element(offset):
        ...
"""

import logging
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, Mapping, Optional, Set, Tuple

from .tag_utils import (
    extract_text_content,
    get_attribute_value,
    iter_tags,
)

logger = logging.getLogger(__name__)


SECTIONING_PATTERN = re.compile(
    r'<(section|article|aside|nav|main)\b[^>]*>',
    re.IGNORECASE
)

# Heading scope: <main> is recorded but does not open a new heading outline
HEADING_SECTIONING_TYPES = frozenset({'section', 'article', 'aside', 'nav'})

TEMPLATE_SECTION_PATTERN = re.compile(
    r'<f:section\s+[^>]*name\s*=\s*["\']([^"\']+)["\'][^>]*>'
    r'|<f:layout\s+[^>]*name\s*=\s*["\']([^"\']+)["\'][^>]*>'
    r'|<f:render\s+[^>]*section\s*=\s*["\']([^"\']+)["\'][^>]*>',
    re.IGNORECASE | re.DOTALL
)

NAVIGATION_PATTERN = re.compile(
    r'<nav\b[^>]*>'
    r'|<(?:div|section)\s+[^>]*(?:class|role)\s*=\s*["\'][^"\']*(?:nav|menu|breadcrumb)[^"\']*["\'][^>]*>'
    r'|<ul\s+[^>]*class\s*=\s*["\'][^"\']*(?:nav|menu)[^"\']*["\'][^>]*>',
    re.IGNORECASE | re.DOTALL
)

LABEL_PATTERN = re.compile(r'<label\b([^>]*)>(.*?)</label\s*>', re.IGNORECASE | re.DOTALL)

CONTROL_PATTERN = re.compile(
    r'<(input|select|textarea|f:form\.[\w.]+)\b[^>]*>',
    re.IGNORECASE
)


@dataclass(frozen=True)
class SectioningSpan:
    start: int
    element_type: str


@dataclass(frozen=True)
class TemplateSectionSpan:
    start: int
    kind: str
    name: str


@dataclass(frozen=True)
class NavigationSpan:
    start: int
    end: int


@dataclass(frozen=True)
class DocumentContext:
    """Immutable per-file facts shared by all analyzers"""
    sectioning_spans: Tuple[SectioningSpan, ...] = ()
    template_sections: Tuple[TemplateSectionSpan, ...] = ()
    navigation_spans: Tuple[NavigationSpan, ...] = ()
    ids: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    label_for: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    implicitly_labeled_ids: FrozenSet[str] = frozenset()
    implicitly_labeled_offsets: FrozenSet[int] = frozenset()

    @classmethod
    def build(cls, text: str) -> 'DocumentContext':
        """
        Scan the text once and record every context fact.

        Args:
            text: Full file text

        Returns:
            A frozen DocumentContext for this text
        """
        sectioning = tuple(
            SectioningSpan(m.start(), m.group(1).lower())
            for m in SECTIONING_PATTERN.finditer(text)
        )

        sections = []
        for m in TEMPLATE_SECTION_PATTERN.finditer(text):
            if m.group(1) is not None:
                sections.append(TemplateSectionSpan(m.start(), 'section', m.group(1)))
            elif m.group(2) is not None:
                sections.append(TemplateSectionSpan(m.start(), 'layout', m.group(2)))
            else:
                sections.append(TemplateSectionSpan(m.start(), 'render', m.group(3)))

        navigation = tuple(
            NavigationSpan(m.start(), m.end())
            for m in NAVIGATION_PATTERN.finditer(text)
        )

        ids: Dict[str, str] = {}
        for tag in iter_tags(text):
            element_id = tag.get('id')
            if element_id and element_id not in ids:
                ids[element_id] = tag.tag

        label_for: Dict[str, str] = {}
        implicit_ids: Set[str] = set()
        implicit_offsets: Set[int] = set()
        for m in LABEL_PATTERN.finditer(text):
            target = get_attribute_value(m.group(1), 'for')
            if target:
                label_for.setdefault(target, extract_text_content(m.group(2)))
            inner_offset = m.start(2)
            for control in CONTROL_PATTERN.finditer(m.group(2)):
                implicit_offsets.add(inner_offset + control.start())
                control_id = get_attribute_value(control.group(0), 'id')
                if control_id:
                    implicit_ids.add(control_id)

        context = cls(
            sectioning_spans=sectioning,
            template_sections=tuple(sections),
            navigation_spans=navigation,
            ids=MappingProxyType(ids),
            label_for=MappingProxyType(label_for),
            implicitly_labeled_ids=frozenset(implicit_ids),
            implicitly_labeled_offsets=frozenset(implicit_offsets),
        )
        logger.debug(
            f"Document context: {len(sectioning)} sectioning, {len(sections)} template sections, "
            f"{len(navigation)} navigation, {len(ids)} ids, {len(label_for)} labels"
        )
        return context

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def is_in_navigation_context(self, offset: int) -> bool:
        return any(nav.start <= offset <= nav.end for nav in self.navigation_spans)

    def is_in_sectioning_element(self, offset: int, include_main: bool = True) -> bool:
        """True once any sectioning element opened at or before offset."""
        for span in self.sectioning_spans:
            if span.start > offset:
                break
            if include_main or span.element_type in HEADING_SECTIONING_TYPES:
                return True
        return False

    def is_in_template_section(self, offset: int) -> bool:
        return any(section.start <= offset for section in self.template_sections)

    def label_text_for(self, element_id: str) -> Optional[str]:
        return self.label_for.get(element_id)

    def tag_name_for_id(self, element_id: str) -> Optional[str]:
        return self.ids.get(element_id)

    def has_id(self, element_id: str) -> bool:
        return element_id in self.ids

    def is_labeled_by_label(self, element_id: Optional[str], offset: int) -> bool:
        """True if a <label for> targets the id or a <label> wraps the control."""
        if element_id and (element_id in self.label_for or element_id in self.implicitly_labeled_ids):
            return True
        return offset in self.implicitly_labeled_offsets
