"""
Analyzer registry.

Every analyzer module exposes RULE_GROUP and
analyze(text, context, options) -> List[Diagnostic]. ANALYZERS fixes the
order in which the engine runs them.
"""

from typing import Dict, Tuple

from ..rules import RuleGroup
from . import (
    aria_labels,
    aria_roles,
    forms,
    headings,
    link_text,
    lists,
    live_regions,
    page_language,
    skip_links,
    tables,
)

ANALYZERS = (
    aria_roles,
    aria_labels,
    headings,
    forms,
    tables,
    live_regions,
    link_text,
    lists,
    page_language,
    skip_links,
)

RULE_GROUPS: Tuple[RuleGroup, ...] = tuple(module.RULE_GROUP for module in ANALYZERS)

GROUPS_BY_ID: Dict[str, RuleGroup] = {group.group_id: group for group in RULE_GROUPS}

# Diagnostic rule id -> owning group id
RULE_TO_GROUP: Dict[str, str] = {
    rule_id: group.group_id
    for group in RULE_GROUPS
    for rule_id in group.rule_ids
}

ALL_RULE_IDS = frozenset(RULE_TO_GROUP)


def known_rule_ids() -> frozenset:
    """Every id accepted in a rule configuration: group ids and rule ids."""
    return frozenset(GROUPS_BY_ID) | ALL_RULE_IDS
