"""
Rule Catalog

Analyzer groups, the diagnostic rule ids each group can emit, and the
selection logic that decides which analyzers run and which diagnostics
survive for a given rule configuration.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Optional, Tuple


@dataclass(frozen=True)
class RuleGroup:
    """An analyzer's identity: its group id plus every rule id it reports"""
    group_id: str
    display_name: str
    rule_ids: Tuple[str, ...]


# Analyzer groups a superseding universal rule set reports instead
LEGACY_SUPERSEDED = frozenset({'form-label', 'link-text'})


@dataclass(frozen=True)
class RuleSelection:
    """
    Enabled/disabled view over the rule catalog for one analysis run.

    enabled=None means every rule is enabled. Entries may be group ids
    ('link-text') or individual rule ids ('link-text-empty').
    """
    enabled: Optional[FrozenSet[str]] = None
    superseded: FrozenSet[str] = frozenset()

    @classmethod
    def create(cls, enabled_rules: Optional[Iterable[str]] = None,
               superseded: Iterable[str] = ()) -> 'RuleSelection':
        enabled = frozenset(enabled_rules) if enabled_rules is not None else None
        return cls(enabled=enabled, superseded=frozenset(superseded))

    def runs(self, group: RuleGroup) -> bool:
        """True if at least one of the group's rules can be reported."""
        if group.group_id in self.superseded:
            return False
        return any(self.allows(group.group_id, rule_id) for rule_id in group.rule_ids)

    def allows(self, group_id: str, rule_id: str) -> bool:
        if group_id in self.superseded or rule_id in self.superseded:
            return False
        if self.enabled is None:
            return True
        return group_id in self.enabled or rule_id in self.enabled

    def as_mapping(self, groups: Iterable[RuleGroup]) -> Dict[str, bool]:
        """Rule id -> enabled flag for every rule of the given groups."""
        mapping = {}
        for group in groups:
            for rule_id in group.rule_ids:
                mapping[rule_id] = self.allows(group.group_id, rule_id)
        return mapping
