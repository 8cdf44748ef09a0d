"""
Analysis Configuration

Options read once per analysis run: which rules are enabled, legacy-rule
suppression, per-rule severity overrides and file classification hints.
"""

from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Dict, Iterable, Optional, Set, Union

from .diagnostics import Severity
from .rules import LEGACY_SUPERSEDED, RuleSelection

# Directories whose templates are layout/partial fragments rather than pages
FRAGMENT_DIRECTORIES = frozenset({'layouts', 'partials'})


@dataclass
class FileHints:
    """Optional path-based classification of the analyzed file."""
    file_path: Optional[str] = None
    is_fragment: Optional[bool] = None

    @classmethod
    def from_path(cls, path: Union[str, PurePath]) -> 'FileHints':
        """
        Classify a template by its location.

        Files below a Layouts/ or Partials/ directory are fragments; for any
        other path the classification is left to content heuristics.
        """
        parts = {part.lower() for part in PurePath(path).parts[:-1]}
        is_fragment = True if parts & FRAGMENT_DIRECTORIES else None
        return cls(file_path=str(path), is_fragment=is_fragment)


@dataclass
class AnalysisOptions:
    """Configuration options for one analysis run."""
    enabled_rules: Optional[Set[str]] = None
    # Legacy suppression (both flags must be set)
    universal_enabled: bool = False
    suppress_legacy_duplicates: bool = False
    # Rule id or group id -> severity
    severity_overrides: Dict[str, Severity] = field(default_factory=dict)
    file_hints: FileHints = field(default_factory=FileHints)
    # Warnings also fail the report
    strict_mode: bool = False

    @property
    def suppressed_rules(self) -> frozenset:
        if self.universal_enabled and self.suppress_legacy_duplicates:
            return LEGACY_SUPERSEDED
        return frozenset()

    def rule_selection(self) -> RuleSelection:
        return RuleSelection.create(self.enabled_rules, self.suppressed_rules)

    def validate(self) -> None:
        """
        Reject rule ids and severity override keys nobody reports.

        Raises:
            ValueError: If an enabled rule or override names an unknown id
        """
        # The registry imports every analyzer, and analyzers import this module
        from .analyzers import known_rule_ids

        known = known_rule_ids()
        unknown = set(self.enabled_rules or ()) - known
        unknown |= set(self.severity_overrides) - known
        if unknown:
            raise ValueError(f"Unknown rule ids: {', '.join(sorted(unknown))}")

    def with_rules(self, enabled_rules: Optional[Iterable[str]]) -> 'AnalysisOptions':
        """Copy of these options with a different rule set."""
        return AnalysisOptions(
            enabled_rules=set(enabled_rules) if enabled_rules is not None else None,
            universal_enabled=self.universal_enabled,
            suppress_legacy_duplicates=self.suppress_legacy_duplicates,
            severity_overrides=dict(self.severity_overrides),
            file_hints=self.file_hints,
            strict_mode=self.strict_mode,
        )
