"""
Diagnostic and Fix Model

Common result types produced by every analyzer: a located diagnostic with a
severity and rule id, and an optional fix descriptor that states the intent
of a repair ("add attribute X=Y to this element") without mutating any text.
Applying a fix is the job of whoever consumes the report.

Usage:
    from template_a11y.diagnostics import Diagnostic, Severity, SourceSpan, AddAttribute

    diag = Diagnostic(
        span=SourceSpan(0, 6),
        message="Missing lang attribute on <html> element",
        severity=Severity.ERROR,
        rule_id="page-language-missing",
        fix=AddAttribute("lang", "en"),
    )
    print(diag.to_dict())
"""

import json
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from .tag_utils import offset_to_line_column


class Severity(Enum):
    """Severity levels for diagnostics"""
    ERROR = "error"                # Blocks, flag prominently
    WARNING = "warning"            # Likely defect
    WEAK_WARNING = "weak_warning"  # Questionable pattern
    INFO = "info"                  # Unobtrusive note

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    @classmethod
    def parse(cls, value: str) -> 'Severity':
        """Parse 'error', 'WARNING', 'weak-warning', ... into a Severity."""
        normalized = value.strip().lower().replace('-', '_')
        for member in cls:
            if member.value == normalized or member.name.lower() == normalized:
                return member
        raise ValueError(f"Unknown severity: {value}")


_SEVERITY_RANK = {
    Severity.ERROR: 0,
    Severity.WARNING: 1,
    Severity.WEAK_WARNING: 2,
    Severity.INFO: 3,
}


@dataclass(frozen=True)
class SourceSpan:
    """Half-open [start, end) range of offsets into the analyzed text."""
    start: int
    end: int

    def __post_init__(self):
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"Invalid span: {self.start}..{self.end}")

    @classmethod
    def clamped(cls, start: int, end: int, length: int) -> 'SourceSpan':
        """Build a span forced inside 0..length."""
        start = max(0, min(start, length))
        end = max(start, min(end, length))
        return cls(start, end)

    def contains(self, offset: int) -> bool:
        return self.start <= offset < self.end


# =============================================================================
# Fix Descriptors
# =============================================================================

@dataclass(frozen=True)
class AddAttribute:
    """Add name=value to the element at the diagnostic span."""
    name: str
    value: str


@dataclass(frozen=True)
class RemoveAttribute:
    """Remove an attribute from the element at the diagnostic span."""
    name: str


@dataclass(frozen=True)
class ChangeTagName:
    """Rename the element at the diagnostic span (opening and closing tag)."""
    new_name: str


@dataclass(frozen=True)
class WrapInTag:
    """Wrap the element at the diagnostic span in a new parent element."""
    tag_name: str


@dataclass(frozen=True)
class AddChildElement:
    """Insert a child element, optionally only inside a given parent tag."""
    tag_name: str
    content: str = ""
    required_parent_tag: Optional[str] = None


FixDescriptor = Union[AddAttribute, RemoveAttribute, ChangeTagName, WrapInTag, AddChildElement]

FIX_TYPE_NAMES = {
    AddAttribute: "add_attribute",
    RemoveAttribute: "remove_attribute",
    ChangeTagName: "change_tag_name",
    WrapInTag: "wrap_in_tag",
    AddChildElement: "add_child_element",
}


def fix_to_dict(fix: FixDescriptor) -> Dict[str, Any]:
    """Serialize a fix descriptor with a 'type' discriminator."""
    data = {"type": FIX_TYPE_NAMES[type(fix)]}
    data.update(asdict(fix))
    return data


# =============================================================================
# Diagnostics
# =============================================================================

@dataclass(frozen=True)
class Diagnostic:
    """A single located accessibility finding"""
    span: SourceSpan
    message: str
    severity: Severity
    rule_id: str
    fix: Optional[FixDescriptor] = None

    def with_severity(self, severity: Severity) -> 'Diagnostic':
        return Diagnostic(self.span, self.message, severity, self.rule_id, self.fix)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "rule_id": self.rule_id,
            "span": {"start": self.span.start, "end": self.span.end},
            "message": self.message,
            "severity": self.severity.value,
        }
        if self.fix is not None:
            data["fix"] = fix_to_dict(self.fix)
        return data


def diagnostic(text: str, start: int, end: int, message: str,
               severity: Severity, rule_id: str,
               fix: Optional[FixDescriptor] = None) -> Diagnostic:
    """Create a diagnostic whose span is clamped to the text bounds."""
    return Diagnostic(
        span=SourceSpan.clamped(start, end, len(text)),
        message=message,
        severity=severity,
        rule_id=rule_id,
        fix=fix,
    )


@dataclass
class AnalysisReport:
    """Aggregated diagnostics for one analyzed file"""
    file_path: str
    timestamp: str
    total_issues: int = 0
    error_count: int = 0
    warning_count: int = 0
    weak_warning_count: int = 0
    info_count: int = 0
    passed: bool = True
    diagnostics: List[Diagnostic] = field(default_factory=list)
    summary: Dict[str, int] = field(default_factory=dict)
    skipped_analyzers: List[str] = field(default_factory=list)
    source_text: Optional[str] = field(default=None, repr=False)

    @classmethod
    def from_diagnostics(cls, diagnostics: List[Diagnostic], file_path: str,
                         timestamp: str, strict_mode: bool = False,
                         skipped_analyzers: Optional[List[str]] = None,
                         source_text: Optional[str] = None) -> 'AnalysisReport':
        """Build a report and its severity counts from a diagnostic list."""
        report = cls(
            file_path=file_path,
            timestamp=timestamp,
            total_issues=len(diagnostics),
            diagnostics=list(diagnostics),
            skipped_analyzers=list(skipped_analyzers or []),
            source_text=source_text,
        )

        for diag in diagnostics:
            if diag.severity == Severity.ERROR:
                report.error_count += 1
            elif diag.severity == Severity.WARNING:
                report.warning_count += 1
            elif diag.severity == Severity.WEAK_WARNING:
                report.weak_warning_count += 1
            else:
                report.info_count += 1
            report.summary[diag.rule_id] = report.summary.get(diag.rule_id, 0) + 1

        report.passed = (
            report.error_count == 0 and
            (report.warning_count == 0 or not strict_mode)
        )
        return report

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file_path": self.file_path,
            "timestamp": self.timestamp,
            "total_issues": self.total_issues,
            "error_count": self.error_count,
            "warning_count": self.warning_count,
            "weak_warning_count": self.weak_warning_count,
            "info_count": self.info_count,
            "passed": self.passed,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
            "summary": dict(self.summary),
            "skipped_analyzers": list(self.skipped_analyzers),
        }

    def to_json(self) -> str:
        """Export report as JSON"""
        return json.dumps(self.to_dict(), indent=2)

    def to_text(self) -> str:
        """Generate human-readable report"""
        lines = [
            "=" * 70,
            "TEMPLATE ACCESSIBILITY REPORT",
            "=" * 70,
            f"File: {self.file_path}",
            f"Timestamp: {self.timestamp}",
            "-" * 70,
            f"Total Issues: {self.total_issues}",
            f"  Errors: {self.error_count}",
            f"  Warnings: {self.warning_count}",
            f"  Weak warnings: {self.weak_warning_count}",
            f"  Info: {self.info_count}",
            "-" * 70,
            f"Passed: {'YES' if self.passed else 'NO'}",
            "=" * 70,
        ]

        if self.skipped_analyzers:
            lines.append(f"Skipped analyzers: {', '.join(self.skipped_analyzers)}")

        if self.diagnostics:
            lines.append("\nISSUES FOUND:\n")
            for i, diag in enumerate(self.diagnostics, 1):
                lines.append(f"{i}. [{diag.severity.value.upper()}] {diag.rule_id}")
                lines.append(f"   Location: {self._location(diag.span)}")
                lines.append(f"   Issue: {diag.message}")
                if diag.fix is not None:
                    lines.append(f"   Fix: {describe_fix(diag.fix)}")
                lines.append("")

        return "\n".join(lines)

    def _location(self, span: SourceSpan) -> str:
        if self.source_text is None:
            return f"offset {span.start}-{span.end}"
        line, column = offset_to_line_column(self.source_text, span.start)
        return f"line {line}, column {column}"


def describe_fix(fix: FixDescriptor) -> str:
    """One-line human description of a fix descriptor."""
    if isinstance(fix, AddAttribute):
        return f'Add {fix.name}="{fix.value}"'
    if isinstance(fix, RemoveAttribute):
        return f"Remove the {fix.name} attribute"
    if isinstance(fix, ChangeTagName):
        return f"Change the element to <{fix.new_name}>"
    if isinstance(fix, WrapInTag):
        return f"Wrap the element in <{fix.tag_name}>"
    if fix.required_parent_tag:
        return f"Add a <{fix.tag_name}> inside <{fix.required_parent_tag}>"
    return f"Add a <{fix.tag_name}> element"
