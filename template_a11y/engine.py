"""
Template Accessibility Engine

Runs every enabled analyzer over one template and collects the results.

Features:
- Builds the shared DocumentContext once, before any analyzer runs
- Runs analyzers whose group id or any of whose rule ids is enabled
- Drops diagnostics whose rule is disabled or superseded by a universal rule set
- Applies per-rule / per-group severity overrides
- Isolates analyzer failures: a crashing analyzer is logged and skipped,
  every other analyzer still reports
- Orders diagnostics by source position so repeated runs are identical

Usage:
    from template_a11y.engine import TemplateAccessibilityAnalyzer, analyze_file

    diagnostics = analyze_file(text, {'form-label', 'link-text'})

    analyzer = TemplateAccessibilityAnalyzer()
    report = analyzer.analyze_path('Resources/Private/Templates/Page.html')
    print(report.to_text())
"""

import logging
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .analyzers import ANALYZERS
from .config import AnalysisOptions, FileHints
from .diagnostics import AnalysisReport, Diagnostic
from .document_context import DocumentContext

logger = logging.getLogger(__name__)


class TemplateAccessibilityAnalyzer:
    """
    Accessibility analyzer for HTML/template files.

    Runs the analyzers in a fixed order:
    - ARIA roles and attributes
    - ARIA labels
    - Heading hierarchy
    - Form labels and grouping
    - Table structure
    - Live regions
    - Link text
    - List structure
    - Page language
    - Skip links
    """

    def __init__(self, options: Optional[AnalysisOptions] = None,
                 analyzers: Optional[Sequence] = None):
        """
        Initialize the analyzer.

        Args:
            options: Rule configuration; defaults to every rule enabled
            analyzers: Analyzer modules to run (default: all registered analyzers)
        """
        self.options = options or AnalysisOptions()
        self.analyzers = tuple(analyzers) if analyzers is not None else ANALYZERS

    def run(self, text: str, options: Optional[AnalysisOptions] = None) -> Tuple[List[Diagnostic], List[str]]:
        """
        Analyze text and return (diagnostics, skipped analyzer group ids).

        Args:
            text: Full file text
            options: Options for this run (default: the analyzer's own)

        Returns:
            Diagnostics ordered by span, and the groups that crashed
        """
        options = options or self.options
        selection = options.rule_selection()
        context = DocumentContext.build(text)

        diagnostics: List[Diagnostic] = []
        skipped: List[str] = []
        for module in self.analyzers:
            group = module.RULE_GROUP
            if not selection.runs(group):
                logger.debug(f"Analyzer {group.group_id} disabled")
                continue

            logger.debug(f"Running analyzer {group.group_id}")
            try:
                found = module.analyze(text, context, options)
            except Exception:
                logger.warning(f"Analyzer {group.group_id} failed, skipping its results", exc_info=True)
                skipped.append(group.group_id)
                continue

            kept = [d for d in found if selection.allows(group.group_id, d.rule_id)]
            logger.debug(f"Analyzer {group.group_id}: {len(kept)} of {len(found)} diagnostics kept")
            diagnostics.extend(self._apply_overrides(kept, group.group_id, options))

        diagnostics.sort(key=lambda d: (d.span.start, d.span.end))
        return diagnostics, skipped

    def analyze(self, text: str, file_path: str = "inline") -> AnalysisReport:
        """
        Analyze template text and build a report.

        Args:
            text: Template content string
            file_path: Optional file path for reporting

        Returns:
            AnalysisReport with all diagnostics found
        """
        diagnostics, skipped = self.run(text)
        return AnalysisReport.from_diagnostics(
            diagnostics,
            file_path=file_path,
            timestamp=datetime.now().isoformat(),
            strict_mode=self.options.strict_mode,
            skipped_analyzers=skipped,
            source_text=text,
        )

    def analyze_path(self, file_path: Union[str, Path]) -> AnalysisReport:
        """
        Analyze a template file.

        Path-based file hints (Layouts/, Partials/) are merged into the
        options; an explicit fragment hint in the options takes precedence.

        Args:
            file_path: Path to the template

        Returns:
            AnalysisReport with all diagnostics found

        Raises:
            FileNotFoundError: If the file does not exist
        """
        file_path = Path(file_path)
        if not file_path.is_file():
            raise FileNotFoundError(f"Template not found: {file_path}")

        with open(file_path, 'r', encoding='utf-8') as f:
            content = f.read()

        hints = FileHints.from_path(file_path)
        if self.options.file_hints.is_fragment is not None:
            hints = replace(hints, is_fragment=self.options.file_hints.is_fragment)

        analyzer = TemplateAccessibilityAnalyzer(
            options=replace(self.options, file_hints=hints),
            analyzers=self.analyzers,
        )
        return analyzer.analyze(content, str(file_path))

    @staticmethod
    def _apply_overrides(diagnostics: List[Diagnostic], group_id: str,
                         options: AnalysisOptions) -> List[Diagnostic]:
        overrides = options.severity_overrides
        if not overrides:
            return diagnostics
        result = []
        for diag in diagnostics:
            severity = overrides.get(diag.rule_id) or overrides.get(group_id)
            result.append(diag.with_severity(severity) if severity else diag)
        return result


# =============================================================================
# Convenience Functions
# =============================================================================

def analyze_file(text: str, enabled_rules: Optional[Iterable[str]] = None,
                 options: Optional[AnalysisOptions] = None) -> List[Diagnostic]:
    """
    Analyze one file's text with the given rule configuration.

    Args:
        text: Full file text
        enabled_rules: Group ids and/or rule ids to enable (default: all)
        options: Further options; enabled_rules, when given, replaces theirs

    Returns:
        Diagnostics ordered by span start
    """
    options = options or AnalysisOptions()
    if enabled_rules is not None:
        options = options.with_rules(enabled_rules)
    diagnostics, _ = TemplateAccessibilityAnalyzer(options).run(text)
    return diagnostics


def analyze_html(html: str, strict: bool = False) -> AnalysisReport:
    """
    Convenience function to analyze template text with every rule enabled.

    Args:
        html: Template content string
        strict: If True, warnings also fail the report

    Returns:
        AnalysisReport with all diagnostics found
    """
    analyzer = TemplateAccessibilityAnalyzer(AnalysisOptions(strict_mode=strict))
    return analyzer.analyze(html)


def analyze_path(file_path: Union[str, Path], options: Optional[AnalysisOptions] = None) -> AnalysisReport:
    """
    Convenience function to analyze a template file.

    Args:
        file_path: Path to the template
        options: Rule configuration (default: every rule enabled)

    Returns:
        AnalysisReport with all diagnostics found
    """
    return TemplateAccessibilityAnalyzer(options).analyze_path(file_path)
