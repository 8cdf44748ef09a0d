"""
Table Structure Analyzer

Classifies each <table> as layout, data or ambiguous from a lightweight
structural analysis and checks it accordingly.

Features:
- Layout tables carrying <th>/<caption>, CSS layout suggestion
- Data tables without header cells, complex tables without caption/aria-label
- Obsolete summary attribute, caption position and content
- Empty / non-descriptive headers, first row of <td> that looks like headers
- <thead>/<tbody> recommendations for large tables
- scope / headers associations for complex and spanning tables
- aria-describedby and headers references to missing ids

Nested tables are blanked out before a table is measured so each table is
analyzed on its own rows only.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from ..config import AnalysisOptions
from ..diagnostics import AddAttribute, AddChildElement, Diagnostic, Severity, diagnostic
from ..document_context import DocumentContext
from ..rules import RuleGroup
from ..tag_utils import (
    ElementRef,
    extract_text_content,
    is_control_flow_tag,
    is_template_expression,
    iter_tags,
)

logger = logging.getLogger(__name__)

RULE_GROUP = RuleGroup(
    group_id='table-structure',
    display_name='Table structure',
    rule_ids=(
        'table-layout-semantics',
        'table-layout-css',
        'table-missing-headers',
        'table-missing-caption',
        'table-summary-obsolete',
        'table-caption-position',
        'table-caption-empty',
        'table-header-empty',
        'table-header-generic',
        'table-first-row-headers',
        'table-sections',
        'table-thead-missing',
        'table-header-scope',
        'table-span-associations',
        'table-reference-missing',
        'table-purpose-unclear',
    ),
)

LAYOUT_CLASS_PATTERN = re.compile(r'layout|grid|container|wrapper|structure', re.IGNORECASE)
LAYOUT_STYLE_PATTERN = re.compile(r'border\s*:\s*(?:0|none)', re.IGNORECASE)
DATA_CLASS_PATTERN = re.compile(r'data|result|report|list|record', re.IGNORECASE)
DATA_CONTENT_PATTERN = re.compile(r'\d+[.,]\d+|[$%€£]')
NUMERIC_CELL_PATTERN = re.compile(r'^[\s$€£%+\-.,\d]+$')
GENERIC_HEADER_PATTERN = re.compile(r'^(?:col|column|row)\s*\d*$', re.IGNORECASE)
EMPHASIS_PATTERN = re.compile(r'^\s*<(?:strong|b)\b', re.IGNORECASE)
CONTROL_PATTERN = re.compile(r'<(?:input|select|button|nav)\b|menu|<a\s', re.IGNORECASE)

COMPLEX_ROWS = 10
COMPLEX_COLUMNS = 6
CAPTION_ROWS = 5
CAPTION_COLUMNS = 4


class TablePurpose(Enum):
    LAYOUT = "layout"
    DATA = "data"
    AMBIGUOUS = "ambiguous"


@dataclass
class Cell:
    tag: ElementRef
    text: str
    is_header: bool
    in_thead: bool
    first_in_row: bool


@dataclass
class TableAnalysis:
    """Structural facts about one table, offsets relative to the table body"""
    table: ElementRef
    body: str
    base: int
    rows: List[List[Cell]] = field(default_factory=list)
    header_rows_in_thead: int = 0
    caption: Optional[Tuple[int, int, str]] = None
    caption_first: bool = False
    has_thead: bool = False
    has_tbody: bool = False
    has_tfoot: bool = False
    has_spans: bool = False

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return max((len(row) for row in self.rows), default=0)

    @property
    def headers(self) -> List[Cell]:
        return [cell for row in self.rows for cell in row if cell.is_header]

    @property
    def has_headers(self) -> bool:
        return bool(self.headers)

    @property
    def is_complex(self) -> bool:
        return (self.has_spans or self.row_count > COMPLEX_ROWS
                or self.column_count > COMPLEX_COLUMNS or self.header_rows_in_thead > 1)


def _blank_nested_tables(text: str, start: int, end: int) -> str:
    """Table body with nested tables replaced by spaces (offsets preserved)."""
    body = list(text[start:end])
    position = start
    for nested in iter_tags(text, ['table'], start=start, end=end):
        if nested.start < position:
            continue
        nested_end = min(nested.element_end(text), end)
        for i in range(nested.start - start, nested_end - start):
            body[i] = ' '
        position = nested_end
    return ''.join(body)


def analyze_table(text: str, table: ElementRef) -> TableAnalysis:
    inner_start, inner_end = table.inner_span(text)
    body = _blank_nested_tables(text, inner_start, inner_end)
    analysis = TableAnalysis(table=table, body=body, base=inner_start)

    sections = {tag.tag: tag for tag in iter_tags(body, ['thead', 'tbody', 'tfoot'])}
    analysis.has_thead = 'thead' in sections
    analysis.has_tbody = 'tbody' in sections
    analysis.has_tfoot = 'tfoot' in sections
    thead_span = None
    if analysis.has_thead:
        thead = sections['thead']
        thead_span = (thead.start, thead.element_end(body))

    rows = list(iter_tags(body, ['tr']))
    for index, row in enumerate(rows):
        row_end = row.element_end(body)
        if index + 1 < len(rows):
            row_end = min(row_end, rows[index + 1].start)
        in_thead = thead_span is not None and thead_span[0] <= row.start < thead_span[1]
        cells = []
        for cell_tag in iter_tags(body, ['td', 'th'], start=row.end, end=row_end):
            if cell_tag.has('rowspan') or cell_tag.has('colspan'):
                analysis.has_spans = True
            cells.append(Cell(
                tag=cell_tag,
                text=extract_text_content(cell_tag.inner_html(body)[:row_end - cell_tag.end]),
                is_header=cell_tag.tag == 'th',
                in_thead=in_thead,
                first_in_row=not cells,
            ))
        if in_thead and any(cell.is_header for cell in cells):
            analysis.header_rows_in_thead += 1
        analysis.rows.append(cells)

    caption = next(iter_tags(body, ['caption']), None)
    if caption is not None:
        caption_end = caption.element_end(body)
        analysis.caption = (caption.start, caption_end, caption.inner_html(body))
        first = next((t for t in iter_tags(body) if not is_control_flow_tag(t.name)), None)
        analysis.caption_first = first is not None and first.start == caption.start

    return analysis


def classify(analysis: TableAnalysis) -> TablePurpose:
    table = analysis.table
    role = (table.get('role') or '').strip().lower()
    if role in ('presentation', 'none'):
        return TablePurpose.LAYOUT
    if LAYOUT_CLASS_PATTERN.search(table.get('class') or '') or LAYOUT_STYLE_PATTERN.search(table.get('style') or ''):
        return TablePurpose.LAYOUT
    has_caption = analysis.caption is not None
    if (not analysis.has_headers and not has_caption and analysis.row_count <= 3
            and analysis.column_count <= 3 and CONTROL_PATTERN.search(analysis.body)):
        return TablePurpose.LAYOUT

    if DATA_CLASS_PATTERN.search(table.get('class') or ''):
        return TablePurpose.DATA
    if analysis.has_headers or has_caption:
        return TablePurpose.DATA
    if analysis.row_count > CAPTION_ROWS or analysis.column_count > CAPTION_COLUMNS:
        return TablePurpose.DATA
    if DATA_CONTENT_PATTERN.search(extract_text_content(analysis.body)):
        return TablePurpose.DATA
    return TablePurpose.AMBIGUOUS


# =============================================================================
# Checks
# =============================================================================

def _first_row_looks_like_headers(analysis: TableAnalysis) -> bool:
    if analysis.row_count <= 2 or analysis.has_headers or not analysis.rows[0]:
        return False
    first = analysis.rows[0]
    if all(EMPHASIS_PATTERN.match(cell.tag.inner_html(analysis.body)) for cell in first):
        return True
    first_textual = all(cell.text and not NUMERIC_CELL_PATTERN.match(cell.text) for cell in first)
    later_numeric = any(
        cell.text and NUMERIC_CELL_PATTERN.match(cell.text)
        for row in analysis.rows[1:] for cell in row
    )
    return first_textual and later_numeric


def _suggested_scope(cell: Cell) -> str:
    if cell.in_thead:
        return 'col'
    return 'row' if cell.first_in_row else 'col'


def _check_data_table(text: str, analysis: TableAnalysis, context: DocumentContext) -> List[Diagnostic]:
    diagnostics = []
    table = analysis.table
    start, end = table.start, table.end
    base = analysis.base

    if not analysis.has_headers and analysis.row_count > 1:
        diagnostics.append(diagnostic(
            text, start, end,
            "Data table should have header cells (<th>) to describe the data",
            Severity.ERROR, 'table-missing-headers',
            AddChildElement('thead', '<tr><th scope="col">Header</th></tr>', 'table'),
        ))

    is_large = analysis.row_count > CAPTION_ROWS or analysis.column_count > CAPTION_COLUMNS
    has_name = any(table.get(attr) for attr in ('aria-label', 'aria-labelledby'))
    if is_large and analysis.caption is None and not has_name:
        diagnostics.append(diagnostic(
            text, start, end,
            "Complex data table should have a <caption> or aria-label to describe its content",
            Severity.WARNING, 'table-missing-caption',
            AddChildElement('caption', 'Table description', 'table'),
        ))

    summary = table.get('summary')
    if summary is not None:
        diagnostics.append(diagnostic(
            text, start, end,
            "The 'summary' attribute is obsolete in HTML5. Use <caption> or aria-describedby instead",
            Severity.WARNING, 'table-summary-obsolete',
            AddChildElement('caption', summary, 'table'),
        ))

    if analysis.caption is not None:
        cap_start, cap_end, cap_html = analysis.caption
        if not analysis.caption_first:
            diagnostics.append(diagnostic(
                text, base + cap_start, base + cap_end,
                "<caption> must be the first child of <table>",
                Severity.ERROR, 'table-caption-position',
            ))
        if not extract_text_content(cap_html) and '<f:' not in cap_html and '{' not in cap_html:
            diagnostics.append(diagnostic(
                text, base + cap_start, base + cap_end,
                "Table caption should not be empty",
                Severity.ERROR, 'table-caption-empty',
            ))

    for row_index, row in enumerate(analysis.rows):
        for cell in row:
            if not cell.is_header:
                continue
            cell_start, cell_end = base + cell.tag.start, base + cell.tag.end
            html = cell.tag.inner_html(analysis.body)
            # The top-left corner cell of a two-way table is often blank
            is_corner = row_index == 0 and cell.first_in_row
            if not cell.text and not is_corner and '<f:' not in html and '{' not in html:
                diagnostics.append(diagnostic(
                    text, cell_start, cell_end,
                    "Table header <th> should not be empty",
                    Severity.WARNING, 'table-header-empty',
                ))
            elif GENERIC_HEADER_PATTERN.match(cell.text):
                diagnostics.append(diagnostic(
                    text, cell_start, cell_end,
                    f"Table header '{cell.text}' is not descriptive",
                    Severity.WARNING, 'table-header-generic',
                ))

    if _first_row_looks_like_headers(analysis):
        first = analysis.rows[0][0].tag
        diagnostics.append(diagnostic(
            text, base + first.start, base + first.end,
            "First row appears to be headers but uses <td> instead of <th>",
            Severity.WARNING, 'table-first-row-headers',
        ))

    if analysis.row_count > COMPLEX_ROWS and not analysis.has_thead and not analysis.has_tbody:
        diagnostics.append(diagnostic(
            text, start, end,
            "Large table should use <thead>, <tbody>, and optionally <tfoot> for better structure",
            Severity.INFO, 'table-sections',
        ))
    if analysis.has_tbody and not analysis.has_thead and analysis.has_headers:
        diagnostics.append(diagnostic(
            text, start, end,
            "Table with <tbody> and header cells should also have <thead>",
            Severity.INFO, 'table-thead-missing',
        ))

    if analysis.is_complex:
        diagnostics.extend(_check_associations(text, analysis, context))

    return diagnostics


def _check_associations(text: str, analysis: TableAnalysis, context: DocumentContext) -> List[Diagnostic]:
    diagnostics = []
    base = analysis.base
    headers = analysis.headers
    has_scope = any(cell.tag.has('scope') for cell in headers)
    has_headers_attr = any(cell.tag.has('headers') for row in analysis.rows for cell in row)

    if analysis.has_spans and not has_scope and not has_headers_attr:
        diagnostics.append(diagnostic(
            text, analysis.table.start, analysis.table.end,
            "Table with merged cells needs explicit header associations using 'scope' or 'headers' attributes",
            Severity.ERROR, 'table-span-associations',
        ))

    for cell in headers:
        if cell.tag.has('scope') or cell.tag.has('id'):
            continue
        diagnostics.append(diagnostic(
            text, base + cell.tag.start, base + cell.tag.end,
            "Complex table header should have 'scope' attribute",
            Severity.WARNING, 'table-header-scope',
            AddAttribute('scope', _suggested_scope(cell)),
        ))

    return diagnostics


def _check_references(text: str, analysis: TableAnalysis, context: DocumentContext) -> List[Diagnostic]:
    diagnostics = []
    table = analysis.table
    described_by = table.get('aria-describedby')
    if described_by and not is_template_expression(described_by):
        for ref in described_by.split():
            if not context.has_id(ref):
                diagnostics.append(diagnostic(
                    text, table.start, table.end,
                    f"aria-describedby references non-existent element with id='{ref}'",
                    Severity.ERROR, 'table-reference-missing',
                ))

    for row in analysis.rows:
        for cell in row:
            refs = cell.tag.get('headers')
            if not refs or is_template_expression(refs):
                continue
            for ref in refs.split():
                if not context.has_id(ref):
                    diagnostics.append(diagnostic(
                        text, analysis.base + cell.tag.start, analysis.base + cell.tag.end,
                        f"headers attribute references non-existent id '{ref}'",
                        Severity.ERROR, 'table-reference-missing',
                    ))
    return diagnostics


def analyze(text: str, context: DocumentContext, options: AnalysisOptions) -> List[Diagnostic]:
    """
    Check the structure of every table in the file.

    Args:
        text: Full file text
        context: Shared document context (ids)
        options: Analysis options

    Returns:
        Table diagnostics
    """
    diagnostics: List[Diagnostic] = []

    for table in iter_tags(text, ['table']):
        analysis = analyze_table(text, table)
        purpose = classify(analysis)
        logger.debug(
            f"Table at {table.start}: {analysis.row_count} rows, "
            f"{analysis.column_count} columns, {purpose.value}"
        )

        if purpose == TablePurpose.LAYOUT:
            if analysis.has_headers or analysis.caption is not None:
                diagnostics.append(diagnostic(
                    text, table.start, table.end,
                    "Layout table should not have semantic elements like <th> or <caption>",
                    Severity.WARNING, 'table-layout-semantics',
                ))
            diagnostics.append(diagnostic(
                text, table.start, table.end,
                "Consider using CSS Grid or Flexbox instead of tables for layout",
                Severity.INFO, 'table-layout-css',
            ))
        elif purpose == TablePurpose.DATA:
            diagnostics.extend(_check_data_table(text, analysis, context))
        else:
            diagnostics.append(diagnostic(
                text, table.start, table.end,
                "Table purpose unclear. Add role='presentation' for layout or proper headers for data tables",
                Severity.INFO, 'table-purpose-unclear',
            ))

        diagnostics.extend(_check_references(text, analysis, context))

    return diagnostics
