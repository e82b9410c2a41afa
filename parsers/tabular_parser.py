"""
Tabular upload parser.

Turns an uploaded CSV/TSV (or .xlsx) file into ImportRow objects keyed by
the header row. Cells are trimmed but never coerced; typing is left to
the record normalizer.
"""

import re
from io import BytesIO, StringIO
from typing import Optional

import pandas as pd
import structlog

from exceptions import ParseError, ParseErrorReason
from models.imports import ImportRow

logger = structlog.get_logger(__name__)


CANDIDATE_DELIMITERS = (",", ";", "\t")

SPREADSHEET_CONTENT_TYPES = {
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-excel.sheet.macroenabled.12",
}

# .xlsx files are zip archives
_ZIP_MAGIC = b"PK\x03\x04"
_ERROR_LINE = re.compile(r"line (\d+)")


def parse_tabular_file(content: bytes, content_type: Optional[str] = None) -> list[ImportRow]:
    """
    Parse an uploaded table.

    Args:
        content: Raw file bytes
        content_type: Declared MIME type, if the upload carried one

    Returns:
        One ImportRow per non-blank data row, in file order

    Raises:
        ParseError: EMPTY_FILE, AMBIGUOUS_DELIMITER, MALFORMED_ROW,
            INVALID_HEADER or UNREADABLE_FILE
    """
    logger.info(
        "parsing_tabular_file",
        size=len(content),
        content_type=content_type
    )

    if _is_spreadsheet(content, content_type):
        frame = _load_excel(content)
        rows = _frame_to_rows(frame, strict=False)
    else:
        text = _decode(content)
        frame, first_line = _load_delimited(text)
        rows = _frame_to_rows(frame, strict=True, first_line=first_line)

    logger.info("tabular_file_parsed", row_count=len(rows))
    return rows


# ===================
# LOADERS
# ===================

def _is_spreadsheet(content: bytes, content_type: Optional[str]) -> bool:
    if content_type and content_type.split(";")[0].strip().lower() in SPREADSHEET_CONTENT_TYPES:
        return True
    return content.startswith(_ZIP_MAGIC)


def _decode(content: bytes) -> str:
    """Decode as UTF-8 (BOM tolerated), falling back to latin-1."""
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        logger.debug("utf8_decode_failed_using_latin1")
        return content.decode("latin-1")


def _skip_leading_blank_lines(text: str) -> tuple[str, int]:
    """Drop blank lines above the header; returns the rest and the header's line number."""
    lines = text.splitlines(keepends=True)
    for index, line in enumerate(lines):
        if line.strip():
            return "".join(lines[index:]), index + 1
    return "", 0


def _load_delimited(text: str) -> tuple[pd.DataFrame, int]:
    """
    Load delimited text, detecting the separator from the header line.

    A separator qualifies when every row has the header's column count.
    Returns the frame and the source line number of its first record.
    """
    text, first_line = _skip_leading_blank_lines(text)
    if not text:
        raise ParseError(ParseErrorReason.EMPTY_FILE, "The uploaded file is empty")
    header = text.splitlines()[0]

    candidates = [sep for sep in CANDIDATE_DELIMITERS if sep in header]

    if not candidates:
        # Single column file
        return _read_csv(text, ",", first_line), first_line

    if len(candidates) == 1:
        return _read_csv(text, candidates[0], first_line), first_line

    consistent = []
    for sep in candidates:
        try:
            frame = _read_csv(text, sep, first_line)
            _frame_to_rows(frame, strict=True, first_line=first_line)
        except ParseError as e:
            if e.reason != ParseErrorReason.MALFORMED_ROW:
                raise
            logger.debug("delimiter_rejected", delimiter=repr(sep), line=e.line)
            continue
        consistent.append((sep, frame))

    if len(consistent) != 1:
        raise ParseError(
            ParseErrorReason.AMBIGUOUS_DELIMITER,
            "Unable to determine the column delimiter",
            details={
                "candidates": [repr(sep) for sep in candidates],
                "consistent": [repr(sep) for sep, _ in consistent],
            }
        )

    sep, frame = consistent[0]
    logger.debug("delimiter_detected", delimiter=repr(sep))
    return frame, first_line


def _read_csv(text: str, sep: str, first_line: int = 1) -> pd.DataFrame:
    """Blank lines are kept so record positions map to source lines."""
    try:
        return pd.read_csv(
            StringIO(text),
            sep=sep,
            header=None,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=False,
            engine="python",
        )
    except pd.errors.EmptyDataError:
        raise ParseError(ParseErrorReason.EMPTY_FILE, "The uploaded file is empty")
    except pd.errors.ParserError as e:
        # Raised for rows with more fields than the header
        match = _ERROR_LINE.search(str(e))
        line = int(match.group(1)) + first_line - 1 if match else None
        raise ParseError(
            ParseErrorReason.MALFORMED_ROW,
            "Row has more columns than the header",
            line=line,
            details={"delimiter": repr(sep)}
        )


def _load_excel(content: bytes) -> pd.DataFrame:
    """Load the first sheet of an .xlsx upload."""
    try:
        return pd.read_excel(
            BytesIO(content),
            sheet_name=0,
            header=None,
            dtype=str,
            engine="openpyxl",
        )
    except Exception as e:
        logger.error("excel_read_failed", error=str(e))
        raise ParseError(
            ParseErrorReason.UNREADABLE_FILE,
            "Failed to read spreadsheet",
            details={"original_error": str(e)}
        )


# ===================
# ROW CONVERSION
# ===================

def _cell(value) -> Optional[str]:
    """Trimmed text, or None for a missing field."""
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    return str(value).strip()


def _frame_to_rows(frame: pd.DataFrame, strict: bool, first_line: int = 1) -> list[ImportRow]:
    """
    Convert a headerless frame into ImportRows.

    With strict=True a row that is short of fields (padded by pandas) is
    malformed; spreadsheets have no such notion, so missing cells read as "".
    first_line is the source line of the header record.
    """
    records = frame.values.tolist()
    if not records:
        raise ParseError(ParseErrorReason.EMPTY_FILE, "The uploaded file is empty")

    header = [_cell(value) or "" for value in records[0]]
    if not strict:
        # Trailing empty columns in spreadsheets
        while header and not header[-1]:
            header.pop()

    _validate_header(header, first_line)
    width = len(header)

    rows = []
    for line, raw in enumerate(records[1:], start=first_line + 1):
        cells = [_cell(value) for value in raw]

        if all(not c for c in cells):
            continue

        if strict and any(c is None for c in cells[:width]):
            raise ParseError(
                ParseErrorReason.MALFORMED_ROW,
                f"Row {line} has fewer columns than the header",
                line=line,
                details={"expected": width}
            )

        if not strict and any(cells[width:]):
            raise ParseError(
                ParseErrorReason.MALFORMED_ROW,
                f"Row {line} has values outside the header columns",
                line=line,
                details={"expected": width}
            )

        rows.append(ImportRow(
            line=line,
            cells={name: cells[i] or "" for i, name in enumerate(header)}
        ))

    return rows


def _validate_header(header: list[str], line: int = 1) -> None:
    if not header:
        raise ParseError(ParseErrorReason.EMPTY_FILE, "The uploaded file has no header row")

    blank = [i + 1 for i, name in enumerate(header) if not name]
    if blank:
        raise ParseError(
            ParseErrorReason.INVALID_HEADER,
            "Header row has blank column names",
            line=line,
            details={"columns": blank}
        )

    seen = set()
    duplicates = []
    for name in header:
        if name in seen:
            duplicates.append(name)
        seen.add(name)
    if duplicates:
        raise ParseError(
            ParseErrorReason.INVALID_HEADER,
            "Header row has duplicate column names",
            line=line,
            details={"duplicates": duplicates}
        )
