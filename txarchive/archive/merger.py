"""
CSV merge for transaction archives.

Rows are compared by exact line text. The header always comes from the
archive already on disk, never from the new export.
"""

import logging
from datetime import date, datetime
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

DATE_FORMAT = "%d/%m/%Y"


def parse_row_date(line: str, delimiter: str = ";") -> Optional[date]:
    """Parse the first field of a row as DD/MM/YYYY, or None if it isn't one."""
    first = line.split(delimiter, 1)[0].strip().strip('"')
    try:
        return datetime.strptime(first, DATE_FORMAT).date()
    except ValueError:
        return None


def _non_blank_lines(content: str) -> List[str]:
    return [line for line in content.splitlines() if line.strip()]


def _sort_key(line: str, delimiter: str) -> Tuple[bool, date]:
    parsed = parse_row_date(line, delimiter)
    if parsed is None:
        return (False, date.min)
    return (True, parsed)


def merge_csv(existing: Optional[str], new_content: str, delimiter: str = ";") -> str:
    """
    Merge a fresh export into existing archive content.

    Args:
        existing: Current archive content, or None if there is none
        new_content: Raw export text
        delimiter: Field delimiter of both contents

    Returns:
        The new content verbatim when there is no existing content, the
        existing content verbatim when the export is empty, otherwise the
        existing header followed by the union of data rows from both sides,
        newest first. Rows whose date can't be parsed go last in the order
        they were first seen.
    """
    existing_lines = _non_blank_lines(existing or "")
    if not existing_lines:
        return new_content

    new_lines = _non_blank_lines(new_content)
    if not new_lines:
        return existing or ""

    header = existing_lines[0]

    # dict keeps first-seen order for rows that share a sort key
    rows = dict.fromkeys(existing_lines[1:])
    rows.update(dict.fromkeys(new_lines[1:]))

    undated = sum(1 for line in rows if parse_row_date(line, delimiter) is None)
    if undated:
        logger.warning(f"{undated} row(s) without a DD/MM/YYYY date placed at the end")

    ordered = sorted(rows, key=lambda line: _sort_key(line, delimiter), reverse=True)
    return "\n".join([header, *ordered])
