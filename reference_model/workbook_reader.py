"""
Workbook reading for the TMF Reference Model.

Opens the .xlsx with openpyxl and turns each sheet into plain rows of typed
cell values, which is all the transformation steps ever see:

    str          text cell ("" for an empty cell)
    NumericText  a number, delivered as its textual form
    date         a date-formatted cell

Functions:
    open_workbook: Load the workbook, reporting unreadable files as WorkbookError
    read_sheet_rows: Read one sheet into a list of equal-width typed rows
    to_cell: Convert a raw openpyxl value into a typed cell
    content_width: Width up to the last non-empty cell of a set of rows
"""

import warnings
from datetime import date, datetime
from zipfile import BadZipFile

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from .errors import WorkbookError

# Suppress openpyxl warnings about styles/formatting (we only read data values)
warnings.filterwarnings('ignore', category=UserWarning, module='openpyxl')


class NumericText(str):
    """A numeric cell carried as the text the number renders to."""

    def __repr__(self):
        return f"NumericText({str.__repr__(self)})"


def open_workbook(path):
    """
    Load a workbook for value reading.

    Args:
        path: Path to the .xlsx file

    Returns:
        openpyxl Workbook opened read-only with cached formula values

    Raises:
        WorkbookError: The file is missing or is not a readable workbook
    """
    try:
        return openpyxl.load_workbook(path, data_only=True, read_only=True)
    except (InvalidFileException, BadZipFile, KeyError, OSError, ValueError) as e:
        raise WorkbookError(f"Could not read workbook '{path}': {e}") from e


def to_cell(value):
    """
    Convert a raw openpyxl value into a typed cell.

    Examples:
        >>> to_cell(None)
        ''
        >>> to_cell(3.0)
        NumericText('3')
        >>> to_cell(2.2000000000000002)
        NumericText('2.2000000000000002')
        >>> to_cell(datetime(2021, 3, 1))
        datetime.date(2021, 3, 1)
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return NumericText("TRUE" if value else "FALSE")
    if isinstance(value, int):
        return NumericText(str(value))
    if isinstance(value, float):
        # Whole numbers render without the trailing '.0' (3.0 -> 3)
        if value.is_integer():
            return NumericText(str(int(value)))
        return NumericText(str(value))
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return str(value)


def _is_empty(cell):
    return isinstance(cell, str) and not cell.strip()


def content_width(rows):
    """
    Number of columns up to the last non-empty cell across the given rows.

    Examples:
        >>> content_width([['a', '', ''], ['', 'b', '']])
        2
    """
    width = 0
    for row in rows:
        for idx in range(len(row) - 1, -1, -1):
            if not _is_empty(row[idx]):
                width = max(width, idx + 1)
                break
    return width


def fit_to_width(row, width):
    """Pad or cut a row to exactly width cells."""
    return (list(row) + [""] * width)[:width]


def read_sheet_rows(workbook, sheet_name):
    """
    Read a sheet into rows of typed cells.

    Fully empty rows are dropped. Columns that are empty in every row are trimmed
    from the right and every row is padded to the same width, so header and data
    rows always line up.

    Args:
        workbook: Workbook returned by open_workbook
        sheet_name: Name of the sheet to read

    Returns:
        List of rows, each a list of typed cells

    Raises:
        WorkbookError: The sheet does not exist or its contents cannot be parsed
    """
    if sheet_name not in workbook.sheetnames:
        raise WorkbookError(f"Sheet '{sheet_name}' not found in workbook")

    # Read-only sheets parse lazily; malformed XML surfaces while iterating
    try:
        ws = workbook[sheet_name]
        rows = []
        for raw_row in ws.iter_rows(values_only=True):
            row = [to_cell(v) for v in raw_row]
            if all(_is_empty(c) for c in row):
                continue
            rows.append(row)
    except (BadZipFile, KeyError, OSError, ValueError, TypeError, SyntaxError) as e:
        raise WorkbookError(f"Could not read sheet '{sheet_name}': {e}") from e

    width = content_width(rows)
    return [fit_to_width(row, width) for row in rows]
