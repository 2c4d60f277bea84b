"""
Data transformation for TMF Reference Model rows.

This module turns typed workbook rows into artifact records and the glossary
mapping. Keys of the form 'Section : Label' become nested records:

    {'Zone #': '01', 'TMF Artifacts : Sponsor Document': 'X'}
becomes
    {'Zone #': '01', 'TMF Artifacts': {'Sponsor Document': 'X'}}

Functions:
    normalize_cell: Undo rounding artifacts and split multi-line text
    build_record: Combine header keys and one data row into a nested record
    build_records: Build records for many rows, optionally skipping blank ones
    reconcile_glossary: Reduce glossary rows into a term -> definition mapping
"""

from .config import (
    GLOSSARY_HEADER_LABELS,
    LINE_BREAK,
    ROUNDING_ARTIFACTS,
    SKIP_BLANK_DISCRIMINATOR,
)
from .errors import GlossaryContinuationError, RowLengthError
from .header_parser import has_section_marker, split_section_key


def revert_rounding_artifact(value):
    """
    Return the short form the workbook displays for a known re-expanded float.

    Examples:
        >>> revert_rounding_artifact('10.050000000000001')
        '10.05'
        >>> revert_rounding_artifact('3.1')
        '3.1'
    """
    if isinstance(value, str):
        return ROUNDING_ARTIFACTS.get(value, value)
    return value


def split_multiline(value):
    """
    Split a text cell on embedded line breaks.

    Empty segments are dropped and the rest trimmed. A single remaining segment
    comes back as a plain string, anything else as a list.

    Examples:
        >>> split_multiline('A\\r\\nB\\r\\n')
        ['A', 'B']
        >>> split_multiline('A\\r\\n')
        'A'
        >>> split_multiline('no break')
        'no break'
    """
    if not isinstance(value, str) or LINE_BREAK not in value:
        return value

    parts = [s.strip() for s in value.split(LINE_BREAK) if s != ""]
    if len(parts) == 1:
        return parts[0]
    return parts


def normalize_cell(raw):
    """
    Clean a single cell value before it is stored in a record.

    Dates and other non-text values pass through untouched.

    Examples:
        >>> normalize_cell('2.2000000000000002')
        '2.2'
        >>> normalize_cell('Protocol\\r\\nAmendment')
        ['Protocol', 'Amendment']
    """
    value = revert_rounding_artifact(raw)
    value = split_multiline(value)
    if type(value) is not str and isinstance(value, str):
        # Drop the NumericText marker once the cell is cleaned
        value = str(value)
    return value


def add_section_to_record(record, key, value):
    """Store value under record[section][leaf], creating the section on first use."""
    section, leaf = split_section_key(key)
    current = record.get(section)
    if not isinstance(current, dict):
        current = {}
        record[section] = current
    current[leaf] = value
    return record


def build_record(field_keys, data_row):
    """
    Combine header keys with one data row into an artifact record.

    Args:
        field_keys: Keys from reconcile_headers
        data_row: Typed cells of one data row

    Returns:
        dict where compound keys sharing a section are grouped into one nested
        dict. A later column with the same key overwrites an earlier one.

    Raises:
        RowLengthError: Row and keys differ in length

    Examples:
        >>> build_record(['Section : A', 'Section : B'], ['x', 'y'])
        {'Section': {'A': 'x', 'B': 'y'}}
    """
    if len(field_keys) != len(data_row):
        raise RowLengthError(
            f"Row has {len(data_row)} cells but there are {len(field_keys)} header keys"
        )

    record = {}
    for key, cell in zip(field_keys, data_row):
        value = normalize_cell(cell)
        if has_section_marker(key):
            add_section_to_record(record, key, value)
        else:
            record[key] = value
    return record


def has_blank_discriminator(row):
    if not row:
        return True
    first = row[0]
    return isinstance(first, str) and not first.strip()


def build_records(field_keys, rows, skip_blank_discriminator=SKIP_BLANK_DISCRIMINATOR):
    """
    Build one record per data row, in row order.

    Args:
        field_keys: Keys from reconcile_headers
        rows: Data rows following the header block
        skip_blank_discriminator: Skip rows whose first cell is empty

    Returns:
        List of record dicts
    """
    records = []
    for row in rows:
        if skip_blank_discriminator and has_blank_discriminator(row):
            continue
        records.append(build_record(field_keys, row))
    return records


def _cell_text(cell):
    return cell if isinstance(cell, str) else str(cell)


def is_glossary_header_row(row, header_labels=None):
    """
    Check whether a glossary row is a leftover label row.

    Examples:
        >>> is_glossary_header_row(['Abbreviation ', 'Meaning'])
        True
        >>> is_glossary_header_row(['TMF', 'Trial Master File'])
        False
    """
    if header_labels is None:
        header_labels = GLOSSARY_HEADER_LABELS
    if not row:
        return False
    return _cell_text(row[0]).strip() in header_labels


def reconcile_glossary(rows):
    """
    Reduce glossary rows into a term -> definition mapping.

    Some entries use two rows: the second has an empty term and carries more
    of the definition, which is appended to the previous entry with a space.

    Args:
        rows: Typed rows of the glossary sheet

    Returns:
        dict mapping term to definition

    Raises:
        GlossaryContinuationError: A continuation row has no entry before it

    Examples:
        >>> reconcile_glossary([['TMF', 'Trial Master File'], ['', 'see ICH E6']])
        {'TMF': 'Trial Master File see ICH E6'}
    """
    entries = []
    for row in rows:
        if is_glossary_header_row(row):
            continue

        raw_term = row[0] if row else ""
        definition = _cell_text(row[1]).strip() if len(row) > 1 else ""

        # Only a truly empty term marks a continuation; whitespace is a (blank) term
        if raw_term == "" and len(row) > 1:
            if not entries:
                raise GlossaryContinuationError(
                    f"Glossary continuation row '{definition}' has no preceding entry"
                )
            last_term, last_definition = entries[-1]
            entries[-1] = (last_term, last_definition + " " + definition)
        else:
            entries.append((_cell_text(raw_term).strip(), definition))

    return dict(entries)
