"""
Header parsing for the TMF Reference Model artifact sheet.

The artifact sheet opens with three header-type rows:

    Row 1:  [Title ...] [Version 3.2.1] [2021-03-01]        <- document metadata
    Row 2:  [Zone #] [Zone Name] [TMF Artifacts (Non-device) ---] [...]
    Row 3:  [      ] [         ] [Sponsor Document] [Site Document]  <- LEAF ROW

Row 2 names a section once; the merged cells it spans read back as blanks.
Combining rows 2 and 3 gives each column an unambiguous key, for example
"Sponsor Document" appears under both "TMF Artifacts (Non-device)" and
"TMF Artifacts (Device)".

Functions:
    combine_header_cells: Resolve one column's key from its two header cells
    reconcile_headers: Merge the two header rows into an ordered list of keys
    extract_metadata: Read title, version and version date from the title row
    split_section_key: Split a compound key into (section, leaf)
"""

from datetime import date, datetime, timezone
from functools import reduce

from .config import LINE_BREAK, SECTION_SEPARATOR
from .errors import HeaderLengthError


def _text(cell):
    if isinstance(cell, str):
        return cell
    return str(cell)


def concat_section_header(section, header):
    """
    Build a compound key from a section and a leaf label.

    Examples:
        >>> concat_section_header('TMF Artifacts (Device)', 'Sponsor Document')
        'TMF Artifacts (Device) : Sponsor Document'
    """
    return SECTION_SEPARATOR.join([section, header])


def has_section_marker(key):
    return SECTION_SEPARATOR in key


def split_section_key(key):
    """
    Split a compound key on the first separator only.

    Examples:
        >>> split_section_key('Section : Label : with colon')
        ('Section', 'Label : with colon')
    """
    section, leaf = key.split(SECTION_SEPARATOR, 1)
    return section, leaf


def combine_header_cells(a, b, section):
    """
    Resolve one column's key from its row A and row B cells.

    Args:
        a: Row A cell (section candidate)
        b: Row B cell (leaf label)
        section: Section carried over from the previous column

    Returns:
        tuple: (new_section, key)

    Examples:
        >>> combine_header_cells('Zone #', '', '')
        ('', 'Zone #')
        >>> combine_header_cells('', 'Artifact', '')
        ('', 'Artifact')
        >>> combine_header_cells('', 'Site Document', 'TMF Artifacts')
        ('', 'TMF Artifacts : Site Document')
        >>> combine_header_cells('TMF Artifacts', 'Sponsor Document', '')
        ('TMF Artifacts', 'TMF Artifacts : Sponsor Document')
    """
    if b == "":
        return "", a
    if a == "":
        if section == "":
            return "", b
        return "", concat_section_header(section, b)
    return a, concat_section_header(a, b)


def clean_header_key(key):
    return key.replace(LINE_BREAK, " ").strip()


def reconcile_headers(headers_a, headers_b):
    """
    Merge the two stacked header rows into one key per column.

    A blank row A cell belongs to the section most recently named to its left,
    so the scan carries that section from one column to the next.

    Args:
        headers_a: Row A cells (section labels, blank under merged cells)
        headers_b: Row B cells (leaf labels)

    Returns:
        List of keys, same length and order as the header rows. Keys under a
        section take the form 'Section : Label'.

    Raises:
        HeaderLengthError: The two rows differ in length

    Examples:
        >>> reconcile_headers(['Zone #', 'Artifacts', ''], ['', 'Sponsor', 'Site'])
        ['Zone #', 'Artifacts : Sponsor', 'Artifacts : Site']
    """
    if len(headers_a) != len(headers_b):
        raise HeaderLengthError(
            f"Header rows differ in length: {len(headers_a)} vs {len(headers_b)}"
        )

    def step(acc, cells):
        section, keys = acc
        a, b = cells
        new_section, key = combine_header_cells(_text(a), _text(b), section)
        return new_section, keys + [clean_header_key(key)]

    _, keys = reduce(step, zip(headers_a, headers_b), ("", []))
    return keys


def utc_now():
    return datetime.now(timezone.utc)


def format_timestamp(moment):
    """
    Render a UTC datetime as an ISO-8601 timestamp ending in 'Z'.

    Examples:
        >>> format_timestamp(datetime(2021, 3, 1, 12, 0, tzinfo=timezone.utc))
        '2021-03-01T12:00:00.000000Z'
    """
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment.isoformat(timespec='microseconds') + 'Z'


def extract_metadata(title_row, clock=utc_now):
    """
    Parse the title row into document metadata.

    The first cell is the title. Among the remaining cells, the first text cell
    mentioning 'Version' gives the version, and the first date cell gives the
    version date. Either is None when the row has no such cell.

    Args:
        title_row: First row of the artifact sheet
        clock: Callable returning the current UTC datetime

    Returns:
        dict with keys '_generation_timestamp', 'title', 'version', 'version_date'

    Examples:
        >>> meta = extract_metadata(['TMF Reference Model ', 'Version 3.2.1', date(2021, 3, 1)])
        >>> meta['version'], meta['version_date']
        ('3.2.1', '2021-03-01')
    """
    document_title = title_row[0] if title_row else ""
    additional_metadata = title_row[1:]

    version = None
    for cell in additional_metadata:
        if isinstance(cell, str) and "Version" in cell:
            version = cell.replace("Version", "").strip()
            break

    version_date = None
    for cell in additional_metadata:
        if isinstance(cell, date):
            if isinstance(cell, datetime):
                cell = cell.date()
            version_date = cell.isoformat()
            break

    return {
        # When this transformation ran, and thus when the output was generated
        '_generation_timestamp': format_timestamp(clock()),
        'title': _text(document_title).strip(),
        'version': version,
        'version_date': version_date,
    }
