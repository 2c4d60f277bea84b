import sys
import os

# Add project root to sys.path
sys.path.append(os.getcwd())

from reference_model.config import ARTIFACT_SHEET, EXCEL_FILE
from reference_model.errors import ReferenceModelError
from reference_model.excel_loader import parse_header_rows
from reference_model.header_parser import has_section_marker, split_section_key
from reference_model.workbook_reader import open_workbook, read_sheet_rows


def inspect_keys(input_file=EXCEL_FILE, sheet=ARTIFACT_SHEET):
    wb = open_workbook(input_file)
    try:
        rows = read_sheet_rows(wb, sheet)
    finally:
        wb.close()

    parsed = parse_header_rows(rows)
    keys = parsed['headers']
    print("Metadata:", parsed['metadata'])
    print("Total Keys:", len(keys))
    for idx, key in enumerate(keys):
        print(f" {idx:3d} - {key!r}")

    sections = {}
    for key in keys:
        if has_section_marker(key):
            section, leaf = split_section_key(key)
            sections.setdefault(section, []).append(leaf)

    print("\nSections:")
    for section, leaves in sections.items():
        print(f" {section}: {leaves}")

    duplicates = sorted({k for k in keys if keys.count(k) > 1})
    if duplicates:
        print("\nDuplicate keys (later columns overwrite earlier ones):")
        print(duplicates)


if __name__ == "__main__":
    try:
        inspect_keys(*sys.argv[1:3])
    except ReferenceModelError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
