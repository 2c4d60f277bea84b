"""
Transform the TMF Reference Model workbook into JSON.

Reads the reference model as an .xlsx and writes a .json file next to it where
each artifact is an element in a flat list, alongside the glossary.

    python scripts/transform.py Version-3.2.1-TMF-Reference-Model-v01-Mar-2021.xlsx
"""

import argparse
import os
import sys

# Add project root to sys.path
sys.path.append(os.getcwd())

from reference_model import load_reference_model
from reference_model.config import ARTIFACT_SHEET, EXCEL_FILE, GLOSSARY_SHEET, load_settings
from reference_model.errors import EncodingError
from reference_model.json_encoder import encode_and_write


def build_parser():
    parser = argparse.ArgumentParser(description="Convert the TMF Reference Model workbook to JSON")
    parser.add_argument("input", nargs="?", default=EXCEL_FILE, help="Reference model .xlsx file")
    parser.add_argument("-o", "--output", help="Output path (default: input with .json extension)")
    parser.add_argument("--artifact-sheet", default=ARTIFACT_SHEET)
    parser.add_argument("--glossary-sheet", default=GLOSSARY_SHEET)
    parser.add_argument("--embeddings", action="store_true",
                        help="Attach embedding vectors (needs OPENAI_API_KEY)")
    parser.add_argument("--keep-blank-rows", action="store_true",
                        help="Keep artifact rows whose first column is empty")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    overrides = {
        "artifact_sheet": args.artifact_sheet,
        "glossary_sheet": args.glossary_sheet,
        "skip_blank_discriminator": not args.keep_blank_rows,
    }
    if args.embeddings:
        overrides["embeddings_enabled"] = True
    settings = load_settings(**overrides)

    result = load_reference_model(args.input, settings=settings)
    if not result.ok:
        print(f"Error: {result.error}", file=sys.stderr)
        return 1

    try:
        encode_and_write(result.value, args.input, args.output)
    except EncodingError as e:
        print(f"JSON Encoder: Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
