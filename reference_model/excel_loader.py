"""
Main orchestration for loading the TMF Reference Model workbook.

This module coordinates the entire transformation:
    1. Check configuration (API key when embeddings are requested)
    2. Load the Excel workbook
    3. Artifact sheet: metadata from row 1, keys from rows 2-3, records from the rest
    4. Glossary sheet: reconcile terms and continuation rows
    5. Optionally attach embedding vectors to each record

Functions:
    transform_artifacts: Turn artifact sheet rows into metadata + records
    transform_glossary: Turn glossary sheet rows into a term mapping
    load_reference_model: Run the whole pipeline, returning a TransformResult
"""

from dataclasses import dataclass
from typing import Any, Optional

from .config import SKIP_BLANK_DISCRIMINATOR, load_settings
from .data_transformer import build_records, reconcile_glossary
from .embeddings import EmbeddingClient, attach_embeddings
from .errors import ReferenceModelError, WorkbookError
from .header_parser import extract_metadata, reconcile_headers, utc_now
from .workbook_reader import content_width, fit_to_width, open_workbook, read_sheet_rows

HEADER_ROW_COUNT = 3


@dataclass(frozen=True)
class TransformResult:
    """Outcome of a pipeline run: either a value or an error message."""

    ok: bool
    value: Any = None
    error: Optional[str] = None

    @classmethod
    def success(cls, value):
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, message):
        return cls(ok=False, error=message)


def parse_header_rows(rows, clock=utc_now):
    """
    Split the artifact sheet into metadata, field keys and data rows.

    Returns:
        dict with 'metadata', 'headers' and 'rows'
    """
    if len(rows) < HEADER_ROW_COUNT:
        raise WorkbookError(
            f"Artifact sheet needs a title row and two header rows, found {len(rows)} rows"
        )
    title_row, headers_a, headers_b = rows[:HEADER_ROW_COUNT]

    # Fields end at the last labelled header column; a wider title row or
    # stray cells to the right of the table are not fields
    width = content_width([headers_a, headers_b])
    return {
        'metadata': extract_metadata(title_row, clock=clock),
        'headers': reconcile_headers(fit_to_width(headers_a, width), fit_to_width(headers_b, width)),
        'rows': [fit_to_width(row, width) for row in rows[HEADER_ROW_COUNT:]],
    }


def transform_artifacts(rows, clock=utc_now, skip_blank_discriminator=SKIP_BLANK_DISCRIMINATOR):
    """
    Transform the artifact sheet rows into an artifact collection.

    Args:
        rows: Typed rows of the artifact sheet, header block included
        clock: Callable returning the current UTC datetime
        skip_blank_discriminator: Drop data rows whose first cell is empty

    Returns:
        dict: {'metadata': {...}, 'artifacts': [record, ...]}

    Examples:
        >>> collection = transform_artifacts(sheet_rows)
        >>> collection['artifacts'][0]['TMF Artifacts']['Sponsor Document']
        'X'
    """
    parsed = parse_header_rows(rows, clock=clock)
    artifacts = build_records(
        parsed['headers'],
        parsed['rows'],
        skip_blank_discriminator=skip_blank_discriminator,
    )
    return {'metadata': parsed['metadata'], 'artifacts': artifacts}


def transform_glossary(rows):
    return reconcile_glossary(rows)


def load_reference_model(input_file, settings=None, clock=utc_now, client=None):
    """
    Load and transform the reference model workbook.

    Args:
        input_file: Path to the .xlsx workbook
        settings: Settings (loaded from the environment when None)
        clock: Callable returning the current UTC datetime
        client: Embedding client to use instead of building one from settings

    Returns:
        TransformResult whose value is
            {'reference_model': {'metadata': ..., 'artifacts': [...]}, 'glossary': {...}}
        or whose error describes why the run failed. Nothing partial is returned.
    """
    if settings is None:
        settings = load_settings()

    try:
        # Credentials are checked before any spreadsheet work
        if settings.embeddings_enabled and client is None:
            client = EmbeddingClient.from_settings(settings)

        print(f"Loading Excel file: {input_file}...")
        wb = open_workbook(input_file)
        try:
            print(f"Processing sheet: {settings.artifact_sheet}")
            artifact_rows = read_sheet_rows(wb, settings.artifact_sheet)
            print(f"Processing sheet: {settings.glossary_sheet}")
            glossary_rows = read_sheet_rows(wb, settings.glossary_sheet)
        finally:
            wb.close()

        reference_model = transform_artifacts(
            artifact_rows,
            clock=clock,
            skip_blank_discriminator=settings.skip_blank_discriminator,
        )
        print(f"  Loaded {len(reference_model['artifacts'])} artifacts")

        glossary = transform_glossary(glossary_rows)
        print(f"  Loaded {len(glossary)} glossary terms")

        if settings.embeddings_enabled:
            reference_model['artifacts'] = attach_embeddings(
                reference_model['artifacts'],
                client,
                batch_size=settings.embedding_batch_size,
            )
    except ReferenceModelError as e:
        return TransformResult.failure(str(e))

    return TransformResult.success({'reference_model': reference_model, 'glossary': glossary})
