"""
TMF Reference Model workbook transformation.

This package reads the TMF Reference Model spreadsheet (multi-row headers,
merged section cells, multi-line values, a title row with metadata) and turns it
into a flat list of nested artifact records plus a glossary mapping.

Architecture:
    Excel → workbook_reader → header_parser → data_transformer → json_encoder / SQLite

Modules:
    config: Configuration constants and environment settings
    workbook_reader: openpyxl reading into typed rows
    header_parser: Header reconciliation and title-row metadata
    data_transformer: Cell normalization, record building, glossary reconciliation
    embeddings: Optional embedding vectors per record
    excel_loader: Main orchestration logic
    json_encoder: Output document assembly and writing
"""

from .excel_loader import TransformResult, load_reference_model, transform_artifacts, transform_glossary
from .data_transformer import build_record, normalize_cell, reconcile_glossary
from .header_parser import extract_metadata, reconcile_headers

__all__ = [
    'TransformResult',
    'load_reference_model',
    'transform_artifacts',
    'transform_glossary',
    'build_record',
    'normalize_cell',
    'reconcile_glossary',
    'extract_metadata',
    'reconcile_headers',
]
