"""
JSON output for a transformed reference model.

Each artifact is an element of a flat list, next to the document metadata
and the glossary.
"""

import json
from datetime import date
from pathlib import Path

from .errors import EncodingError


def json_default(value):
    """Serialize dates as ISO strings, as they appear in the JSON output."""
    if isinstance(value, date):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def build_document(model):
    """
    Arrange a pipeline result into the output document shape.

    Raises:
        EncodingError: The model lacks the reference model or the glossary
    """
    try:
        reference_model = model['reference_model']
        metadata = reference_model['metadata']
        artifacts = reference_model['artifacts']
        glossary = model['glossary']
    except (KeyError, TypeError) as e:
        raise EncodingError("missing metadata and artifact transformations") from e

    return {
        '_metadata': metadata,
        'artifacts': {
            '_count': len(artifacts),
            'items': artifacts,
        },
        'glossary': glossary,
    }


def encode(model):
    """Return the pretty-printed JSON text for a pipeline result."""
    return json.dumps(build_document(model), indent=2, ensure_ascii=False, default=json_default)


def output_path_for(input_file):
    """
    Examples:
        >>> output_path_for('TMF-Reference-Model.xlsx')
        PosixPath('TMF-Reference-Model.json')
    """
    return Path(str(input_file).replace(".xlsx", ".json"))


def encode_and_write(model, input_file, output_file=None):
    """
    Encode the model and write it beside the input workbook.

    Returns:
        Path of the written JSON file
    """
    payload = encode(model)
    if output_file is None:
        output_file = output_path_for(input_file)
    output_file = Path(output_file)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_text(payload, encoding="utf-8")
    print(f"JSON Output written to: {output_file}")
    return output_file
