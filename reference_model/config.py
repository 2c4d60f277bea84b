"""
Configuration constants for TMF Reference Model transformation.

This module centralizes the fixed parameters of the source workbook (sheet names,
header conventions, known cell artifacts) together with the environment-driven
settings for the optional embedding step and the browse database.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

# Excel file and sheets to process
EXCEL_FILE = "Version-3.2.1-TMF-Reference-Model-v01-Mar-2021.xlsx"
ARTIFACT_SHEET = "Ver 3.2.1 Clean"
GLOSSARY_SHEET = "Instructions and Glossary"

# Header reconciliation
SECTION_SEPARATOR = " : "  # Joins a section (row A) and a leaf label (row B)
LINE_BREAK = "\r\n"        # Line break sequence used inside workbook cells

# The workbook's number formats display these floats in their short form,
# but the stored values re-expand when read.
ROUNDING_ARTIFACTS = {
    "2.2000000000000002": "2.2",
    "2.0099999999999998": "2.01",
    "10.050000000000001": "10.05",
}

# Label rows mixed into the data region of the glossary sheet
GLOSSARY_HEADER_LABELS = ["Abbreviation", "Zone", "Item"]

# Artifact rows with an empty first column are dropped unless told otherwise
SKIP_BLANK_DISCRIMINATOR = True

# Embeddings
EMBEDDING_BATCH_SIZE = 10  # Records per request, keeps each call under the token budget
DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"
DEFAULT_EMBEDDING_BASE_URL = "https://api.openai.com/v1"
EMBEDDING_TIMEOUT = 300

# Browse database
DEFAULT_DB_URL = "sqlite:///reference_model.db"


def _parse_bool(value, default):
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class Settings:
    artifact_sheet: str = ARTIFACT_SHEET
    glossary_sheet: str = GLOSSARY_SHEET
    skip_blank_discriminator: bool = SKIP_BLANK_DISCRIMINATOR
    embeddings_enabled: bool = False
    api_key: Optional[str] = None
    embedding_base_url: str = DEFAULT_EMBEDDING_BASE_URL
    embedding_model: str = DEFAULT_EMBEDDING_MODEL
    embedding_batch_size: int = EMBEDDING_BATCH_SIZE
    embedding_timeout: int = EMBEDDING_TIMEOUT
    db_url: str = DEFAULT_DB_URL


def load_settings(**overrides) -> Settings:
    """
    Build Settings from the environment, then apply keyword overrides.

    Examples:
        >>> load_settings(embeddings_enabled=True).embedding_batch_size
        10
    """
    settings = Settings(
        embeddings_enabled=_parse_bool(os.getenv("REFMODEL_EMBEDDINGS"), False),
        api_key=os.getenv("OPENAI_API_KEY") or None,
        embedding_base_url=os.getenv("OPENAI_BASE_URL", DEFAULT_EMBEDDING_BASE_URL),
        embedding_model=os.getenv("EMBEDDING_MODEL", DEFAULT_EMBEDDING_MODEL),
        db_url=os.getenv("REFMODEL_DB_URL", DEFAULT_DB_URL),
    )
    for name, value in overrides.items():
        if not hasattr(settings, name):
            raise TypeError(f"Unknown setting: {name}")
        setattr(settings, name, value)
    return settings
