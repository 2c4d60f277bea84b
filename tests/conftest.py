import os
import sys
from datetime import datetime, timezone

import openpyxl
import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

ARTIFACT_SHEET = "Ver 3.2.1 Clean"
GLOSSARY_SHEET = "Instructions and Glossary"

FIXED_NOW = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def fixed_clock():
    return FIXED_NOW


@pytest.fixture
def reference_workbook(tmp_path):
    """Create a small reference model workbook with the real sheet layout."""
    file_path = tmp_path / "TMF-Reference-Model.xlsx"
    wb = openpyxl.Workbook()

    ws = wb.active
    ws.title = ARTIFACT_SHEET
    # Row 1: document metadata
    ws.append(["TMF Reference Model ", "Version 3.2.1", datetime(2021, 3, 1)])
    # Rows 2-3: section labels over leaf labels
    ws.append(["Zone #", "Zone Name", "Artifact #", "Artifact name",
               "TMF Artifacts (Non-device)", None, "Sub-artifacts"])
    ws.append([None, None, None, None, "Sponsor Document", "Site Document", None])
    # Data rows
    ws.append(["01", "Trial Management", "01.01.01", "Trial Master File Plan", "X", "X", "Plan"])
    ws.append([None, "Note row without a zone", None, None, None, None, None])
    ws.append(["02", "Central Trial Documents", 2.2000000000000002, "Protocol", None, "X", None])
    ws.append(["03", "Regulatory", 3.0, "Regulatory Submission", "X", None, None])

    gs = wb.create_sheet(GLOSSARY_SHEET)
    gs.append(["Abbreviation", "Meaning"])
    gs.append(["TMF", "Trial Master File"])
    gs.append([None, "see ICH E6"])
    gs.append(["IRB", " Institutional Review Board "])
    gs.append(["Zone", "Description"])
    gs.append(["eTMF", "Electronic TMF"])

    wb.save(file_path)
    return file_path
