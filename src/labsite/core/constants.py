"""
Shared constants used across CLI, API and core modules.
"""

# Google API
GOOGLE_DOCS_SCOPES = [
    "https://www.googleapis.com/auth/documents.readonly",
    "https://www.googleapis.com/auth/drive.readonly",
]

DEFAULT_BACKGROUND_DOC_ID = "179TGgjL3wbSTm-o_xiJRV7QawGmfyY0XuQcrbcJVtW8"

# Spreadsheet export endpoints
SHEETS_BASE_URL = "https://docs.google.com/spreadsheets/d"

# Drive image rewriting
DRIVE_IMAGE_BASE = "https://lh3.googleusercontent.com/d/"
DRIVE_IMAGE_SIZE_PARAM = "=s1200"
DEFAULT_PROTOCOL_IMAGE = "images/lab-logo.jpeg"

# Document structure
MAJOR_HEADING_STYLES = ("HEADING_1", "HEADING_2")
MINOR_HEADING_STYLES = ("HEADING_3", "HEADING_4")
OVERVIEW_TITLE = "Overview"
UNTITLED_SECTION = "Untitled section"
UNTITLED_SUBSECTION = "Subsection"

DEFAULT_INLINE_IMAGE_TYPE = "image/png"
