# matching/schema.py
from enum import Enum
from typing import Iterable

from matching.normalize import normalize_header


class SchemaKind(str, Enum):
    COMPANY = "company"
    CONTACT = "contact"
    PROJECT = "project"
    PROPERTY = "property"


# Checked in order: a file carrying several markers takes the first one.
_MARKERS = (
    ("companykey", SchemaKind.COMPANY),
    ("contactkey", SchemaKind.CONTACT),
    ("projectkey", SchemaKind.PROJECT),
)


def classify_headers(headers: Iterable[str]) -> SchemaKind:
    """
    Decide which kind of records a file holds from its header row.
    Headers may be raw or already normalized; both compare the same.
    Files without a marker column are property files.
    """
    present = {normalize_header(h) for h in headers}
    for marker, kind in _MARKERS:
        if marker in present:
            return kind
    return SchemaKind.PROPERTY
