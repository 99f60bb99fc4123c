"""AnkiConnect note store: client, schema resolution and submission."""

from .client import AnkiConnectClient, AnkiConnectRequest, AnkiConnectResponse
from .schema import NoteSchemaResolver, choose_note_type
from .submitter import NoteSubmitter, build_field_mapping, rich_field_names

__all__ = [
    "AnkiConnectClient",
    "AnkiConnectRequest",
    "AnkiConnectResponse",
    "NoteSchemaResolver",
    "choose_note_type",
    "NoteSubmitter",
    "build_field_mapping",
    "rich_field_names",
]
