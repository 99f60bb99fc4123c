"""AnkiConnect client.

AnkiConnect is a JSON-RPC style add-on: every call is an HTTP POST of
{"action", "version", "params"} answered by {"result", "error"}. A
non-null "error" means the call failed whatever the HTTP status was.

See: https://foosoft.net/projects/anki-connect/
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import requests

from ..core.exceptions import SubmissionError, TransportError, UpstreamError
from ..core.models import AnkiNote

logger = logging.getLogger(__name__)

ANKI_CONNECT_VERSION = 6


@dataclass
class AnkiConnectRequest:
    """Request envelope for one AnkiConnect action."""
    action: str
    params: dict = field(default_factory=dict)
    version: int = ANKI_CONNECT_VERSION

    def to_payload(self) -> dict:
        return {"action": self.action, "version": self.version, "params": self.params}


@dataclass
class AnkiConnectResponse:
    """Response envelope for one AnkiConnect action."""
    result: Any = None
    error: Any = None

    @classmethod
    def from_payload(cls, data) -> "AnkiConnectResponse":
        if not isinstance(data, dict):
            # Very old AnkiConnect versions return the bare result
            return cls(result=data)
        return cls(result=data.get("result"), error=data.get("error"))

    def string_list(self) -> list[str]:
        """Result as a list of strings; anything else decodes to []."""
        if not isinstance(self.result, list):
            return []
        return [item for item in self.result if isinstance(item, str)]


class AnkiConnectClient:
    """Thin typed wrapper over the AnkiConnect HTTP API."""

    def __init__(self, url: str, timeout: float = 5.0, session: requests.Session = None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def invoke(self, request: AnkiConnectRequest) -> AnkiConnectResponse:
        """Send a request and return the decoded envelope.

        Raises:
            TransportError: If AnkiConnect could not be reached
            UpstreamError: If the HTTP status or body was unusable
            SubmissionError: If AnkiConnect reported an error
        """
        logger.debug(f"AnkiConnect -> {request.action} {request.params}")

        try:
            response = self.session.post(self.url, json=request.to_payload(), timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Failed to make AnkiConnect request to {self.url}: {e}")

        if response.status_code != 200:
            raise UpstreamError(
                f"AnkiConnect request failed with status: {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(
                f"Failed to decode AnkiConnect response: {e}",
                status_code=response.status_code,
                body=response.text,
            )

        envelope = AnkiConnectResponse.from_payload(data)
        if envelope.error is not None:
            raise SubmissionError(f"AnkiConnect error ({request.action}): {envelope.error}")

        return envelope

    def _call(self, action: str, **params) -> AnkiConnectResponse:
        return self.invoke(AnkiConnectRequest(action=action, params=params))

    def version(self) -> Optional[int]:
        result = self._call("version").result
        return result if isinstance(result, int) else None

    def is_available(self) -> bool:
        """Probe AnkiConnect with the version action."""
        try:
            self.version()
        except (TransportError, UpstreamError, SubmissionError) as e:
            logger.debug(f"AnkiConnect not available at {self.url}: {e}")
            return False
        return True

    def deck_names(self) -> list[str]:
        return self._call("deckNames").string_list()

    def model_names(self) -> list[str]:
        return self._call("modelNames").string_list()

    def model_field_names(self, model_name: str) -> list[str]:
        return self._call("modelFieldNames", modelName=model_name).string_list()

    def add_note(self, note: AnkiNote) -> Optional[int]:
        """Create a note; returns the new note id when AnkiConnect gives one."""
        result = self.invoke(AnkiConnectRequest(action="addNote", params=note.to_params())).result
        return result if isinstance(result, int) else None
