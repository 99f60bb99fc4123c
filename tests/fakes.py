"""In-memory stand-ins for the HTTP endpoints used in tests."""

import json as jsonlib

import requests


class FakeResponse:
    """Minimal requests.Response lookalike.

    `chunks` overrides the streamed body; it may be any iterable of bytes.
    """

    def __init__(self, status_code=200, json_data=None, text=None, chunks=None):
        self.status_code = status_code
        self._json = json_data
        self.text = text if text is not None else jsonlib.dumps(json_data)
        self.encoding = "utf-8"
        self.chunks = chunks
        self.closed = False

    def json(self):
        if self._json is None:
            raise ValueError("No JSON object could be decoded")
        return self._json

    def iter_content(self, chunk_size=1):
        if self.chunks is not None:
            yield from self.chunks
        else:
            yield self.text.encode(self.encoding)

    def close(self):
        self.closed = True


class FakeSession:
    """Replays queued outcomes for post().

    Each outcome is a FakeResponse, an exception to raise, or a
    zero-argument callable returning either.
    """

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def post(self, url, json=None, headers=None, timeout=None, stream=False):
        self.calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        outcome = self.outcomes.pop(0)
        if callable(outcome):
            outcome = outcome()
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def gemini_body(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def openai_body(text):
    return {"choices": [{"message": {"content": text}}]}


KISSA_JSON = (
    '{"phrase":"kissa","translations":["Cat"],'
    '"examples":["Kissa nukkuu."],"notes":["feline"]}'
)


class FakeAnki:
    """AnkiConnect served from memory, routed by action."""

    def __init__(
        self,
        models=None,
        fields=None,
        decks=None,
        fail_actions=(),
        available=True,
    ):
        self.models = models if models is not None else ["Basic"]
        self.fields = fields if fields is not None else {"Basic": ["Front", "Back"]}
        self.decks = decks if decks is not None else ["Default"]
        self.fail_actions = set(fail_actions)
        self.available = available
        self.requests = []
        self.notes = []

    def actions(self):
        return [r["action"] for r in self.requests]

    def post(self, url, json=None, headers=None, timeout=None):
        self.requests.append(json)
        if not self.available:
            raise requests.exceptions.ConnectionError("Connection refused")

        action = json["action"]
        if action in self.fail_actions:
            return FakeResponse(json_data={"result": None, "error": f"{action} failed"})

        if action == "version":
            result = 6
        elif action == "deckNames":
            result = self.decks
        elif action == "modelNames":
            result = self.models
        elif action == "modelFieldNames":
            model = json["params"]["modelName"]
            if model not in self.fields:
                return FakeResponse(json_data={"result": None, "error": f"model was not found: {model}"})
            result = self.fields[model]
        elif action == "addNote":
            self.notes.append(json["params"]["note"])
            result = 1000 + len(self.notes)
        else:
            return FakeResponse(json_data={"result": None, "error": "unsupported action"})

        return FakeResponse(json_data={"result": result, "error": None})
