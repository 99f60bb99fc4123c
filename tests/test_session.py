"""Tests for the interactive session loop."""

import io
import threading

import pytest
from rich.console import Console

from anki_builder.anki import AnkiConnectClient, NoteSubmitter
from anki_builder.core.assembly import assemble_card
from anki_builder.core.cancellation import CancellationToken
from anki_builder.core.exceptions import (
    CancelledError,
    GenerationError,
    PayloadDecodeError,
    SubmissionError,
)
from anki_builder.core.models import GeneratedCard, GenerationRequest
from anki_builder.generation import CardGenerator, GeminiProvider
from anki_builder.generation.card_generator import GenerationResult
from anki_builder.generation.prompts import get_prompt
from anki_builder.core.config import ProviderConfig
from anki_builder.session import LineReader, Session, SessionState

from fakes import KISSA_JSON, FakeAnki, FakeResponse, FakeSession, gemini_body


class StubGenerator:
    """Returns a card per phrase, or raises the error queued for it."""

    def __init__(self, errors=None, on_generate=None):
        self.errors = errors or {}
        self.on_generate = on_generate
        self.phrases = []

    def generate(self, phrase, cancel_token=None):
        self.phrases.append(phrase)
        if self.on_generate:
            self.on_generate()
        if phrase in self.errors:
            raise self.errors[phrase]
        card = GeneratedCard(headword=phrase, translations=[phrase.upper()])
        return GenerationResult(
            request=GenerationRequest(phrase),
            card=card,
            display=assemble_card(card),
            response=None,
        )


class StubSubmitter:
    def __init__(self, errors=None):
        self.errors = errors or {}
        self.cards = []

    def submit(self, client, deck_name, card, schema=None, cancel_token=None):
        if card.primary_text in self.errors:
            raise self.errors[card.primary_text]
        self.cards.append(card)
        return len(self.cards)


class BlockingStream:
    """An input stream whose readline never returns until released."""

    def __init__(self):
        self.released = threading.Event()

    def readline(self):
        self.released.wait(10)
        return ""


class ExitRecorder:
    def __init__(self):
        self.codes = []
        self.called = threading.Event()

    def __call__(self, code):
        self.codes.append(code)
        self.called.set()


def quiet_console():
    return Console(file=io.StringIO())


def make_session(text="", generator=None, submitter=None, stream=None, **kwargs):
    console = quiet_console()
    reader = LineReader(stream=stream or io.StringIO(text), console=console, poll_interval=0.01)
    return Session(
        generator=generator or StubGenerator(),
        submitter=submitter or StubSubmitter(),
        client=None,
        deck_name="Default",
        reader=reader,
        console=console,
        force_exit=kwargs.pop("force_exit", ExitRecorder()),
        **kwargs,
    )


class TestLineReader:
    """Tests for the cancellable background reader."""

    def test_reads_stripped_lines(self):
        reader = LineReader(stream=io.StringIO("  kissa  \nkoira\n"), console=quiet_console(), prompt="")
        token = CancellationToken()
        assert reader.read_line(token) == "kissa"
        assert reader.read_line(token) == "koira"

    def test_end_of_input(self):
        reader = LineReader(stream=io.StringIO(""), console=quiet_console())
        assert reader.read_line(CancellationToken()) is None

    def test_cancelled_read(self):
        """Test a blocked read is abandoned once the token is cancelled."""
        stream = BlockingStream()
        reader = LineReader(stream=stream, console=quiet_console(), poll_interval=0.01)
        token = CancellationToken()
        threading.Timer(0.05, token.cancel).start()
        try:
            with pytest.raises(CancelledError):
                reader.read_line(token)
        finally:
            stream.released.set()

    def test_undecodable_line_skipped(self):
        """Test a line that is not valid UTF-8 is skipped, not treated as end of input."""
        stream = io.TextIOWrapper(io.BytesIO(b"k\xe4ssa\nkoira\ntalo\n"), encoding="utf-8")
        generator = StubGenerator()
        session = make_session(stream=stream, generator=generator)

        assert session.run() == 0
        assert generator.phrases == ["koira", "talo"]
        assert "Could not decode" in session.console.file.getvalue()

    def test_prompt_written(self):
        console = quiet_console()
        reader = LineReader(stream=io.StringIO("x\n"), console=console, prompt="> ")
        reader.read_line(CancellationToken())
        assert console.file.getvalue().startswith(">")


class TestSessionLoop:
    """Tests for session state transitions."""

    @pytest.mark.parametrize("token", ["q", "quit", "exit", "QUIT", "  exit  "])
    def test_exit_tokens(self, token):
        """Test exit tokens terminate without any generation."""
        generator = StubGenerator()
        session = make_session(f"{token}\nkissa\n", generator=generator)

        assert session.run() == 0
        assert session.state == SessionState.TERMINATED
        assert generator.phrases == []

    def test_end_of_input(self):
        session = make_session("kissa\n")
        assert session.run() == 0
        assert session.state == SessionState.TERMINATED
        assert session.stats.added == 1

    def test_blank_lines_ignored(self):
        generator = StubGenerator()
        session = make_session("\n   \nkissa\n\nq\n", generator=generator)
        session.run()
        assert generator.phrases == ["kissa"]

    def test_phrases_in_order(self):
        generator = StubGenerator()
        submitter = StubSubmitter()
        session = make_session("kissa\nkoira\ntalo\n", generator=generator, submitter=submitter)
        session.run()

        assert generator.phrases == ["kissa", "koira", "talo"]
        assert [c.primary_text for c in submitter.cards] == ["kissa", "koira", "talo"]

    def test_generation_failure_continues(self):
        """Test a failed generation is reported and the loop goes on."""
        generator = StubGenerator(errors={
            "bad": GenerationError("both failed"),
            "junk": PayloadDecodeError("broken", payload="{"),
        })
        submitter = StubSubmitter()
        session = make_session("bad\njunk\nkissa\n", generator=generator, submitter=submitter)

        assert session.run() == 0
        assert [c.primary_text for c in submitter.cards] == ["kissa"]
        assert session.stats.failed == 2
        assert session.stats.added == 1
        output = session.console.file.getvalue()
        assert "Error generating card: both failed" in output

    def test_submission_failure_continues(self):
        submitter = StubSubmitter(errors={"kissa": SubmissionError("deck missing")})
        session = make_session("kissa\nkoira\n", submitter=submitter)

        assert session.run() == 0
        assert [c.primary_text for c in submitter.cards] == ["koira"]
        assert "Error adding card to Anki: deck missing" in session.console.file.getvalue()

    def test_cancel_while_awaiting_input(self):
        """Test a shutdown during a blocked read exits without generating."""
        stream = BlockingStream()
        generator = StubGenerator()
        recorder = ExitRecorder()
        session = make_session(stream=stream, generator=generator, force_exit=recorder, grace_period=0.2)

        threading.Timer(0.05, session.request_shutdown, args=("SIGINT",)).start()
        try:
            assert session.run() == 0
        finally:
            stream.released.set()

        assert session.state == SessionState.CANCELLED
        assert generator.phrases == []
        # graceful exit disarms the watchdog
        assert not recorder.called.wait(0.4)

    def test_cancellation_wins_over_error(self):
        """Test an error raised after shutdown was requested ends the session."""
        submitter = StubSubmitter()
        session = None

        def shutdown():
            session.request_shutdown("SIGTERM")

        generator = StubGenerator(errors={"kissa": GenerationError("aborted")}, on_generate=shutdown)
        session = make_session("kissa\nkoira\n", generator=generator, submitter=submitter)

        assert session.run() == 0
        assert session.state == SessionState.CANCELLED
        assert generator.phrases == ["kissa"]
        assert submitter.cards == []
        assert session.stats.failed == 0

    def test_no_new_work_after_cancel(self):
        generator = StubGenerator()
        session = make_session("kissa\n", generator=generator)
        session.cancel_token.cancel()
        session.run()
        assert generator.phrases == []
        assert session.state == SessionState.CANCELLED


class TestShutdown:
    """Tests for the force-exit watchdog."""

    def test_watchdog_forces_exit(self):
        """Test the process is force-exited when the grace period elapses."""
        recorder = ExitRecorder()
        session = make_session(force_exit=recorder, grace_period=0.05)
        session.request_shutdown("SIGTERM")

        assert recorder.called.wait(2)
        assert recorder.codes == [1]
        assert session.cancel_token.cancelled

    def test_second_signal_ignored(self):
        recorder = ExitRecorder()
        session = make_session(force_exit=recorder, grace_period=0.05)
        session.request_shutdown("SIGINT")
        first = session._watchdog
        session.request_shutdown("SIGINT")

        assert session._watchdog is first
        assert session.cancel_token.reason == "SIGINT"
        recorder.called.wait(2)
        assert recorder.codes == [1]


class TestSessionEndToEnd:
    """Tests wiring the real generator and submitter with fake endpoints."""

    def test_kissa(self):
        """Test one phrase goes through generation into a rich note."""
        llm = GeminiProvider(
            ProviderConfig(name="gemini", api_key="k"),
            session=FakeSession(FakeResponse(json_data=gemini_body(KISSA_JSON))),
        )
        store = FakeAnki(
            models=["Basic", "Finnish"],
            fields={"Finnish": ["Finnish", "Translation", "Finnish Example", "Notes"]},
        )
        console = quiet_console()
        session = Session(
            generator=CardGenerator(llm, get_prompt("Finnish"), "Finnish"),
            submitter=NoteSubmitter("Finnish"),
            client=AnkiConnectClient("http://anki", session=store),
            deck_name="Suomi",
            reader=LineReader(stream=io.StringIO("kissa\nquit\n"), console=console, poll_interval=0.01),
            console=console,
            force_exit=ExitRecorder(),
        )

        assert session.run() == 0
        assert store.notes[0]["fields"]["Finnish"] == "kissa"
        assert store.notes[0]["fields"]["Translation"] == "- cat"
        assert "Successfully added card for 'kissa'" in console.file.getvalue()

    def test_quit_makes_no_calls(self):
        """Test typing quit issues no AI or note-store requests."""
        ai = FakeSession()
        store = FakeAnki()
        llm = GeminiProvider(ProviderConfig(name="gemini", api_key="k"), session=ai)
        console = quiet_console()
        session = Session(
            generator=CardGenerator(llm, get_prompt("Finnish"), "Finnish"),
            submitter=NoteSubmitter("Finnish"),
            client=AnkiConnectClient("http://anki", session=store),
            deck_name="Suomi",
            reader=LineReader(stream=io.StringIO("quit\n"), console=console),
            console=console,
            force_exit=ExitRecorder(),
        )

        assert session.run() == 0
        assert ai.calls == []
        assert store.requests == []
