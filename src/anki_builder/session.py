"""Interactive session: read a phrase, generate a card, file it in Anki.

The main thread processes one phrase end-to-end before reading the
next. Input is read on a daemon thread so that a shutdown signal can
interrupt a pending read. A signal sets the shared CancellationToken
and arms a watchdog that hard-exits the process if in-flight work has
not unwound within the grace period.
"""

import logging
import os
import queue
import signal
import sys
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, TextIO

from rich.console import Console
from rich.markup import escape

from .anki import AnkiConnectClient, NoteSubmitter
from .core.cancellation import CancellationToken
from .core.exceptions import AnkiBuilderError, CancelledError
from .generation import CardGenerator

logger = logging.getLogger(__name__)

EXIT_TOKENS = frozenset({"q", "quit", "exit"})
SHUTDOWN_GRACE_PERIOD = 5.0  # seconds
FORCED_EXIT_CODE = 1
UNDECODABLE = "\ufffd"


class SessionState(Enum):
    AWAITING_INPUT = "awaiting_input"
    GENERATING = "generating"
    SUBMITTING = "submitting"
    CANCELLED = "cancelled"
    TERMINATED = "terminated"


@dataclass
class SessionStats:
    added: int = 0
    failed: int = 0


class LineReader:
    """Reads one line at a time on a background thread.

    read_line() returns the stripped line, or None at end of input, and
    raises CancelledError as soon as the token is cancelled even if the
    read is still blocked.
    """

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        console: Optional[Console] = None,
        prompt: str = "> ",
        poll_interval: float = 0.1,
    ):
        self.stream = stream or sys.stdin
        # Undecodable bytes become U+FFFD so one bad line does not end the input
        if hasattr(self.stream, "reconfigure"):
            self.stream.reconfigure(errors="replace")
        self.console = console or Console()
        self.prompt = prompt
        self.poll_interval = poll_interval

    def _read_into(self, results: queue.Queue) -> None:
        if self.prompt:
            self.console.print(self.prompt, end="", markup=False, highlight=False)
        try:
            line = self.stream.readline()
        except UnicodeDecodeError as e:
            logger.warning(f"Input is not valid text: {e}")
            line = UNDECODABLE
        except (OSError, ValueError) as e:
            logger.debug(f"Input stream closed: {e}")
            line = ""
        if UNDECODABLE in line:
            self.console.print("[yellow]Could not decode that line; skipping it[/yellow]")
            line = "\n"
        results.put(line.strip() if line else None)

    def read_line(self, cancel_token: CancellationToken) -> Optional[str]:
        results = queue.Queue(maxsize=1)
        reader = threading.Thread(target=self._read_into, args=(results,), name="line-reader", daemon=True)
        reader.start()

        while not cancel_token.cancelled:
            try:
                line = results.get(timeout=self.poll_interval)
            except queue.Empty:
                continue
            # cancellation wins over a line that arrived at the same time
            cancel_token.raise_if_cancelled()
            return line

        # The reader thread is abandoned; it is a daemon and dies with the process
        raise CancelledError("Input read abandoned")


class Session:
    """The interactive read-generate-submit loop.

    AWAITING_INPUT -> GENERATING -> SUBMITTING -> AWAITING_INPUT, until an
    exit token or end of input (TERMINATED) or a shutdown signal
    (CANCELLED). A failed phrase is reported and the loop carries on.
    """

    def __init__(
        self,
        generator: CardGenerator,
        submitter: NoteSubmitter,
        client: AnkiConnectClient,
        deck_name: str,
        cancel_token: Optional[CancellationToken] = None,
        reader: Optional[LineReader] = None,
        console: Optional[Console] = None,
        grace_period: float = SHUTDOWN_GRACE_PERIOD,
        force_exit: Callable[[int], None] = os._exit,
    ):
        self.generator = generator
        self.submitter = submitter
        self.client = client
        self.deck_name = deck_name
        self.cancel_token = cancel_token or CancellationToken()
        self.console = console or Console()
        self.reader = reader or LineReader(console=self.console)
        self.grace_period = grace_period
        self.force_exit = force_exit

        self.state = SessionState.AWAITING_INPUT
        self.stats = SessionStats()
        self._watchdog: Optional[threading.Timer] = None

    # Shutdown

    def install_signal_handlers(self) -> None:
        """Route SIGINT and SIGTERM to request_shutdown (main thread only)."""
        def handler(signum, frame):
            self.request_shutdown(signal.Signals(signum).name)

        signal.signal(signal.SIGINT, handler)
        signal.signal(signal.SIGTERM, handler)

    def request_shutdown(self, reason: str = "shutdown requested") -> None:
        """Cancel the session and start the force-exit watchdog.

        Safe to call more than once; only the first call has an effect.
        """
        if not self.cancel_token.cancel(reason):
            return

        self.console.print(f"\nReceived {reason} signal. Shutting down...")
        self._watchdog = threading.Timer(self.grace_period, self._force_exit)
        self._watchdog.daemon = True
        self._watchdog.start()

    def _force_exit(self) -> None:
        self.console.print(f"Waited {self.grace_period:.0f}s, force exit triggered")
        logger.error("In-flight work did not finish within the shutdown grace period")
        self.force_exit(FORCED_EXIT_CODE)

    def _stop_watchdog(self) -> None:
        if self._watchdog is not None:
            self._watchdog.cancel()
            self._watchdog = None

    # Loop

    def run(self) -> int:
        """Run until terminated or cancelled; returns the exit code."""
        self.state = SessionState.AWAITING_INPUT

        try:
            while True:
                self.state = SessionState.AWAITING_INPUT
                self.cancel_token.raise_if_cancelled()

                line = self.reader.read_line(self.cancel_token)
                if line is None or line.lower() in EXIT_TOKENS:
                    self.state = SessionState.TERMINATED
                    break
                if not line:
                    continue

                self.process(line)

        except KeyboardInterrupt:
            self.request_shutdown("SIGINT")
            self.state = SessionState.CANCELLED
            self.console.print("Operation cancelled. Shutting down...")
        except CancelledError:
            self.state = SessionState.CANCELLED
            self.console.print("Operation cancelled. Shutting down...")
        finally:
            self._stop_watchdog()

        if self.stats.added or self.stats.failed:
            self.console.print(f"Added {self.stats.added} card(s), {self.stats.failed} failed")
        self.console.print("Goodbye!")
        return 0

    def process(self, phrase: str) -> bool:
        """Generate and submit one card. Returns True when a note was added.

        Raises:
            CancelledError: If shutdown was requested while working
        """
        self.console.print(f"Processing: {escape(phrase)}")

        self.state = SessionState.GENERATING
        try:
            result = self.generator.generate(phrase, self.cancel_token)
        except CancelledError:
            raise
        except AnkiBuilderError as e:
            self.cancel_token.raise_if_cancelled()
            return self._report_failure(f"Error generating card: {e}")

        self.state = SessionState.SUBMITTING
        try:
            self.submitter.submit(
                self.client,
                self.deck_name,
                result.display,
                cancel_token=self.cancel_token,
            )
        except CancelledError:
            raise
        except AnkiBuilderError as e:
            self.cancel_token.raise_if_cancelled()
            return self._report_failure(f"Error adding card to Anki: {e}")

        self.stats.added += 1
        self.console.print(f"[green]✓[/green] Successfully added card for '{escape(phrase)}'\n")
        return True

    def _report_failure(self, message: str) -> bool:
        self.stats.failed += 1
        logger.debug(message)
        self.console.print(f"[red]{escape(message)}[/red]", highlight=False)
        return False
