"""Command-line interface for Anki Builder."""

import logging
import os
import sys
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .anki import AnkiConnectClient, NoteSchemaResolver, NoteSubmitter, rich_field_names
from .core.config import Config, load_config
from .core.exceptions import AnkiBuilderError, ConfigError
from .generation import CardGenerator, get_provider, list_providers
from .generation.prompts import get_prompt
from .session import Session

# Rich console for enhanced output
console = Console()

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s',
    datefmt='%H:%M:%S'
)
logger = logging.getLogger(__name__)

PROVIDER_CHOICES = ['gemini', 'openai', 'openrouter']

EXIT_STARTUP_FAILURE = 1
EXIT_CONFIG_ERROR = 2


def _load_settings(
    config_path: Optional[str],
    provider: Optional[str] = None,
    model: Optional[str] = None,
    fallback_model: Optional[str] = None,
    deck: Optional[str] = None,
    language: Optional[str] = None,
    anki_url: Optional[str] = None,
) -> Config:
    """Load config and apply CLI overrides."""
    cfg = load_config(config_path)

    if provider and provider != cfg.provider.name:
        cfg.provider.name = provider
        # Models from the file belong to another provider
        cfg.provider.model = None
        cfg.provider.fallback_model = None
        cfg.provider.api_key = None
    if model:
        cfg.provider.model = model
    if fallback_model:
        cfg.provider.fallback_model = fallback_model
    if deck:
        cfg.anki.deck_name = deck
    if language:
        cfg.language = language
    if anki_url:
        cfg.anki.connect_url = anki_url

    return cfg


def _set_log_level(cfg: Config, verbose: bool) -> None:
    if verbose or cfg.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    else:
        logging.getLogger().setLevel(cfg.log_level.upper())


@click.group()
@click.version_option(version="0.1.0")
def cli():
    """Anki Builder - Turn foreign words into Anki vocabulary cards.

    Type a word or phrase, an LLM writes translations, example
    sentences and notes, and the card is added to Anki through the
    AnkiConnect add-on.

    \b
    QUICK START:
        anki-builder init-config config.yaml
        anki-builder run --deck Finnish
    """
    pass


@cli.command()
@click.option('-c', '--config', 'config_path', type=click.Path(exists=True), help='Config file path')
@click.option('--provider', type=click.Choice(PROVIDER_CHOICES), help='LLM provider (default: gemini)')
@click.option('--model', type=str, help='Primary model name')
@click.option('--fallback-model', type=str, help='Model tried once when the primary fails')
@click.option('--deck', type=str, help='Anki deck to add cards to')
@click.option('--language', type=str, help='Target language (default: Finnish)')
@click.option('--anki-url', type=str, help='AnkiConnect URL (default: http://127.0.0.1:8765)')
@click.option('-v', '--verbose', is_flag=True, help='Verbose output')
def run(
    config_path: str,
    provider: str,
    model: str,
    fallback_model: str,
    deck: str,
    language: str,
    anki_url: str,
    verbose: bool,
):
    """Start an interactive card building session.

    Enter words or phrases one per line. Exit with 'q', 'quit',
    'exit', end of input or Ctrl+C.
    """
    try:
        cfg = _load_settings(config_path, provider, model, fallback_model, deck, language, anki_url)
        _set_log_level(cfg, verbose)
        cfg.validate()
        llm = get_provider(cfg.provider)
        prompt = get_prompt(cfg.language, cfg.prompt_file)
    except (ConfigError, ValueError) as e:
        console.print(f"[bold red]Configuration error:[/bold red] {escape(str(e))}")
        sys.exit(EXIT_CONFIG_ERROR)

    client = AnkiConnectClient(cfg.anki.connect_url, timeout=cfg.anki.timeout)
    if not client.is_available():
        console.print(
            f"[bold red]Error:[/bold red] AnkiConnect is not available at {cfg.anki.connect_url}. "
            "Is Anki running with the AnkiConnect add-on?"
        )
        sys.exit(EXIT_STARTUP_FAILURE)

    try:
        decks = client.deck_names()
        if cfg.anki.deck_name not in decks:
            console.print(
                f"[yellow]Warning:[/yellow] deck '{escape(cfg.anki.deck_name)}' not found in Anki; "
                "adding notes will fail until it exists"
            )
    except AnkiBuilderError as e:
        logger.warning(f"Could not list decks: {e}")

    session = Session(
        generator=CardGenerator(llm, prompt, cfg.language),
        submitter=NoteSubmitter(cfg.language),
        client=client,
        deck_name=cfg.anki.deck_name,
        console=console,
    )
    session.install_signal_handlers()

    console.print(Panel.fit(
        f"[bold]Provider:[/bold] {llm.get_name()} ({llm.primary_model}, fallback {llm.fallback_model})\n"
        f"[bold]Deck:[/bold] {escape(cfg.anki.deck_name)}\n"
        f"[bold]Language:[/bold] {escape(cfg.language)}",
        title=f"[bold cyan]{escape(cfg.language)} Anki Card Builder[/bold cyan]",
        border_style="cyan"
    ))
    console.print(
        f"Enter {escape(cfg.language)} words or phrases "
        "(to exit use Ctrl+C or type 'q', 'quit' or 'exit'):"
    )

    sys.exit(session.run())


@cli.command()
def providers():
    """List available LLM providers and their status."""
    table = Table(title="Available LLM Providers")
    table.add_column("Provider", style="cyan")
    table.add_column("Free", style="green")
    table.add_column("Default Model", style="white")
    table.add_column("Fallback Model", style="white")
    table.add_column("Status", style="yellow")

    for name, info in list_providers().items():
        free_badge = "✓" if info['free'] else ""
        if any(os.environ.get(var) for var in info['env_vars']):
            status = "✓ Key set"
        else:
            status = f"Set {' or '.join(info['env_vars'])}"

        table.add_row(name, free_badge, info['default_model'], info['fallback_model'], status)

    console.print(table)


@cli.command()
@click.option('-c', '--config', 'config_path', type=click.Path(exists=True), help='Config file path')
@click.option('--language', type=str, help='Target language')
@click.option('--anki-url', type=str, help='AnkiConnect URL')
def check(config_path: str, language: str, anki_url: str):
    """Check AnkiConnect and show the note type cards would use."""
    try:
        cfg = _load_settings(config_path, language=language, anki_url=anki_url)
    except ConfigError as e:
        console.print(f"[bold red]Configuration error:[/bold red] {escape(str(e))}")
        sys.exit(EXIT_CONFIG_ERROR)

    client = AnkiConnectClient(cfg.anki.connect_url, timeout=cfg.anki.timeout)
    console.print(f"[bold]Checking AnkiConnect at {cfg.anki.connect_url}...[/bold]\n")

    try:
        version = client.version()
    except AnkiBuilderError as e:
        console.print(f"[red]✗[/red] AnkiConnect not available: {escape(str(e))}")
        sys.exit(EXIT_STARTUP_FAILURE)

    console.print(f"[green]✓[/green] AnkiConnect is running (API version {version})")

    try:
        console.print(f"  Decks: {escape(', '.join(client.deck_names()) or 'None')}")
        schema = NoteSchemaResolver().resolve(client, cfg.language)
    except AnkiBuilderError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(EXIT_STARTUP_FAILURE)

    table = Table(title=f"Note type for {escape(cfg.language)} cards")
    table.add_column("Note type", style="cyan")
    table.add_column("Fields", style="white")
    table.add_column("Layout", style="yellow")

    rich_fields = rich_field_names(cfg.language)
    layout = "rich" if schema.has_fields(rich_fields) else "front/back"
    table.add_row(schema.note_type, ", ".join(schema.field_names), layout)
    console.print(table)

    if schema.degraded:
        console.print(f"[yellow]Warning:[/yellow] {escape(str(schema.warning))}")
    elif layout != "rich":
        console.print(
            f"Tip: a note type named like '{escape(cfg.language)}' with fields "
            f"{escape(', '.join(rich_fields))} gets one field per section"
        )


@cli.command()
@click.argument('phrase')
@click.option('-c', '--config', 'config_path', type=click.Path(exists=True), help='Config file path')
@click.option('--language', type=str, help='Target language')
def prompt(phrase: str, config_path: str, language: str):
    """Show the prompt that would be sent for PHRASE."""
    try:
        cfg = _load_settings(config_path, language=language)
        template = get_prompt(cfg.language, cfg.prompt_file)
    except ConfigError as e:
        console.print(f"[bold red]Configuration error:[/bold red] {escape(str(e))}")
        sys.exit(EXIT_CONFIG_ERROR)

    console.print(template.render(phrase, language=cfg.language), markup=False, highlight=False)


@cli.command()
@click.argument('output_path', type=click.Path())
def init_config(output_path: str):
    """Create a sample configuration file."""
    sample_config = """# Anki Builder Configuration

provider:
  name: gemini            # gemini, openai, openrouter
  # model: gemini-2.5-flash
  # fallback_model: gemini-2.0-flash
  # api_key: ...          # optional, uses GEMINI_API_KEY / OPENAI_API_KEY / OPENROUTER_API_KEY
  timeout: 30             # seconds per attempt

anki:
  deck_name: Finnish
  connect_url: http://127.0.0.1:8765
  timeout: 5

language: Finnish
# prompt_file: ./my_prompt.yaml   # keys: name, language, template ({phrase}, {language})
#                                 # literal braces in the template must be doubled: {{ }}

log_level: INFO
"""
    with open(output_path, 'w') as f:
        f.write(sample_config)

    console.print(f"[green]✓[/green] Created config file: [cyan]{output_path}[/cyan]")
    console.print(f"  Edit this file and run: [dim]anki-builder run -c {output_path}[/dim]")


def main():
    """Entry point."""
    cli()


if __name__ == "__main__":
    main()
