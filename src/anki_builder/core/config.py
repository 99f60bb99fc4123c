"""Configuration management for Anki Builder."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import os
import yaml

from .exceptions import ConfigError

DEFAULT_ANKI_CONNECT_URL = "http://127.0.0.1:8765"
DEFAULT_LANGUAGE = "Finnish"

# Environment variables checked for each provider's API key, in order
API_KEY_ENV_VARS = {
    "gemini": ("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    "openai": ("OPENAI_API_KEY",),
    "openrouter": ("OPENROUTER_API_KEY",),
}


@dataclass
class ProviderConfig:
    """Configuration for an LLM provider."""
    name: str = "gemini"
    model: Optional[str] = None           # None: provider's primary model
    fallback_model: Optional[str] = None  # None: provider's fallback model
    api_key: Optional[str] = None
    api_base: Optional[str] = None
    max_tokens: int = 1000
    timeout: float = 30.0                 # seconds, per attempt

    def resolve_api_key(self) -> Optional[str]:
        """Return the configured key, else the first provider env var set."""
        if self.api_key:
            return self.api_key
        for env_var in API_KEY_ENV_VARS.get(self.name.lower(), ()):
            value = os.environ.get(env_var)
            if value:
                return value
        return None


@dataclass
class AnkiConfig:
    """Configuration for the AnkiConnect note store."""
    deck_name: Optional[str] = None
    connect_url: str = DEFAULT_ANKI_CONNECT_URL
    timeout: float = 5.0


@dataclass
class Config:
    """Main configuration for Anki Builder."""
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    anki: AnkiConfig = field(default_factory=AnkiConfig)

    # Target language; picks the prompt, note type and tags
    language: str = DEFAULT_LANGUAGE
    prompt_file: Optional[str] = None

    # Logging
    log_level: str = "INFO"
    verbose: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        """Create config from dictionary.

        Besides the nested layout, the flat camelCase keys of the
        older JSON config (geminiApiKey, ankiDeckName, ankiConnectUrl)
        are understood.
        """
        if not isinstance(data, dict):
            raise ConfigError(f"Config must be a mapping, got {type(data).__name__}")

        config = cls()

        if "provider" in data:
            provider_data = data["provider"] or {}
            if isinstance(provider_data, str):
                provider_data = {"name": provider_data}
            if not isinstance(provider_data, dict):
                raise ConfigError(
                    f"provider must be a mapping or a provider name, got {type(provider_data).__name__}",
                    config_key="provider",
                )
            config.provider = ProviderConfig(
                name=provider_data.get("name", "gemini"),
                model=provider_data.get("model"),
                fallback_model=provider_data.get("fallback_model"),
                api_key=provider_data.get("api_key"),
                api_base=provider_data.get("api_base"),
                max_tokens=provider_data.get("max_tokens", 1000),
                timeout=provider_data.get("timeout", 30.0),
            )

        if "anki" in data:
            anki_data = data["anki"] or {}
            if not isinstance(anki_data, dict):
                raise ConfigError(
                    f"anki must be a mapping, got {type(anki_data).__name__}",
                    config_key="anki",
                )
            config.anki = AnkiConfig(
                deck_name=anki_data.get("deck_name"),
                connect_url=anki_data.get("connect_url", DEFAULT_ANKI_CONNECT_URL),
                timeout=anki_data.get("timeout", 5.0),
            )

        # Flat keys from the JSON config layout
        if data.get("geminiApiKey"):
            config.provider.name = "gemini"
            config.provider.api_key = data["geminiApiKey"]
        if data.get("ankiDeckName"):
            config.anki.deck_name = data["ankiDeckName"]
        if data.get("ankiConnectUrl"):
            config.anki.connect_url = data["ankiConnectUrl"]

        config.language = data.get("language", DEFAULT_LANGUAGE)
        config.prompt_file = data.get("prompt_file")
        config.log_level = data.get("log_level", "INFO")
        config.verbose = data.get("verbose", False)

        return config

    def to_dict(self) -> dict:
        """Convert config to dictionary (API key omitted)."""
        return {
            "provider": {
                "name": self.provider.name,
                "model": self.provider.model,
                "fallback_model": self.provider.fallback_model,
                "api_base": self.provider.api_base,
                "max_tokens": self.provider.max_tokens,
                "timeout": self.provider.timeout,
            },
            "anki": {
                "deck_name": self.anki.deck_name,
                "connect_url": self.anki.connect_url,
                "timeout": self.anki.timeout,
            },
            "language": self.language,
            "prompt_file": self.prompt_file,
            "log_level": self.log_level,
        }

    def validate(self) -> None:
        """Check required values before the session starts.

        Raises:
            ConfigError: If a required value is missing or unknown
        """
        if self.provider.name.lower() not in API_KEY_ENV_VARS:
            available = ", ".join(API_KEY_ENV_VARS)
            raise ConfigError(
                f"Unknown provider: {self.provider.name}. Available: {available}",
                config_key="provider.name",
            )
        if not self.anki.deck_name:
            raise ConfigError("anki deck name config value is required", config_key="anki.deck_name")
        if not self.anki.connect_url:
            raise ConfigError("anki connect url config value is required", config_key="anki.connect_url")
        if not self.language:
            raise ConfigError("language config value is required", config_key="language")
        if not self.provider.resolve_api_key():
            env_vars = " or ".join(API_KEY_ENV_VARS[self.provider.name.lower()])
            raise ConfigError(
                f"{self.provider.name} api key config value is required (or set {env_vars})",
                config_key="provider.api_key",
            )


def config_search_paths(config_path: Optional[str] = None) -> list[Path]:
    """Paths checked by load_config, in order."""
    search_paths = []

    if config_path:
        search_paths.append(Path(config_path))

    config_home = Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config")
    search_paths.extend([
        Path("./anki_builder.yaml"),
        Path("./config.yaml"),
        Path("./config.json"),
        config_home / "anki-builder" / "config.yaml",
        config_home / "anki-builder" / "config.json",
    ])
    return search_paths


def load_config(config_path: Optional[str] = None) -> Config:
    """Load configuration from a YAML (or JSON) file or use defaults.

    Searches for config in:
    1. Provided path
    2. ./anki_builder.yaml, ./config.yaml, ./config.json
    3. $XDG_CONFIG_HOME/anki-builder/config.yaml (or .json)
    4. Falls back to defaults

    An explicitly provided path that does not exist is an error.
    """
    if config_path and not Path(config_path).exists():
        raise ConfigError(f"Config file not found: {config_path}")

    for path in config_search_paths(config_path):
        if path.exists():
            try:
                with open(path) as f:
                    data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in config file {path}: {e}")
            except OSError as e:
                raise ConfigError(f"Found but failed to read config file {path}: {e}")
            return Config.from_dict(data or {})

    return Config()


def save_config(config: Config, path: str) -> None:
    """Save configuration to YAML file."""
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.dump(config.to_dict(), f, default_flow_style=False)
