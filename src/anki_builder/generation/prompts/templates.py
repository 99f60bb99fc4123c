"""Prompt template management."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import yaml
import logging

from ...core.exceptions import ConfigError

logger = logging.getLogger(__name__)


@dataclass
class PromptTemplate:
    """An instruction template for one target language.

    The template is a str.format string with {phrase} and {language}
    placeholders; literal braces must be doubled.
    """
    name: str
    template: str
    language: str = ""
    description: str = ""
    version: str = "1.0"

    def render(self, phrase: str, language: Optional[str] = None) -> str:
        """Substitute the user phrase (and language name) into the template."""
        return self.template.format(phrase=phrase, language=language or self.language)


def load_prompt(path: str) -> PromptTemplate:
    """Load a prompt template from YAML file."""
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load prompt template {path}: {e}", config_key="prompt_file")

    if not isinstance(data, dict) or not data.get("template"):
        raise ConfigError(f"Prompt template {path} has no 'template' key", config_key="prompt_file")

    # Fail at load time rather than on the first phrase
    try:
        data["template"].format(phrase="", language="")
    except (KeyError, IndexError, ValueError, AttributeError) as e:
        raise ConfigError(
            f"Prompt template {path} is not a valid format string ({e!r}); "
            "use {phrase} and {language} as placeholders and double any literal braces",
            config_key="prompt_file",
        )

    return PromptTemplate(
        name=data.get("name", Path(path).stem),
        template=data["template"],
        language=data.get("language", ""),
        description=data.get("description", ""),
        version=str(data.get("version", "1.0")),
    )


def get_builtin_prompts() -> dict[str, PromptTemplate]:
    """Get all built-in prompt templates, keyed by lower-case name."""
    return {
        "finnish": get_finnish_prompt(),
        "generic": get_generic_prompt(),
    }


def get_prompt(language: str, prompt_file: Optional[str] = None) -> PromptTemplate:
    """Pick the template for a language.

    A prompt file wins; otherwise the built-in template named after the
    language, falling back to the generic one.
    """
    if prompt_file:
        return load_prompt(prompt_file)

    prompts = get_builtin_prompts()
    prompt = prompts.get(language.lower())
    if prompt is None:
        logger.debug(f"No built-in prompt for {language}, using generic template")
        prompt = prompts["generic"]
    return prompt


def get_finnish_prompt() -> PromptTemplate:
    """Finnish vocabulary prompt, tuned for learners at B1-B2 level."""
    return PromptTemplate(
        name="finnish",
        language="Finnish",
        description="Finnish vocabulary cards with synonyms, etymology and puhekieli forms",
        template='''You are a Finnish language expert helping to create Anki flashcards for language learners.

For the Finnish word/phrase: "{phrase}"

Please provide a JSON response with the following structure:
{{
  "phrase": "the original Finnish word/phrase in dictionary form, lowercase",
  "translations": ["translation1", "translation2", ...],
  "examples": [
    "Example sentence 1 in Finnish",
    "Example sentence 2 in Finnish",
    "Example sentence 3 in Finnish",
    "Example sentence 4 in Finnish"
  ],
  "notes": [
    "synonyms: abc, def...",
    "etymology: short info on word origin",
    "extra: grammatical information, usage quirks, and any other useful information for language learners"
  ]
}}

Guidelines:
- Provide all relevant translations (most common meanings)
- Create 3-4 example sentences at B1-B2 level, try to include examples for different translations of the word/phrase
- Make examples natural and contextually rich
- Use the word in different grammatical cases/forms when possible
- Include etymology, synonyms, grammatical notes, and usage tips in the notes section, but don't add obvious information - keep it concise.
- Use lowercase for notes
- Make sure to add puhekieli versions of the word to synonyms if applicable
- Try not to skip etymology if available
- Keep the prefixes of the notes consistent (e.g. always use "synonyms:", "etymology:", "extra:")
- Ensure JSON is properly formatted

Respond ONLY with the JSON, no additional text.''',
    )


def get_generic_prompt() -> PromptTemplate:
    """Language-agnostic vocabulary prompt."""
    return PromptTemplate(
        name="generic",
        description="Vocabulary cards for any language",
        template='''You are a {language} language expert helping to create Anki flashcards for language learners.

For the {language} word/phrase: "{phrase}"

Please provide a JSON response with the following structure:
{{
  "phrase": "the original {language} word/phrase in dictionary form",
  "translations": ["translation1", "translation2", ...],
  "examples": [
    "Example sentence 1 in {language}",
    "Example sentence 2 in {language}",
    "Example sentence 3 in {language}"
  ],
  "notes": [
    "synonyms: abc, def...",
    "etymology: short info on word origin",
    "extra: grammatical information and usage notes"
  ]
}}

Guidelines:
- Provide the most common English translations
- Create 3-4 natural example sentences at intermediate level
- Keep notes concise and use lowercase
- Keep the prefixes of the notes consistent ("synonyms:", "etymology:", "extra:")
- Ensure JSON is properly formatted

Respond ONLY with the JSON, no additional text.''',
    )
