"""
Configuration for Geography 3-Mark Buddy.

The API key is expected in a .env file at the project root (or in the
process environment):

    OPENAI_API_KEY=sk-...

API_KEY is accepted as a fallback name. We use python-dotenv + os.environ so
secrets stay out of git. Optional overrides:

    GEO_BUDDY_QUESTION_MODEL   model used to write questions (default gpt-4o-mini)
    GEO_BUDDY_GRADING_MODEL    model used to mark answers (default gpt-4o)
    GEO_BUDDY_RUBRIC_FILE      text file replacing the default marking rubric
    GEO_BUDDY_TIMEOUT          request timeout in seconds (default 60)
    GEO_BUDDY_DEBUG            0 to silence the debug logger
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from .errors import ConfigurationError
from .logger import logger
from .schemas import DEFAULT_RUBRIC

API_KEY_VARIABLES = ("OPENAI_API_KEY", "API_KEY")

# Fast model for question writing, stronger model for marking
DEFAULT_QUESTION_MODEL = "gpt-4o-mini"
DEFAULT_GRADING_MODEL = "gpt-4o"
DEFAULT_TIMEOUT_SECONDS = 60.0

# Values copied from templates rather than a real key
PLACEHOLDER_KEYS = {"sk-...", "your-api-key", "your_api_key_here", "PLACEHOLDER_API_KEY"}


@dataclass
class Settings:
    api_key: Optional[str] = None
    question_model: str = DEFAULT_QUESTION_MODEL
    grading_model: str = DEFAULT_GRADING_MODEL
    rubric: str = DEFAULT_RUBRIC
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    debug: bool = True


def mask_key(api_key: str) -> str:
    """Mask an API key for logging (first 8 and last 4 chars)."""
    if len(api_key) > 12:
        return f"{api_key[:8]}...{api_key[-4:]}"
    return "***"


def validate_api_key(api_key: Optional[str]) -> str:
    """
    Return the cleaned key or raise ConfigurationError.

    Called before any client is built, so a bad key never reaches the network.
    """
    if api_key is None or not api_key.strip():
        raise ConfigurationError(
            "OpenAI API key not found. Add OPENAI_API_KEY=sk-... to a .env file "
            "in the project folder and restart the app."
        )
    key = api_key.strip()
    if any(ch.isspace() for ch in key):
        raise ConfigurationError("The OpenAI API key contains whitespace; check your .env file.")
    if key in PLACEHOLDER_KEYS:
        raise ConfigurationError("The OpenAI API key is still the template placeholder.")
    return key


def _read_rubric(path_value: str) -> str:
    path = Path(path_value).expanduser()
    try:
        rubric = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Could not read rubric file {path}: {e}") from e
    if not rubric.strip():
        raise ConfigurationError(f"Rubric file {path} is empty")
    return rubric


def _parse_timeout(raw: str) -> float:
    try:
        timeout = float(raw)
    except ValueError as e:
        raise ConfigurationError(f"GEO_BUDDY_TIMEOUT must be a number, got {raw!r}") from e
    if timeout <= 0:
        raise ConfigurationError("GEO_BUDDY_TIMEOUT must be positive")
    return timeout


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from the environment.

    When no mapping is given, the .env file is loaded into os.environ first.
    A missing API key is not an error here; the client reports it when
    configured so the UI can show it instead of crashing.
    """
    if environ is None:
        logger.env("Loading environment variables from .env file...")
        if load_dotenv():
            logger.env_success("dotenv file loaded successfully")
        else:
            logger.warning("No .env file found or file is empty")
        environ = os.environ

    api_key = None
    for name in API_KEY_VARIABLES:
        if environ.get(name):
            api_key = environ[name]
            logger.env_success(f"{name} found: {mask_key(api_key.strip())}")
            break
    else:
        logger.env_error("OPENAI_API_KEY not found in environment!")

    settings = Settings(
        api_key=api_key,
        question_model=environ.get("GEO_BUDDY_QUESTION_MODEL") or DEFAULT_QUESTION_MODEL,
        grading_model=environ.get("GEO_BUDDY_GRADING_MODEL") or DEFAULT_GRADING_MODEL,
        debug=environ.get("GEO_BUDDY_DEBUG", "1").strip().lower() not in ("0", "false", "no", "off"),
    )

    if environ.get("GEO_BUDDY_TIMEOUT"):
        settings.timeout = _parse_timeout(environ["GEO_BUDDY_TIMEOUT"])
    if environ.get("GEO_BUDDY_RUBRIC_FILE"):
        settings.rubric = _read_rubric(environ["GEO_BUDDY_RUBRIC_FILE"])
        logger.env(f"Custom rubric loaded from {environ['GEO_BUDDY_RUBRIC_FILE']}")

    logger.env(f"Question model: {settings.question_model}")
    logger.env(f"Grading model: {settings.grading_model}")
    return settings
