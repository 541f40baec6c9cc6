"""System prompt for the agent.

Resolution order: an explicit override (``SYSTEM_PROMPT``), then the prompt file
at ``SYSTEM_PROMPT_PATH`` if it exists, then the packaged ``base.txt``.
"""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_SECTION = "base"


def _prompts_dir() -> Path:
    """Directory containing prompt .txt files (next to this __init__.py)."""
    return Path(__file__).resolve().parent


def _read_prompt(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8").strip()
    except OSError as e:
        logger.warning("Failed to read prompt file %s: %s", path, e)
        return ""


def load_default_prompt() -> str:
    path = _prompts_dir() / f"{DEFAULT_SECTION}.txt"
    if not path.exists():
        logger.warning("Prompt section not found: %s", path)
        return ""
    return _read_prompt(path)


def get_system_prompt(override: str | None = None, path: str | Path | None = None) -> str:
    """Return the system prompt to use for the agent.

    Args:
        override: If set (e.g. from SYSTEM_PROMPT env), used verbatim.
        path: Prompt file to read when no override is given; skipped if missing or empty.

    Returns:
        Final system prompt string.
    """
    if override and override.strip():
        return override.strip()
    if path:
        prompt_path = Path(path)
        if prompt_path.is_file():
            content = _read_prompt(prompt_path)
            if content:
                logger.info("Loaded system prompt from %s", prompt_path)
                return content
    return load_default_prompt()


__all__ = ["get_system_prompt", "load_default_prompt"]
