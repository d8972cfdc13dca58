"""Runtime configuration for Sortboard, read from the environment."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from .mutations import (
    DEFAULT_PARENT_CONTENT,
    DEFAULT_SUB_ITEM_CONTENT,
    CounterIdProvider,
    IdProvider,
    TokenIdProvider,
)

# --- Paths ---
OUTPUT_DIR = Path(os.environ.get("SORTBOARD_OUTPUT_DIR", Path.home() / ".sortboard" / "renders"))
TEMPLATES_DIR = Path(__file__).parent.parent.parent / "templates"
BOARD_PATH = os.environ.get("SORTBOARD_BOARD", str(TEMPLATES_DIR / "sample-board.yaml"))

# --- Labels for new rows ---
PARENT_LABEL = os.environ.get("SORTBOARD_PARENT_LABEL", DEFAULT_PARENT_CONTENT)
SUB_ITEM_LABEL = os.environ.get("SORTBOARD_SUB_ITEM_LABEL", DEFAULT_SUB_ITEM_CONTENT)

# --- Ids & logging ---
ID_STRATEGY = os.environ.get("SORTBOARD_ID_STRATEGY", "token")  # "token" or "counter"
LOG_LEVEL = os.environ.get("SORTBOARD_LOG_LEVEL", "INFO")

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def make_id_provider(strategy: str = ID_STRATEGY) -> IdProvider:
    """Build the id provider named by ``strategy``."""
    if strategy == "token":
        return TokenIdProvider()
    if strategy == "counter":
        return CounterIdProvider()
    raise ValueError(f"Unknown id strategy '{strategy}'. Valid strategies: token, counter")


def setup_logging(level: str = LOG_LEVEL) -> None:
    """Configure root logging for the command-line entry points."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )


def ensure_output_dir() -> Path:
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    return OUTPUT_DIR
