"""
Theme definitions for Sortboard.

Provides dark and light color palettes for rendering boards.
Each theme defines colors for:
- Board background and title
- Lists (idle and while something is dragged over them)
- Cards (idle and while being dragged)
- The drag handle
"""

from __future__ import annotations
from dataclasses import dataclass


@dataclass
class ThemePalette:
    """Color palette for a theme."""

    # Board
    background: str
    title_color: str

    # Lists (top-level list and each sub-item list)
    list_fill: str
    list_fill_over: str

    # Cards (items and sub-items)
    card_fill: str
    card_fill_dragging: str
    card_text: str
    sub_card_fill: str

    # Drag handle
    handle_border: str
    handle_text: str


# Light theme - the browser board's greys and highlights
LIGHT_THEME = ThemePalette(
    background="#ffffff",
    title_color="#1e1e2e",
    list_fill="#d3d3d3",       # lightgrey
    list_fill_over="#add8e6",  # lightblue
    card_fill="#808080",       # grey
    card_fill_dragging="#90ee90",  # lightgreen
    card_text="#000000",
    sub_card_fill="#a9a9a9",
    handle_border="#000000",
    handle_text="#000000",
)


# Catppuccin Mocha (dark theme)
DARK_THEME = ThemePalette(
    background="#11111b",
    title_color="#cdd6f4",
    list_fill="#181825",
    list_fill_over="#1e3a5f",
    card_fill="#313244",
    card_fill_dragging="#2f5d3a",
    card_text="#cdd6f4",
    sub_card_fill="#45475a",
    handle_border="#a6adc8",
    handle_text="#a6adc8",
)


# Theme registry
THEMES: dict[str, ThemePalette] = {
    "dark": DARK_THEME,
    "light": LIGHT_THEME,
}


def get_theme(name: str) -> ThemePalette:
    """Get a theme palette by name.

    Args:
        name: Theme name ("dark" or "light")

    Returns:
        ThemePalette for the requested theme

    Raises:
        ValueError: If theme name is not recognized
    """
    if name not in THEMES:
        valid = ", ".join(THEMES.keys())
        raise ValueError(f"Unknown theme '{name}'. Valid themes: {valid}")
    return THEMES[name]
