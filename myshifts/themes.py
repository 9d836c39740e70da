from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class ShiftTheme(str, Enum):
    WHITE = "white"
    BLUE = "blue"
    GREEN = "green"
    PURPLE = "purple"
    PINK = "pink"
    YELLOW = "yellow"
    GRAY = "gray"
    DARK_BLUE = "darkBlue"
    DARK_GREEN = "darkGreen"
    DARK_PURPLE = "darkPurple"
    DARK_PINK = "darkPink"
    DARK_YELLOW = "darkYellow"


DEFAULT_THEME = ShiftTheme.BLUE

THEME_VARIANTS: Dict[ShiftTheme, str] = {
    ShiftTheme.WHITE: "shift-white",
    ShiftTheme.BLUE: "shift-blue",
    ShiftTheme.GREEN: "shift-green",
    ShiftTheme.PURPLE: "shift-purple",
    ShiftTheme.PINK: "shift-pink",
    ShiftTheme.YELLOW: "shift-yellow",
    ShiftTheme.GRAY: "shift-gray",
    ShiftTheme.DARK_BLUE: "shift-dark-blue",
    ShiftTheme.DARK_GREEN: "shift-dark-green",
    ShiftTheme.DARK_PURPLE: "shift-dark-purple",
    ShiftTheme.DARK_PINK: "shift-dark-pink",
    ShiftTheme.DARK_YELLOW: "shift-dark-yellow",
}

_THEME_BY_LOWER = {theme.value.lower(): theme for theme in ShiftTheme}


def resolve_theme(value: Optional[str]) -> ShiftTheme:
    """Map a source theme name onto the closed set, defaulting to blue."""
    if not value:
        return DEFAULT_THEME
    theme = _THEME_BY_LOWER.get(value.strip().lower())
    if theme is None:
        logger.debug("Unknown shift theme %r, using %s", value, DEFAULT_THEME.value)
        return DEFAULT_THEME
    return theme


def theme_variant(theme: ShiftTheme) -> str:
    return THEME_VARIANTS[theme]
