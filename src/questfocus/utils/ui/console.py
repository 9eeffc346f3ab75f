"""Console utilities for QuestFocus."""

from functools import lru_cache

from rich.console import Console
from rich.theme import Theme

QUESTFOCUS_THEME = Theme(
    {
        "error": "bold red",
        "success": "bold green",
        "warning": "bold yellow",
        "info": "bold blue",
    }
)


@lru_cache(maxsize=2)
def get_console(highlight: bool = True) -> Console:
    """Get the shared Rich Console, styled with the QuestFocus theme."""
    return Console(highlight=highlight, theme=QUESTFOCUS_THEME)
