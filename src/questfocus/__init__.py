"""QuestFocus - gamified focus sessions for the terminal."""

__version__ = "0.3.0"
