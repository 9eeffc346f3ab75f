"""Exception hierarchy for QuestFocus."""


class QuestFocusError(Exception):
    """Base class for all QuestFocus errors."""


class ValidationError(QuestFocusError):
    """Raised when user input is rejected (empty title, bad estimate, full quest)."""


class InvalidTransitionError(QuestFocusError):
    """Raised when a session operation is not valid in the current state."""

    def __init__(self, operation: str, state: str):
        self.operation = operation
        self.state = state
        super().__init__(f"Cannot {operation} while {state}")


class NotFoundError(QuestFocusError):
    """Raised when a quest or sub-quest id does not exist on the given date."""
