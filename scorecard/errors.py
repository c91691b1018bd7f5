"""
Exception types raised by the scoring core.

Callers catch ScorecardError to handle any core failure, or one of the
specific subclasses below.
"""

from typing import Optional


class ScorecardError(Exception):
    """Base class for all scoring core errors."""


class ValidationError(ScorecardError):
    """Malformed scoring input (unknown criterion, bad value, bad catalog)."""

    def __init__(self, message: str, criterion_id: Optional[str] = None):
        super().__init__(message)
        self.criterion_id = criterion_id


class LifecycleViolation(ScorecardError):
    """A lifecycle transition was attempted from a state that does not allow it."""

    def __init__(self, action: str, state, assignment_id: Optional[str] = None):
        state_name = getattr(state, "value", state)
        message = f"Cannot {action} assessment in state '{state_name}'"
        if assignment_id:
            message += f" (assignment {assignment_id})"
        super().__init__(message)
        self.action = action
        self.state = state
        self.assignment_id = assignment_id


class PersistenceError(ScorecardError):
    """The storage backend failed to load or store a record."""
