"""Exception types raised by the playbook package."""

from typing import List, Optional


class PlaybookError(Exception):
    """Base class for all playbook errors."""


class AnswerValidationError(PlaybookError):
    """Raised when an answer set fails input-collection checks."""

    def __init__(self, message: str, keys: Optional[List[str]] = None):
        super().__init__(message)
        self.keys = keys or []


class RuleConfigurationError(PlaybookError):
    """Raised when the trigger rule table references unknown data."""


class AssessmentNotFoundError(PlaybookError):
    def __init__(self, assessment_id: int):
        super().__init__(f"Assessment {assessment_id} not found")
        self.assessment_id = assessment_id
