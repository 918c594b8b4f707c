"""
Per-frame result types shared by all exercise validators.

Uses Pydantic models so results serialize straight into API responses.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Severity(str, Enum):
    """How serious a form issue is."""
    GOOD = "good"
    WARNING = "warning"
    ERROR = "error"


class RepPhase(str, Enum):
    """Position within a repeated movement cycle."""
    UP = "up"
    DOWN = "down"
    HOLD = "hold"
    NONE = "none"


class FormFeedback(BaseModel):
    """Outcome of one frame's form validation."""
    model_config = ConfigDict(frozen=True)

    is_valid: bool = Field(description="False when a form rule failed")
    message: str = Field(description="Short human-readable cue")
    severity: Severity = Field(description="'good', 'warning' or 'error'")

    @classmethod
    def good(cls, message: str = "Good form!") -> "FormFeedback":
        return cls(is_valid=True, message=message, severity=Severity.GOOD)

    @classmethod
    def warning(cls, message: str) -> "FormFeedback":
        return cls(is_valid=False, message=message, severity=Severity.WARNING)

    @classmethod
    def error(cls, message: str) -> "FormFeedback":
        return cls(is_valid=False, message=message, severity=Severity.ERROR)


# Shown whenever tracking is inactive or no pose is detected
NEUTRAL_FEEDBACK = FormFeedback(
    is_valid=True, message="Ready to start", severity=Severity.GOOD
)
NEUTRAL_SCORE: int = 100
