"""Verification-related exceptions: class model problems and boundary violations."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .base import ModulithsError

if TYPE_CHECKING:
    from ..model.violations import Violations


class VerificationError(ModulithsError):
    """Base class for verification-related errors."""
    pass


class ClassModelError(VerificationError):
    """Raised when the class model cannot be built or is inconsistent."""

    def __init__(self, subject: str, reason: str):
        super().__init__(
            f"Invalid class model for {subject}",
            details={"subject": subject, "reason": reason},
        )
        self.subject = subject
        self.reason = reason


class ModuleViolationsError(VerificationError):
    """Raised when a verification run detected boundary violations.

    Carries every violation found, not only the first one.
    """

    def __init__(self, violations: Violations):
        count = len(violations)
        noun = "violation" if count == 1 else "violations"
        super().__init__(f"{count} module {noun} detected")
        self.violations = violations

    def __str__(self) -> str:
        lines = [self.message]
        lines.extend(f"- {message}" for message in self.violations.messages)
        return "\n".join(lines)
