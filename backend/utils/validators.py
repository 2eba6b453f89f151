"""
Input validation utilities
"""
from typing import Optional

from backend.utils.errors import ValidationError


def validate_title(title: Optional[str]) -> str:
    """Validate that a task title is non-empty after trimming"""
    cleaned = (title or "").strip()
    if not cleaned:
        raise ValidationError("Task title must not be empty")
    return cleaned


def normalize_description(description: Optional[str]) -> str:
    """Absent and empty descriptions are both stored as an empty string"""
    return (description or "").strip()


def validate_passcode(passcode: Optional[str]) -> str:
    if not passcode:
        raise ValidationError("Passcode must not be empty")
    return passcode
