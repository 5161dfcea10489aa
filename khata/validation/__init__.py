"""Input validation package."""

from khata.validation.validator import EntryValidator

__all__ = ["EntryValidator"]
