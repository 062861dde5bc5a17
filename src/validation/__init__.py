"""Validation of raw form input."""

from src.validation.validator import FormInputValidator

__all__ = ["FormInputValidator"]
