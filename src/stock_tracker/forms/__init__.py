"""Form-side logic shared by every product form (add, update, remove)."""

from .form_validator import ALL_FIELDS, FieldState, FormField, FormSubmission, FormValidator

__all__ = ["ALL_FIELDS", "FieldState", "FormField", "FormSubmission", "FormValidator"]
