"""
Form validation state machine for the product forms.

A form collaborator (a dialog, the CLI) feeds every keystroke and focus
change into FormValidator and reads back three things:
- submit_enabled: whether the confirm action may run
- message: the single error text to display ("" for none)
- show_error(field): whether that field's error border should be drawn

Each field carries two flags. logically_invalid follows the field's text
(and, for the name, the store). visual_error_active is set when the field
loses focus and cleared when it gains focus or is edited while unfocused, so
a field is only highlighted after the user has left it.

Message precedence: the field named by the current event wins if it is
invalid; otherwise any invalid field yields the generic message.

Usage:
    validator = FormValidator(store, name_must_exist=False)
    validator.focus_gained(FormField.NAME)
    validator.text_changed(FormField.NAME, "Bolt")
    if validator.submit_enabled:
        values = validator.submission()
"""

import dataclasses
import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Dict, Iterable, Optional

from stock_tracker.services.inventory_store import InventoryStore, StoreChange
from stock_tracker.utils.constants import ERROR_FORM_INVALID
from stock_tracker.utils.validators import (
    parse_price,
    parse_quantity,
    validate_name_text,
    validate_price_text,
    validate_quantity_text,
)

logger = logging.getLogger(__name__)


class FormField(Enum):
    """Fields a product form may contain."""

    NAME = "name"
    QUANTITY = "quantity"
    PRICE = "price"


ALL_FIELDS = (FormField.NAME, FormField.QUANTITY, FormField.PRICE)


@dataclass
class FieldState:
    """Validation state of one form field."""

    raw_text: str = ""
    logically_invalid: bool = False
    visual_error_active: bool = False
    error: str = ""


@dataclass(frozen=True)
class FormSubmission:
    """Parsed values of a valid form. Absent fields are None."""

    name: Optional[str]
    quantity: Optional[int]
    price: Optional[Decimal]


class FormValidator:
    """
    Per-field validation state plus the submit gate and message of one form.

    Events are processed one at a time, to completion. No method raises on
    malformed input; events for fields the form does not contain are ignored.
    """

    def __init__(
        self,
        store: InventoryStore,
        fields: Iterable[FormField] = ALL_FIELDS,
        name_must_exist: bool = False,
    ):
        """
        Args:
            store: Store consulted by the name rule
            fields: Fields present on this form
            name_must_exist: True for update/remove forms, False for add forms
        """
        self._store = store
        self._name_must_exist = name_must_exist
        self._states: Dict[FormField, FieldState] = {field: FieldState() for field in fields}
        self._focused: Optional[FormField] = None
        self._submit_enabled = False
        self._message = ""
        self._listener_id: Optional[int] = None

        self.revalidate()
        # Nothing to report until the user touches a field
        self._message = ""

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def text_changed(self, field: FormField, text: Optional[str]) -> None:
        """Handle an edit of a field's text."""
        state = self._states.get(field)
        if state is None:
            logger.debug(f"Ignoring text change for absent field {field}")
            return

        state.raw_text = text or ""
        self._validate(field)

        # Programmatic edits of another field must not leave a stale border
        if self._focused is not field:
            state.visual_error_active = False

        self._refresh(field)

    def focus_gained(self, field: FormField) -> None:
        """Handle a field receiving input focus."""
        state = self._states.get(field)
        if state is None:
            logger.debug(f"Ignoring focus gain for absent field {field}")
            return

        self._focused = field
        state.visual_error_active = False
        self._message = ""
        self._validate(field)
        self._refresh(field)

    def focus_lost(self, field: FormField) -> None:
        """Handle a field losing input focus."""
        state = self._states.get(field)
        if state is None:
            logger.debug(f"Ignoring focus loss for absent field {field}")
            return

        if self._focused is field:
            self._focused = None
        state.visual_error_active = True
        self._validate(field)
        self._refresh(field)

    def revalidate(self) -> None:
        """Re-run every field rule, e.g. after the store changed under the form."""
        for field in self._states:
            self._validate(field)
        self._refresh(self._focused)

    # ------------------------------------------------------------------
    # Outputs
    # ------------------------------------------------------------------

    @property
    def submit_enabled(self) -> bool:
        return self._submit_enabled

    @property
    def message(self) -> str:
        return self._message

    @property
    def fields(self) -> tuple:
        return tuple(self._states)

    @property
    def focused_field(self) -> Optional[FormField]:
        return self._focused

    def show_error(self, field: FormField) -> bool:
        """True if the field's error indicator should be drawn."""
        state = self._states.get(field)
        if state is None:
            return False
        return state.logically_invalid and state.visual_error_active

    def field_error(self, field: FormField) -> str:
        """Current error text of a field ("" when valid or absent)."""
        state = self._states.get(field)
        return state.error if state is not None else ""

    def state(self, field: FormField) -> Optional[FieldState]:
        """Copy of a field's state, or None if the form lacks the field."""
        state = self._states.get(field)
        return dataclasses.replace(state) if state is not None else None

    def submission(self) -> FormSubmission:
        """
        Parse the field texts for submission.

        Raises:
            ValueError: If the form is not currently submittable
        """
        if not self._submit_enabled:
            raise ValueError(self._message or ERROR_FORM_INVALID)

        def text(field: FormField) -> Optional[str]:
            state = self._states.get(field)
            return state.raw_text if state is not None else None

        name = text(FormField.NAME)
        quantity = text(FormField.QUANTITY)
        price = text(FormField.PRICE)
        return FormSubmission(
            name=name.strip() if name is not None else None,
            quantity=parse_quantity(quantity) if quantity is not None else None,
            price=parse_price(price) if price is not None else None,
        )

    # ------------------------------------------------------------------
    # Store tracking
    # ------------------------------------------------------------------

    def follow_store(self) -> "FormValidator":
        """Revalidate whenever the store changes, until close() is called."""
        if self._listener_id is None:
            self._listener_id = self._store.add_listener(self._on_store_change)
        return self

    def close(self) -> None:
        """Stop following the store. The validator should not be used afterwards."""
        if self._listener_id is not None:
            self._store.remove_listener(self._listener_id)
            self._listener_id = None

    def _on_store_change(self, change: StoreChange) -> None:
        if FormField.NAME in self._states:
            self.revalidate()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _validate(self, field: FormField) -> None:
        state = self._states[field]

        if field is FormField.NAME:
            is_valid, error = validate_name_text(
                state.raw_text, self._store.contains, self._name_must_exist
            )
        elif field is FormField.QUANTITY:
            is_valid, error = validate_quantity_text(state.raw_text)
        else:
            is_valid, error = validate_price_text(state.raw_text)

        state.logically_invalid = not is_valid
        state.error = error

    def _refresh(self, trigger: Optional[FormField]) -> None:
        self._submit_enabled = not any(s.logically_invalid for s in self._states.values())

        trigger_state = self._states.get(trigger) if trigger is not None else None
        if trigger_state is not None and trigger_state.logically_invalid:
            self._message = trigger_state.error
        elif not self._submit_enabled:
            self._message = ERROR_FORM_INVALID
        else:
            self._message = ""
