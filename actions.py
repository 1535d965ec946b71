"""Form handlers for the invoices dashboard.

Each invoice handler validates the submitted form, runs one statement
through ``store``, invalidates the cached list through ``cache`` and
returns an :data:`Outcome`. The caller decides what to do with it;
:func:`as_state` renders the ``{errors, message}`` mapping the forms
display.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional, Union

import auth
from revalidate import INVOICES_PATH
from schemas import (
    CreateInvoiceForm, UpdateInvoiceForm, cleaned_data, field_errors, validate
)
from store import DatabaseError, InvoiceOperation

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Success:
    navigate_to: Optional[str] = None


@dataclass(frozen=True)
class ValidationFailed:
    errors: Dict[str, List[str]] = field(default_factory=dict)
    message: str = ""


@dataclass(frozen=True)
class Failure:
    error: DatabaseError


Outcome = Union[Success, ValidationFailed, Failure]


def to_cents(amount: Decimal) -> int:
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def today() -> str:
    return datetime.now(timezone.utc).date().isoformat()


def storage_error(kind, exc) -> DatabaseError:
    if isinstance(exc, DatabaseError):
        return exc
    log.warning("Failed to %s invoice: %s", kind.value.lower(), exc)
    return DatabaseError(kind, exc)


def create_invoice(prev_state, formdata, store, cache) -> Outcome:
    form = validate(CreateInvoiceForm, formdata)
    if form.errors:
        return ValidationFailed(field_errors(form), "Please fill out all required fields.")

    data = cleaned_data(form)
    try:
        store.insert(data["customer_id"], to_cents(data["amount"]), data["status"], today())
    except Exception as exc:
        return Failure(storage_error(InvoiceOperation.CREATE, exc))

    log.info("Created invoice for customer %s", data["customer_id"])
    cache.revalidate_path(INVOICES_PATH)
    return Success(INVOICES_PATH)


def update_invoice(invoice_id, prev_state, formdata, store, cache) -> Outcome:
    form = validate(UpdateInvoiceForm, formdata)
    if form.errors:
        return ValidationFailed(field_errors(form), "Please check your input fields.")

    data = cleaned_data(form)
    try:
        store.update(invoice_id, data["customer_id"], to_cents(data["amount"]), data["status"])
    except Exception as exc:
        return Failure(storage_error(InvoiceOperation.UPDATE, exc))

    log.info("Updated invoice %s", invoice_id)
    cache.revalidate_path(INVOICES_PATH)
    return Success(INVOICES_PATH)


def delete_invoice(invoice_id, store, cache) -> Outcome:
    # Called from the list view itself, so there is nowhere to navigate to.
    try:
        store.delete(invoice_id)
    except Exception as exc:
        return Failure(storage_error(InvoiceOperation.DELETE, exc))

    log.info("Deleted invoice %s", invoice_id)
    cache.revalidate_path(INVOICES_PATH)
    return Success()


def authenticate(prev_state, formdata, sign_in=auth.sign_in) -> Optional[str]:
    """Sign in with the credentials provider.

    Returns None on success or the message to show on the login form.
    Errors that are not sign-in failures propagate.
    """
    try:
        sign_in("credentials", formdata)
    except auth.CredentialsSignin:
        return "Invalid credentials."
    except auth.AuthError as exc:
        return f"Something went wrong. {exc}"
    return None


def as_state(outcome: Outcome) -> dict:
    """Render an outcome as the ``State`` mapping shown next to a form."""
    if isinstance(outcome, ValidationFailed):
        return {"errors": outcome.errors, "message": outcome.message}
    if isinstance(outcome, Failure):
        error = outcome.error
        return {
            "message": f"Database Error: Failed to {error.kind.value} Invoice. {error.cause}"
        }
    return {"message": None}
