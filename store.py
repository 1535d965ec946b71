import enum
import logging

from sqlalchemy import delete, insert, update
from sqlalchemy.exc import SQLAlchemyError

from models import Invoice, db

log = logging.getLogger(__name__)


class InvoiceOperation(enum.Enum):
    CREATE = "Create"
    UPDATE = "Update"
    DELETE = "Delete"


class DatabaseError(Exception):
    """A storage failure while mutating an invoice.

    ``kind`` names the operation that failed and ``cause`` keeps the
    original exception.
    """

    def __init__(self, kind: InvoiceOperation, cause: Exception):
        super().__init__(kind, cause)
        self.kind = kind
        self.cause = cause

    def __str__(self):
        return str(self.cause)


class SqlInvoiceStore:
    """Invoice writes against the Flask-SQLAlchemy session.

    Every method runs a single statement and commits it straight away.
    """

    def __init__(self, session=None):
        self.session = session if session is not None else db.session

    def insert(self, customer_id: str, amount: int, status: str, date: str) -> None:
        stmt = insert(Invoice).values(
            customer_id=customer_id, amount=amount, status=status, date=date
        )
        self._run(InvoiceOperation.CREATE, stmt)

    def update(self, invoice_id: str, customer_id: str, amount: int, status: str) -> None:
        stmt = (
            update(Invoice)
            .where(Invoice.id == invoice_id)
            .values(customer_id=customer_id, amount=amount, status=status)
        )
        if self._run(InvoiceOperation.UPDATE, stmt).rowcount == 0:
            log.info("Update matched no invoice with id %s", invoice_id)

    def delete(self, invoice_id: str) -> None:
        stmt = delete(Invoice).where(Invoice.id == invoice_id)
        if self._run(InvoiceOperation.DELETE, stmt).rowcount == 0:
            log.info("Delete matched no invoice with id %s", invoice_id)

    def _run(self, kind, stmt):
        try:
            result = self.session.execute(stmt)
            self.session.commit()
        except (SQLAlchemyError, OverflowError) as exc:
            self.session.rollback()
            log.warning("Failed to %s invoice: %s", kind.value.lower(), exc)
            raise DatabaseError(kind, exc) from exc
        return result
