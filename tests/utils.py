"""Helpers shared across the test-suite."""

from models import Invoice, db


def login(client, email, password="123456"):
    return client.post("/login", data={"email": email, "password": password})


def add_invoice(customer_id, amount=1000, status="pending", date="2024-01-01", invoice_id=None):
    inv = Invoice(customer_id=customer_id, amount=amount, status=status, date=date)
    if invoice_id:
        inv.id = invoice_id
    db.session.add(inv)
    db.session.commit()
    return inv.id
