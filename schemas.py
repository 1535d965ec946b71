from decimal import Decimal, InvalidOperation

from werkzeug.datastructures import MultiDict
from wtforms import DecimalField, Form, SelectField, StringField
from wtforms.validators import AnyOf, DataRequired, InputRequired, ValidationError

STATUSES = ("pending", "paid")

# Largest amount whose value in cents fits a signed 64-bit INTEGER column.
MAX_CENTS = 2 ** 63 - 1


class AmountField(DecimalField):
    """Decimal field that leaves unparseable input as ``None``.

    The range check then reports blank and non-numeric amounts with the
    same message as zero or negative ones.
    """

    def process_formdata(self, valuelist):
        if not valuelist:
            return
        try:
            self.data = Decimal(valuelist[0].strip())
        except (InvalidOperation, ValueError, AttributeError):
            self.data = None


def greater_than_zero(message):
    def _check(form, field):
        value = field.data
        if value is None or not value.is_finite() or value <= 0:
            raise ValidationError(message)
    return _check


def fits_in_cents(message):
    def _check(form, field):
        value = field.data
        if value is not None and value.is_finite() and value * 100 > MAX_CENTS:
            raise ValidationError(message)
    return _check


def strip(value):
    return value.strip() if value else value


class InvoiceForm(Form):
    """Full invoice record as submitted or stored."""

    id = StringField("Id", validators=[InputRequired()])
    customer_id = StringField(
        "Customer",
        name="customerId",
        filters=[strip],
        validators=[DataRequired(message="Please select a customer")],
    )
    amount = AmountField(
        "Amount",
        validators=[
            greater_than_zero("Amount must be greater than $0"),
            fits_in_cents("Amount is too large."),
        ],
    )
    status = SelectField(
        "Status",
        choices=[(s, s.title()) for s in STATUSES],
        validate_choice=False,
        validators=[AnyOf(STATUSES, message="Please select an invoice status.")],
    )
    date = StringField("Date", validators=[InputRequired()])


# id is assigned by storage and date is stamped at creation, so neither is
# accepted from the client.
class CreateInvoiceForm(InvoiceForm):
    id = None
    date = None


class UpdateInvoiceForm(InvoiceForm):
    id = None
    date = None


def validate(form_class, formdata):
    """Bind ``formdata`` to ``form_class`` and run every validator.

    Plain mappings are accepted as well as werkzeug ``MultiDict``s. The
    bound form is returned; check ``form.errors`` or :func:`field_errors`.
    """
    if not hasattr(formdata, "getlist"):
        formdata = MultiDict(formdata or {})
    form = form_class(formdata=formdata)
    form.validate()
    return form


def field_errors(form) -> dict:
    """Errors keyed by submitted field name, e.g. ``customerId``."""
    return {field.name: list(field.errors) for field in form if field.errors}


def cleaned_data(form) -> dict:
    return {
        "customer_id": form.customer_id.data,
        "amount": form.amount.data,
        "status": form.status.data,
    }
