from django.dispatch import Signal

# Custom billing signals, sent after the surrounding transaction commits.

# kwargs: invoice
invoice_issued = Signal()

# kwargs: invoice
payment_confirmed = Signal()
