from django.dispatch import Signal

# Custom signals for order events. Sent after the surrounding transaction
# commits; receivers live in the notifications app.

# kwargs: order
order_confirmed = Signal()

# kwargs: order, previous_status, actor_kind
order_status_changed = Signal()

# kwargs: staff, delivery_date
order_reminder = Signal()
