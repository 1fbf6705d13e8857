from django.conf import settings
from django.core.mail import send_mail
from django.template.loader import render_to_string
import logging

from business_hours.services import get_business_clock
from payments.money import default_currency, format_money

logger = logging.getLogger(__name__)


class EmailService:
    def __init__(self):
        # Format the sender's email to include a display name
        from_email_address = getattr(
            settings, "DEFAULT_FROM_EMAIL", "orders@nutribreakfast.ng"
        )
        self.default_from_email = f"NutriBreakfast <{from_email_address}>"
        self.currency = default_currency()

    def send_email(self, recipient_list, subject, template_name, context):
        """
        Sends an email using a Django template.

        Args:
            recipient_list (list): A list of recipient email addresses.
            subject (str): The subject of the email.
            template_name (str): The path to the email template (e.g., 'emails/order-confirmed.html').
            context (dict): A dictionary of data to render in the template.
        """
        html_message = render_to_string(template_name, context)
        send_mail(
            subject,
            "",  # Empty message, as we are sending HTML
            self.default_from_email,
            recipient_list,
            html_message=html_message,
            fail_silently=False,
        )

    def _order_context(self, order):
        return {
            "user": {"name": order.staff.display_name, "email": order.staff.email},
            "order": {
                "orderNumber": order.order_number,
                "mealName": order.meal.name,
                "quantity": order.quantity,
                "price": format_money(self.currency, order.price),
                "deliveryDate": order.delivery_date.strftime("%A, %B %d, %Y"),
                "deliveryAddress": order.delivery_address,
                "status": order.get_status_display(),
                "riderName": order.rider_name,
                "riderPhone": order.rider_phone,
            },
        }

    def send_order_confirmation_email(self, order):
        try:
            self.send_email(
                [order.staff.email],
                f"Order Confirmed - {order.order_number}",
                "emails/order-confirmed.html",
                self._order_context(order),
            )
            logger.info(f"Order confirmation email sent for {order.order_number}")
            return True
        except Exception as e:
            logger.error(f"Failed to send order confirmation email for {order.order_number}: {e}")
            return False

    def send_order_status_email(self, order):
        try:
            self.send_email(
                [order.staff.email],
                f"Order {order.order_number}: {order.get_status_display()}",
                "emails/order-status.html",
                self._order_context(order),
            )
            logger.info(f"Order status email ({order.status}) sent for {order.order_number}")
            return True
        except Exception as e:
            logger.error(f"Failed to send status email for {order.order_number}: {e}")
            return False

    def send_order_reminder_email(self, staff, delivery_date):
        clock = get_business_clock()
        try:
            self.send_email(
                [staff.email],
                "Don't forget tomorrow's breakfast",
                "emails/order-reminder.html",
                {
                    "user": {"name": staff.display_name},
                    "deliveryDate": delivery_date.strftime("%A, %B %d"),
                    "cutoff": clock.cutoff.strftime("%H:%M"),
                    "orderUrl": f"{getattr(settings, 'FRONTEND_URL', '').rstrip('/')}/meals",
                },
            )
            return True
        except Exception as e:
            logger.error(f"Failed to send order reminder to {staff.email}: {e}")
            return False

    def _invoice_context(self, invoice):
        return {
            "company": {"name": invoice.company.name},
            "invoice": {
                "invoiceNumber": invoice.invoice_number,
                "period": f"{invoice.billing_year}-{invoice.billing_month:02d}",
                "subtotal": format_money(self.currency, invoice.subtotal),
                "tax": format_money(self.currency, invoice.tax),
                "total": format_money(self.currency, invoice.total),
                "dueDate": invoice.due_date.strftime("%B %d, %Y"),
                "paidAt": invoice.paid_at.strftime("%B %d, %Y") if invoice.paid_at else None,
                "reference": invoice.provider_reference,
            },
        }

    def send_invoice_email(self, invoice):
        try:
            self.send_email(
                [invoice.company.email],
                f"Invoice {invoice.invoice_number}",
                "emails/invoice-issued.html",
                self._invoice_context(invoice),
            )
            logger.info(f"Invoice email sent for {invoice.invoice_number}")
            return True
        except Exception as e:
            logger.error(f"Failed to send invoice email for {invoice.invoice_number}: {e}")
            return False

    def send_payment_confirmation_email(self, invoice):
        try:
            self.send_email(
                [invoice.company.email],
                f"Payment Received - {invoice.invoice_number}",
                "emails/payment-confirmed.html",
                self._invoice_context(invoice),
            )
            logger.info(f"Payment confirmation email sent for {invoice.invoice_number}")
            return True
        except Exception as e:
            logger.error(f"Failed to send payment confirmation for {invoice.invoice_number}: {e}")
            return False
