from django.dispatch import Signal

# Sent after a staff member's health profile is saved. kwargs: user
health_profile_updated = Signal()
