import logging
import zlib

from django.conf import settings
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)


class PlaceholderRiderDispatcher:
    """
    Deterministic rider assignment used until a real dispatch partner is wired in.

    The same order always gets the same rider, derived from its order number.
    """

    RIDER_POOL_SIZE = 10

    def assign(self, order) -> dict:
        seed = zlib.crc32((order.order_number or str(order.id)).encode("utf-8"))
        slot = seed % self.RIDER_POOL_SIZE + 1
        return {
            "rider_id": f"RIDER-{slot:03d}",
            "rider_name": f"Rider {slot}",
            "rider_phone": f"+234800000{slot:04d}",
        }


def get_rider_dispatcher():
    dotted_path = getattr(
        settings,
        "RIDER_DISPATCHER",
        "orders.services.dispatch.PlaceholderRiderDispatcher",
    )
    return import_string(dotted_path)()
