import json
import logging
from channels.generic.websocket import AsyncWebsocketConsumer

logger = logging.getLogger(__name__)


class OrderUpdatesConsumer(AsyncWebsocketConsumer):
    """
    Live order status updates.

    Staff join their own group; kitchen and admin users also join the
    kitchen group that sees every order.
    """

    async def connect(self):
        from .signals import KITCHEN_GROUP, staff_group

        user = self.scope.get("user")
        if user is None or not user.is_authenticated:
            logger.warning("OrderUpdatesConsumer: unauthenticated connection rejected")
            await self.close(code=4001)
            return

        self.groups_joined = [staff_group(user.pk)]
        if user.is_operator:
            self.groups_joined.append(KITCHEN_GROUP)

        for group in self.groups_joined:
            await self.channel_layer.group_add(group, self.channel_name)

        await self.accept()
        logger.info(f"OrderUpdatesConsumer: {user.email} connected to {self.groups_joined}")

    async def disconnect(self, close_code):
        for group in getattr(self, "groups_joined", []):
            await self.channel_layer.group_discard(group, self.channel_name)

    async def order_update(self, event):
        await self.send(text_data=json.dumps(event["data"]))
