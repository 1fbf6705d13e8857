"""
JWT WebSocket Authentication Middleware for Django Channels.

Authenticates WebSocket connections using the access token passed as a
?token= query parameter, so consumers see request users just like HTTP views.
"""
import logging
from urllib.parse import parse_qs

from channels.db import database_sync_to_async
from channels.middleware import BaseMiddleware
from django.contrib.auth.models import AnonymousUser
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.tokens import AccessToken

logger = logging.getLogger(__name__)


class JWTAuthMiddleware(BaseMiddleware):
    async def __call__(self, scope, receive, send):
        # Only process WebSocket connections
        if scope["type"] != "websocket":
            return await super().__call__(scope, receive, send)

        scope["user"] = await self.get_user_from_jwt(scope)
        return await super().__call__(scope, receive, send)

    async def get_user_from_jwt(self, scope):
        query = parse_qs(scope.get("query_string", b"").decode("utf-8"))
        raw_token = (query.get("token") or [None])[0]
        if not raw_token:
            logger.debug("No JWT access token in WebSocket query string")
            return AnonymousUser()

        try:
            token = AccessToken(raw_token)
        except (InvalidToken, TokenError) as e:
            logger.warning(f"Rejected WebSocket JWT: {e}")
            return AnonymousUser()

        return await self.get_user(token.get("user_id"))

    @database_sync_to_async
    def get_user(self, user_id):
        from users.models import User

        try:
            return User.objects.get(pk=user_id, is_active=True)
        except User.DoesNotExist:
            logger.warning(f"WebSocket JWT references unknown user {user_id}")
            return AnonymousUser()
