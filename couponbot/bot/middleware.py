from typing import Any, Awaitable, Callable, Dict, Union

from aiogram import BaseMiddleware
from aiogram.types import Message, CallbackQuery

from couponbot.core.auth import AuthService, auth_service
from couponbot.core.i18n import translate


class AdminMiddleware(BaseMiddleware):
    """Lets only signed in admins through to the wrapped router."""

    def __init__(self, auth: AuthService = auth_service):
        self.auth = auth

    async def __call__(
            self,
            handler: Callable[[Any, Dict[str, Any]], Awaitable[Any]],
            event: Union[Message, CallbackQuery],
            data: Dict[str, Any]
    ) -> Any:
        user = event.from_user
        if user and self.auth.is_admin(user.id):
            return await handler(event, data)

        text = translate("auth.required")
        if isinstance(event, Message):
            await event.answer(text, parse_mode="HTML")
        elif isinstance(event, CallbackQuery):
            await event.answer(translate("auth.required_alert"), show_alert=True)

        # Stop processing (handler is not called)
        return
