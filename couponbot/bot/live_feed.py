import asyncio
import logging
from datetime import datetime
from typing import Callable, Dict, Optional, Set

from aiogram import Bot
from aiogram.exceptions import TelegramBadRequest

from couponbot.core.auth import auth_service
from couponbot.core.coupon_store import CouponStore
from couponbot.core.dashboard import coupon_statistics
from couponbot.core.database import SessionLocal
from couponbot.core.i18n import translate

logger = logging.getLogger(__name__)


def render_dashboard(coupons) -> str:
    stats = coupon_statistics(coupons)
    text = translate(
        "admin.stats",
        total=stats.total,
        used=stats.used,
        unused=stats.unused,
        active=stats.active,
        expired=stats.expired,
    )
    updated = translate("admin.dashboard_updated", time=datetime.now().strftime("%d.%m.%Y %H:%M:%S"))
    return f"{text}\n\n{updated}"


class LiveDashboard:
    """
    One auto-refreshing statistics message per signed in admin chat.

    Each chat holds a coupon feed subscription until close() is called.
    """

    def __init__(self):
        self.unsubscribers: Dict[int, Callable[[], None]] = {}
        self.message_ids: Dict[int, int] = {}
        self.latest: Dict[int, str] = {}
        self.locks: Dict[int, asyncio.Lock] = {}
        # admin user id -> chats showing that admin a dashboard
        self.chats: Dict[int, Set[int]] = {}
        # asyncio keeps only weak references to tasks
        self.tasks: Set[asyncio.Task] = set()

    def is_open(self, chat_id: int) -> bool:
        return chat_id in self.unsubscribers

    def _on_change(self, bot: Optional[Bot], chat_id: int, coupons):
        # Render right away, the ORM objects may expire later
        self.latest[chat_id] = render_dashboard(coupons)
        if bot is None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        task = loop.create_task(self._push(bot, chat_id))
        self.tasks.add(task)
        task.add_done_callback(self.tasks.discard)

    async def _push(self, bot: Bot, chat_id: int):
        lock = self.locks.setdefault(chat_id, asyncio.Lock())
        async with lock:
            if not self.is_open(chat_id):
                return
            text = self.latest.get(chat_id)
            message_id = self.message_ids.get(chat_id)
            try:
                if message_id:
                    await bot.edit_message_text(text, chat_id=chat_id, message_id=message_id, parse_mode="HTML")
                else:
                    message = await bot.send_message(chat_id, text, parse_mode="HTML")
                    self.message_ids[chat_id] = message.message_id
            except TelegramBadRequest as e:
                # "message is not modified" and friends
                logger.debug(f"Dashboard {chat_id} not updated: {e}")
            except Exception as e:
                logger.warning(f"Dashboard push to {chat_id} failed: {e}")

    def open(self, bot: Optional[Bot], chat_id: int, user_id: Optional[int] = None):
        owner = chat_id if user_id is None else user_id
        self.chats.setdefault(owner, set()).add(chat_id)
        if self.is_open(chat_id):
            return

        db = SessionLocal()
        try:
            store = CouponStore(db)
            # Mark open before the initial push
            self.unsubscribers[chat_id] = lambda: None
            self.unsubscribers[chat_id] = store.subscribe(
                lambda coupons: self._on_change(bot, chat_id, coupons)
            )
        finally:
            db.close()
        logger.info(f"Live dashboard opened for {chat_id} (admin {owner})")

    def close(self, chat_id: int):
        for chat_ids in self.chats.values():
            chat_ids.discard(chat_id)
        unsubscribe = self.unsubscribers.pop(chat_id, None)
        if unsubscribe is None:
            return
        unsubscribe()
        self.message_ids.pop(chat_id, None)
        self.latest.pop(chat_id, None)
        self.locks.pop(chat_id, None)
        logger.info(f"Live dashboard closed for {chat_id}")

    def close_for_user(self, user_id: int):
        """Closes every dashboard the admin opened, group chats included."""
        for chat_id in self.chats.pop(user_id, set()):
            self.close(chat_id)

    def close_all(self):
        for chat_id in list(self.unsubscribers):
            self.close(chat_id)
        self.chats.clear()


live_dashboard = LiveDashboard()


def _on_auth_state_change(user_id: int, signed_in: bool):
    if not signed_in:
        live_dashboard.close_for_user(user_id)


auth_service.on_auth_state_change(_on_auth_state_change)
