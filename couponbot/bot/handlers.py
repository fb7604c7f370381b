import logging

from aiogram import Router, F, types
from aiogram.filters import Command, CommandStart

from couponbot.bot.keyboards import get_main_keyboard
from couponbot.core.coupon_store import CouponStore
from couponbot.core.database import SessionLocal
from couponbot.core.i18n import translate
from couponbot.core.redemption import redeem_coupon

router = Router()
logger = logging.getLogger(__name__)


def _actor(user: types.User) -> str:
    name = user.full_name or user.username or ""
    return f"{name} ({user.id})".strip()


async def _redeem(message: types.Message, code: str):
    db = SessionLocal()
    try:
        outcome = redeem_coupon(CouponStore(db), code, used_by=_actor(message.from_user))
    finally:
        db.close()
    await message.answer(outcome.message, parse_mode="HTML")


# === /START ===
@router.message(CommandStart())
async def cmd_start(message: types.Message):
    await message.answer(translate("start"), reply_markup=get_main_keyboard())


# === HELP ===
@router.message(Command("help"))
@router.message(F.text == translate("kb.help"))
async def btn_help(message: types.Message):
    await message.answer(translate("help"), parse_mode="HTML")


# === REDEEM BUTTON ===
@router.message(F.text == translate("kb.redeem"))
async def btn_redeem(message: types.Message):
    await message.answer(translate("ask_code"))


# === /REDEEM CODE ===
@router.message(Command("redeem"))
async def cmd_redeem(message: types.Message):
    args = message.text.split(maxsplit=1)
    if len(args) < 2:
        await message.answer(translate("redeem.usage"), parse_mode="HTML")
        return
    await _redeem(message, args[1])


# === PLAIN TEXT = CODE ===
@router.message(F.text & ~F.text.startswith("/"))
async def text_code(message: types.Message):
    await _redeem(message, message.text)
