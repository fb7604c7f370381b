from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton, ReplyKeyboardMarkup, KeyboardButton

from couponbot.core.i18n import translate


def get_main_keyboard() -> ReplyKeyboardMarkup:
    """Main menu"""
    buttons = [
        [
            KeyboardButton(text=translate("kb.redeem")),
            KeyboardButton(text=translate("kb.help"))
        ]
    ]
    return ReplyKeyboardMarkup(keyboard=buttons, resize_keyboard=True)


def get_confirm_keyboard(confirm_data: str) -> InlineKeyboardMarkup:
    """Yes / No under a destructive admin action"""
    buttons = [
        [
            InlineKeyboardButton(text=translate("kb.yes"), callback_data=confirm_data),
            InlineKeyboardButton(text=translate("kb.no"), callback_data="cancel")
        ]
    ]
    return InlineKeyboardMarkup(inline_keyboard=buttons)
