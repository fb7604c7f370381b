import logging

from aiogram import Router, F, types
from aiogram.filters import Command

from couponbot.bot.keyboards import get_confirm_keyboard
from couponbot.bot.live_feed import live_dashboard, render_dashboard
from couponbot.core.auth import auth_service
from couponbot.core.coupon_service import EDIT_FIELDS, create_coupon, edit_coupon, find_coupon
from couponbot.core.coupon_store import CouponStore
from couponbot.core.dashboard import SORT_FIELDS, describe_coupon, search_coupons
from couponbot.core.database import SessionLocal
from couponbot.core.errors import AuthenticationError, CouponError
from couponbot.core.i18n import escape, translate
from couponbot.core.importer import import_file

# /login must stay reachable without a session, everything else is gated
login_router = Router()
router = Router()
logger = logging.getLogger(__name__)

LIST_LIMIT = 30


def _error_text(e: Exception) -> str:
    if isinstance(e, CouponError) and e.message:
        return e.message
    return escape(e)


# === LOGIN ===
@login_router.message(Command("login"))
async def cmd_login(message: types.Message):
    args = message.text.split()

    # The message contains the password
    try:
        await message.delete()
    except Exception as e:
        logger.warning(f"Could not delete login message: {e}")

    if len(args) < 3:
        await message.answer(translate("auth.usage"), parse_mode="HTML")
        return

    try:
        auth_service.sign_in(message.from_user.id, args[1], args[2])
    except AuthenticationError as e:
        await message.answer(translate("auth.failed", error=e.message), parse_mode="HTML")
        return

    await message.answer(translate("auth.signed_in"), parse_mode="HTML")
    live_dashboard.open(message.bot, message.chat.id, message.from_user.id)


# === LOGOUT ===
@router.message(Command("logout"))
async def cmd_logout(message: types.Message):
    await message.answer(translate("auth.confirm_logout"), reply_markup=get_confirm_keyboard("logout"))


# === ADD ===
@router.message(Command("add"))
async def cmd_add(message: types.Message):
    # /add CODE FROM TO [TYPE...]
    args = message.text.split(maxsplit=4)
    if len(args) < 4:
        await message.answer(translate("admin.add_usage"), parse_mode="HTML")
        return

    coupon_type = args[4] if len(args) > 4 else ""
    db = SessionLocal()
    try:
        store = CouponStore(db)
        create_coupon(store, args[1], args[2], args[3], coupon_type)
        await message.answer(translate("admin.added", code=escape(args[1].upper())), parse_mode="HTML")
    except Exception as e:
        logger.error(f"Add error: {e}")
        await message.answer(translate("admin.failed", error=_error_text(e)), parse_mode="HTML")
    finally:
        db.close()


# === EDIT ===
@router.message(Command("edit"))
async def cmd_edit(message: types.Message):
    # /edit CODE FIELD VALUE
    args = message.text.split(maxsplit=3)
    if len(args) < 4:
        fields = ", ".join(sorted(EDIT_FIELDS))
        await message.answer(translate("admin.edit_usage", fields=fields), parse_mode="HTML")
        return

    db = SessionLocal()
    try:
        store = CouponStore(db)
        code = edit_coupon(store, args[1], args[2], args[3])
        await message.answer(translate("admin.updated", code=escape(code)), parse_mode="HTML")
    except Exception as e:
        logger.error(f"Edit error: {e}")
        await message.answer(translate("admin.failed", error=_error_text(e)), parse_mode="HTML")
    finally:
        db.close()


# === DELETE ===
@router.message(Command("delete"))
async def cmd_delete(message: types.Message):
    args = message.text.split()
    if len(args) < 2:
        await message.answer(translate("admin.delete_usage"), parse_mode="HTML")
        return

    db = SessionLocal()
    try:
        coupon = find_coupon(CouponStore(db), args[1])
        await message.answer(
            translate("admin.confirm_delete", code=escape(coupon.code)),
            parse_mode="HTML",
            reply_markup=get_confirm_keyboard(f"del_{coupon.id}")
        )
    except CouponError as e:
        await message.answer(e.message, parse_mode="HTML")
    except Exception as e:
        logger.error(f"Delete lookup error: {e}")
        await message.answer(translate("admin.failed", error=_error_text(e)), parse_mode="HTML")
    finally:
        db.close()


@router.message(Command("delete_all"))
async def cmd_delete_all(message: types.Message):
    db = SessionLocal()
    try:
        total = len(CouponStore(db).fetch_all())
        if not total:
            await message.answer(translate("admin.nothing_to_delete"))
            return

        await message.answer(
            translate("admin.confirm_delete_all", total=total),
            parse_mode="HTML",
            reply_markup=get_confirm_keyboard("delall")
        )
    except Exception as e:
        logger.error(f"Delete all lookup error: {e}")
        await message.answer(translate("admin.failed", error=_error_text(e)), parse_mode="HTML")
    finally:
        db.close()


# === LIST ===
@router.message(Command("list"))
async def cmd_list(message: types.Message):
    # /list [SEARCH] [FIELD] [asc|desc]
    term = ""
    sort_field = None
    descending = False
    for arg in message.text.split()[1:]:
        lowered = arg.lower()
        if lowered in SORT_FIELDS:
            sort_field = lowered
        elif lowered in ("asc", "desc"):
            descending = lowered == "desc"
        else:
            term = arg

    db = SessionLocal()
    try:
        coupons = CouponStore(db).fetch_all()
        if not coupons:
            await message.answer(translate("admin.list_empty"))
            return

        found = search_coupons(coupons, term, sort_field, descending)
        if not found:
            await message.answer(translate("admin.list_no_match"))
            return

        shown = found[:LIST_LIMIT]
        lines = [translate("admin.list_header", shown=len(shown), total=len(found)), ""]
        lines.extend(describe_coupon(coupon) for coupon in shown)
        await message.answer("\n".join(lines), parse_mode="HTML")
    except Exception as e:
        logger.error(f"List error: {e}")
        await message.answer(translate("admin.failed", error=_error_text(e)), parse_mode="HTML")
    finally:
        db.close()


# === STATS ===
@router.message(Command("stats"))
async def cmd_stats(message: types.Message):
    db = SessionLocal()
    try:
        coupons = CouponStore(db).fetch_all()
        await message.answer(render_dashboard(coupons), parse_mode="HTML")
    except Exception as e:
        logger.error(f"Stats error: {e}")
        await message.answer(translate("admin.failed", error=_error_text(e)), parse_mode="HTML")
    finally:
        db.close()


# === IMPORT (DOCUMENT UPLOAD) ===
@router.message(F.document)
async def handle_import(message: types.Message):
    document = message.document
    status_msg = await message.answer(translate("import.processing"))

    db = SessionLocal()
    try:
        content = await message.bot.download(document)
        report = import_file(CouponStore(db), document.file_name or "", content.getvalue())

        if not report.inserted:
            text = translate("import.all_duplicates", total=report.total)
        else:
            text = translate("import.done", inserted=report.inserted, duplicates=report.duplicates)
        await status_msg.edit_text(text, parse_mode="HTML")
    except Exception as e:
        logger.error(f"Import error ({document.file_name}): {e}")
        await status_msg.edit_text(translate("import.failed", error=_error_text(e)), parse_mode="HTML")
    finally:
        db.close()
