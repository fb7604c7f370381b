import logging

from aiogram import Router, F, types

from couponbot.core.auth import auth_service
from couponbot.core.coupon_store import CouponStore
from couponbot.core.database import SessionLocal
from couponbot.core.i18n import translate

router = Router()
logger = logging.getLogger(__name__)


@router.callback_query(F.data.startswith("del_"))
async def handle_delete(callback: types.CallbackQuery):
    coupon_id = int(callback.data.split("_")[1])
    db = SessionLocal()
    try:
        CouponStore(db).delete(coupon_id)
        await callback.message.edit_text(translate("admin.deleted"), reply_markup=None)
        await callback.answer()
    except Exception as e:
        logger.error(f"Delete error: {e}")
        await callback.answer(translate("admin.failed", error=getattr(e, "message", "") or e), show_alert=True)
    finally:
        db.close()


@router.callback_query(F.data == "delall")
async def handle_delete_all(callback: types.CallbackQuery):
    db = SessionLocal()
    try:
        count = CouponStore(db).delete_all()
        await callback.message.edit_text(translate("admin.deleted_all", count=count), reply_markup=None)
        await callback.answer()
    except Exception as e:
        logger.error(f"Delete all error: {e}")
        await callback.answer(translate("admin.failed", error=getattr(e, "message", "") or e), show_alert=True)
    finally:
        db.close()


@router.callback_query(F.data == "logout")
async def handle_logout(callback: types.CallbackQuery):
    # Also tears down the live dashboard (auth state listener)
    auth_service.sign_out(callback.from_user.id)
    await callback.message.edit_text(translate("auth.signed_out"), reply_markup=None)
    await callback.answer()


@router.callback_query(F.data == "cancel")
async def handle_cancel(callback: types.CallbackQuery):
    await callback.message.edit_text(translate("admin.cancelled"), reply_markup=None)
    await callback.answer()
