"""
Localized message catalogue.

Every user-facing text of the bot lives here, keyed by a dotted name.
Supported languages: German (de, default) and English (en).

Usage:
    from couponbot.core.i18n import translate

    text = translate("redeem.expired", valid_to="31/12/2024")
"""
from typing import Optional

from aiogram.utils.text_decorations import html_decoration

from couponbot.core.config import LOCALE

DEFAULT_LANGUAGE = "de"

TRANSLATIONS = {
    "unknown": {
        "de": "unbekannt",
        "en": "unknown",
    },
    "date.invalid": {
        "de": "Ungültiges Datum: {value}",
        "en": "Invalid date: {value}",
    },

    # Redemption
    "redeem.usage": {
        "de": "ℹ️ Nutzung: <code>/redeem CODE</code> oder sende einfach den Code.",
        "en": "ℹ️ Usage: <code>/redeem CODE</code> or just send the code.",
    },
    "redeem.empty_code": {
        "de": "Bitte gib einen Gutscheincode ein.",
        "en": "Please enter a coupon code.",
    },
    "redeem.not_found": {
        "de": "❌ Gutschein nicht gefunden. Bitte prüfe den Code und versuche es erneut.",
        "en": "❌ Coupon not found. Please check the code and try again.",
    },
    "redeem.already_used": {
        "de": "🚫 Dieser Gutschein wurde bereits eingelöst von: <b>{used_by}</b> am: <b>{used_date}</b>",
        "en": "🚫 This coupon was already redeemed by: <b>{used_by}</b> on: <b>{used_date}</b>",
    },
    "redeem.no_window": {
        "de": "⚠️ Für diesen Gutschein ist kein Gültigkeitszeitraum hinterlegt.",
        "en": "⚠️ This coupon has no validity period.",
    },
    "redeem.not_yet_valid": {
        "de": "⏳ Der Gutschein ist noch nicht gültig. Gültig ab: <b>{valid_from}</b>",
        "en": "⏳ The coupon is not valid yet. Valid from: <b>{valid_from}</b>",
    },
    "redeem.expired": {
        "de": "⌛ Der Gutschein ist abgelaufen. Gültig bis: <b>{valid_to}</b>",
        "en": "⌛ The coupon has expired. Valid until: <b>{valid_to}</b>",
    },
    "redeem.success": {
        "de": "✅ <b>Erfolg!</b> Gutschein erfolgreich eingelöst. Danke!",
        "en": "✅ <b>Success!</b> Coupon redeemed. Thank you!",
    },
    "redeem.error": {
        "de": "Ein unerwarteter Fehler ist aufgetreten. Bitte versuche es erneut.",
        "en": "An unexpected error occurred. Please try again.",
    },

    # Store
    "store.id_missing": {
        "de": "Gutschein-ID fehlt.",
        "en": "Coupon id is missing.",
    },
    "store.not_found": {
        "de": "Gutschein {coupon_id} existiert nicht.",
        "en": "Coupon {coupon_id} does not exist.",
    },
    "store.failed": {
        "de": "Datenbankfehler bei {operation}.",
        "en": "Database error during {operation}.",
    },

    # Import
    "import.empty_file": {
        "de": "Die Datei scheint leer zu sein.",
        "en": "The file appears to be empty.",
    },
    "import.no_rows": {
        "de": "Keine gültigen Gutscheine in der Datei. Erwartete Spalten: code, type, validFrom, validTo",
        "en": "No valid coupon data found in the file. Expected columns: code, type, validFrom, validTo",
    },
    "import.no_sheet": {
        "de": "Tabellenblatt \"{sheet}\" nicht gefunden.",
        "en": "Sheet \"{sheet}\" not found in the file.",
    },
    "import.unsupported": {
        "de": "Nicht unterstützter Dateityp: {filename}. Bitte lade eine Excel- (.xlsx, .xls) oder CSV-Datei hoch.",
        "en": "Unsupported file type: {filename}. Please upload an Excel (.xlsx, .xls) or CSV file.",
    },
    "import.processing": {
        "de": "⏳ Datei wird verarbeitet...",
        "en": "⏳ Processing file...",
    },
    "import.all_duplicates": {
        "de": "ℹ️ Alle {total} Gutscheine existieren bereits.",
        "en": "ℹ️ All {total} coupons already exist.",
    },
    "import.done": {
        "de": "✅ <b>Import fertig</b>\n\nNeu: {inserted}\nDuplikate: {duplicates}",
        "en": "✅ <b>Import finished</b>\n\nNew: {inserted}\nDuplicates: {duplicates}",
    },
    "import.failed": {
        "de": "❌ Fehler beim Import: {error}",
        "en": "❌ Import failed: {error}",
    },

    # Auth
    "auth.usage": {
        "de": "ℹ️ Nutzung: <code>/login E-MAIL PASSWORT</code>",
        "en": "ℹ️ Usage: <code>/login EMAIL PASSWORD</code>",
    },
    "auth.wrong_email": {
        "de": "Benutzer nicht gefunden.",
        "en": "User not found.",
    },
    "auth.wrong_password": {
        "de": "Falsches Passwort.",
        "en": "Wrong password.",
    },
    "auth.not_configured": {
        "de": "Kein Admin-Zugang konfiguriert.",
        "en": "No admin account configured.",
    },
    "auth.signed_in": {
        "de": "👑 <b>Angemeldet.</b> Das Dashboard aktualisiert sich automatisch.",
        "en": "👑 <b>Signed in.</b> The dashboard updates automatically.",
    },
    "auth.signed_out": {
        "de": "👋 Abgemeldet.",
        "en": "👋 Signed out.",
    },
    "auth.confirm_logout": {
        "de": "Wirklich abmelden?",
        "en": "Really sign out?",
    },
    "auth.required": {
        "de": "🔒 Nur für Admins. Bitte zuerst <code>/login</code>.",
        "en": "🔒 Admins only. Please <code>/login</code> first.",
    },
    "auth.required_alert": {
        "de": "🔒 Nur für Admins. Bitte zuerst /login.",
        "en": "🔒 Admins only. Please /login first.",
    },
    "auth.failed": {
        "de": "❌ Anmeldung fehlgeschlagen: {error}",
        "en": "❌ Sign in failed: {error}",
    },

    # Admin
    "admin.add_usage": {
        "de": "ℹ️ Nutzung: <code>/add CODE VON BIS [TYP]</code> (Datum: dd/mm/yyyy)",
        "en": "ℹ️ Usage: <code>/add CODE FROM TO [TYPE]</code> (dates: dd/mm/yyyy)",
    },
    "admin.edit_usage": {
        "de": "ℹ️ Nutzung: <code>/edit CODE FELD WERT</code>\nFelder: {fields}",
        "en": "ℹ️ Usage: <code>/edit CODE FIELD VALUE</code>\nFields: {fields}",
    },
    "admin.delete_usage": {
        "de": "ℹ️ Nutzung: <code>/delete CODE</code>",
        "en": "ℹ️ Usage: <code>/delete CODE</code>",
    },
    "admin.exists": {
        "de": "⚠️ Code <b>{code}</b> existiert bereits.",
        "en": "⚠️ Code <b>{code}</b> already exists.",
    },
    "admin.unknown_code": {
        "de": "❌ Code <b>{code}</b> nicht gefunden.",
        "en": "❌ Code <b>{code}</b> not found.",
    },
    "admin.added": {
        "de": "✅ Gutschein <b>{code}</b> hinzugefügt.",
        "en": "✅ Coupon <b>{code}</b> added.",
    },
    "admin.updated": {
        "de": "✅ Gutschein <b>{code}</b> aktualisiert.",
        "en": "✅ Coupon <b>{code}</b> updated.",
    },
    "admin.confirm_delete": {
        "de": "Gutschein <b>{code}</b> wirklich löschen?",
        "en": "Really delete coupon <b>{code}</b>?",
    },
    "admin.deleted": {
        "de": "🗑 Gutschein gelöscht.",
        "en": "🗑 Coupon deleted.",
    },
    "admin.nothing_to_delete": {
        "de": "ℹ️ Keine Gutscheine zum Löschen.",
        "en": "ℹ️ No coupons to delete.",
    },
    "admin.confirm_delete_all": {
        "de": "⚠️ <b>Achtung!</b> Alle {total} Gutscheine werden unwiderruflich gelöscht.",
        "en": "⚠️ <b>Warning!</b> All {total} coupons will be deleted permanently.",
    },
    "admin.deleted_all": {
        "de": "🗑 {count} Gutscheine gelöscht.",
        "en": "🗑 {count} coupons deleted.",
    },
    "admin.cancelled": {
        "de": "Abgebrochen.",
        "en": "Cancelled.",
    },
    "admin.failed": {
        "de": "❌ Fehler: {error}",
        "en": "❌ Error: {error}",
    },
    "admin.list_empty": {
        "de": "📭 Keine Gutscheine.",
        "en": "📭 No coupons.",
    },
    "admin.list_no_match": {
        "de": "📭 Keine Gutscheine passend zur Suche.",
        "en": "📭 No coupons match the search.",
    },
    "admin.list_header": {
        "de": "🎫 <b>Gutscheine ({shown} von {total})</b>",
        "en": "🎫 <b>Coupons ({shown} of {total})</b>",
    },
    "admin.stats": {
        "de": (
            "📊 <b>Statistik</b>\n"
            "───────────────\n"
            "Gesamt: <b>{total}</b>\n"
            "Eingelöst: <b>{used}</b>\n"
            "Offen: <b>{unused}</b> (aktiv: {active} / abgelaufen: {expired})"
        ),
        "en": (
            "📊 <b>Statistics</b>\n"
            "───────────────\n"
            "Total: <b>{total}</b>\n"
            "Redeemed: <b>{used}</b>\n"
            "Unused: <b>{unused}</b> (active: {active} / expired: {expired})"
        ),
    },
    "admin.dashboard_updated": {
        "de": "<i>Stand: {time}</i>",
        "en": "<i>As of: {time}</i>",
    },

    # Keyboards / help
    "kb.redeem": {
        "de": "🎫 Code einlösen",
        "en": "🎫 Redeem code",
    },
    "kb.help": {
        "de": "ℹ️ Hilfe",
        "en": "ℹ️ Help",
    },
    "kb.yes": {
        "de": "✅ Ja",
        "en": "✅ Yes",
    },
    "kb.no": {
        "de": "❌ Nein",
        "en": "❌ No",
    },
    "start": {
        "de": "👋 Hallo! Sende mir deinen Gutscheincode, um ihn einzulösen.",
        "en": "👋 Hello! Send me your coupon code to redeem it.",
    },
    "help": {
        "de": (
            "ℹ️ <b>Hilfe</b>\n\n"
            "1. Sende deinen Gutscheincode (z. B. <code>TRH0FI</code>).\n"
            "2. Ich prüfe, ob er existiert, noch nicht benutzt wurde und aktuell gültig ist.\n"
            "3. Jeder Code kann nur <b>einmal</b> eingelöst werden."
        ),
        "en": (
            "ℹ️ <b>Help</b>\n\n"
            "1. Send your coupon code (e.g. <code>TRH0FI</code>).\n"
            "2. I check that it exists, is unused and currently valid.\n"
            "3. Every code can be redeemed only <b>once</b>."
        ),
    },
    "ask_code": {
        "de": "Sende mir jetzt deinen Code.",
        "en": "Send me your code now.",
    },
}


def translate(key: str, lang: Optional[str] = None, **kwargs) -> str:
    """
    Translate a message key.

    Falls back to the default language, then to the key itself.
    """
    entry = TRANSLATIONS.get(key)
    if entry is None:
        return key
    text = entry.get(lang or LOCALE) or entry[DEFAULT_LANGUAGE]
    return text.format(**kwargs) if kwargs else text


def escape(value) -> str:
    """Quotes user supplied text for HTML messages."""
    return html_decoration.quote(str(value))
