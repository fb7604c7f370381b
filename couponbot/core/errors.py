"""
Error taxonomy for coupon redemption and administration.

Every error carries a message that can be shown to the user as is.
"""
from couponbot.core.i18n import escape, translate


class CouponError(Exception):
    """Base class for all coupon errors."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class EmptyCodeError(CouponError):
    def __init__(self):
        super().__init__(translate("redeem.empty_code"))


class InvalidDateError(CouponError):
    """A date literal that could not be turned into a calendar date."""

    def __init__(self, value):
        super().__init__(translate("date.invalid", value=escape(value)))
        self.value = value


class MissingValidityWindowError(CouponError):
    def __init__(self):
        super().__init__(translate("redeem.no_window"))


class RecordIdMissingError(CouponError):
    def __init__(self):
        super().__init__(translate("store.id_missing"))


class StoreOperationError(CouponError):
    """Wraps any failure of the underlying record store."""


class EmptyFileError(CouponError):
    def __init__(self, message: str = ""):
        super().__init__(message or translate("import.empty_file"))


class NoSheetError(CouponError):
    def __init__(self, sheet_name: str = ""):
        super().__init__(translate("import.no_sheet", sheet=escape(sheet_name)))
        self.sheet_name = sheet_name


class UnsupportedFileTypeError(CouponError):
    def __init__(self, filename: str = ""):
        super().__init__(translate("import.unsupported", filename=escape(filename)))
        self.filename = filename


class AuthenticationError(CouponError):
    pass


class DuplicateCodeError(CouponError):
    def __init__(self, code: str):
        super().__init__(translate("admin.exists", code=escape(code)))
        self.code = code


class CouponNotFoundError(CouponError):
    """Admin lookup of a code that is not stored (redemption reports not_found instead)."""

    def __init__(self, code: str):
        super().__init__(translate("admin.unknown_code", code=escape(code)))
        self.code = code
