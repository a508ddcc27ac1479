"""
Error kinds for the TMK lookup tool.
"""


class TmkToolError(Exception):
    """Base exception for the TMK lookup tool"""
    pass


class InvalidInputError(TmkToolError):
    """Raised when user input is not a number (or not a y/n answer)"""
    pass


class OutOfRangeError(TmkToolError):
    """Raised when a numeric TMK field is outside its bounds"""

    def __init__(self, field: str, value, message: str = ""):
        self.field = field
        self.value = value
        super().__init__(message or f"{field} {value!r} is out of range")


class SourceUnavailableError(TmkToolError):
    """Raised when the reference list or a parcel page cannot be read"""
    pass


class ExtractionAbsence(TmkToolError):
    """Raised when a parcel page lacks a required field; the record is dropped"""

    def __init__(self, tmk: str, reason: str):
        self.tmk = tmk
        self.reason = reason
        super().__init__(f"{tmk}: {reason}")
