from typing import Dict


class ReceiptError(Exception):
    """ Base class for errors raised by the receipt processor """


class ValidationError(ReceiptError):
    """ Raised when a submitted receipt body is malformed; carries one message per field """

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        details = "; ".join(f"{field}: {message}" for field, message in self.errors.items())
        super().__init__(f"Invalid receipt ({details})")


class ReceiptNotFound(ReceiptError):
    def __init__(self, receipt_id: str):
        self.receipt_id = receipt_id
        super().__init__(f"Receipt with ID '{receipt_id}' not found")


class InternalError(ReceiptError):
    """ Unexpected failure; callers only ever see this fixed message, never the cause """

    def __init__(self):
        super().__init__("Internal server error")
