# aquapark/editing/errors.py


class EditError(Exception):
    """An edit the session refused; its state is unchanged."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class InvalidSelection(EditError):
    pass


class LimitExceeded(EditError):
    pass


class TooManyPayments(EditError):
    pass


class LastPaymentRequired(EditError):
    pass


class NegativeTotal(EditError):
    pass


class NotReconciled(EditError):
    pass


class NoChanges(EditError):
    pass


class EmptyOrder(EditError):
    pass


class SessionClosed(EditError):
    pass


class SaveInProgress(EditError):
    pass


class SaveFailed(EditError):
    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class EditWarning(UserWarning):
    """Applied, but adjusted; shown to the operator as a notice."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class DiscountExceedsGross(EditWarning):
    pass


class ApiError(Exception):
    """The back-office API could not be reached or answered with an error."""

    def __init__(self, message, status_code=None, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload
