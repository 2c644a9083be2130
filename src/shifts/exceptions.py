"""Errors raised by the shift ledger.

All of them derive from ``ValueError`` so callers that already guard
service calls with ``except ValueError`` keep working; the API layer
distinguishes them to pick the HTTP status.
"""


class ShiftError(ValueError):
    code = "shift_error"
    default_message = "Operation impossible sur la session de caisse."

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ShiftError):
    """Negative cash amount, malformed range or unknown option."""

    code = "invalid"
    default_message = "Donnees invalides."


class ConflictError(ShiftError):
    """The cashier already has an active shift in this organization."""

    code = "active_shift_exists"
    default_message = (
        "Vous avez deja une session de caisse en cours. "
        "Terminez d'abord votre session actuelle."
    )


class NotFoundError(ShiftError):
    code = "not_found"
    default_message = "Session de caisse introuvable."


class InvalidStateError(ShiftError):
    """Closing a closed shift, or touching a frozen field."""

    code = "invalid_state"
    default_message = "Cette session de caisse est deja fermee."
