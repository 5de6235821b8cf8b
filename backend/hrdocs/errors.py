"""Typed failures raised by the document engine.

Every error carries a stable ``code`` (e.g. ``SingleDocumentLimitExceeded``)
and belongs to one ``kind``. The HTTP layer maps kinds to status codes; the
services never deal in status codes themselves.
"""


class DocumentError(Exception):
    kind = "DocumentError"
    status_code = 400

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    def to_dict(self) -> dict:
        return {"detail": self.message, "code": self.code, "kind": self.kind}


class NotFound(DocumentError):
    kind = "NotFound"
    status_code = 404


class ValidationFailed(DocumentError):
    kind = "ValidationFailed"
    status_code = 422


class PolicyViolation(DocumentError):
    kind = "PolicyViolation"
    status_code = 409


class Conflict(DocumentError):
    kind = "Conflict"
    status_code = 409


class ProtectedResource(DocumentError):
    kind = "ProtectedResource"
    status_code = 403
