"""
Domain errors shared by services and routes.
Each carries the HTTP status it is rendered with.
"""
from typing import Optional


class DomainError(Exception):
    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(DomainError):
    status_code = 400
    default_message = "Invalid payload"


class InvalidEventType(ValidationError):
    default_message = "Invalid event type"


class InvalidLead(ValidationError):
    default_message = "Invalid lead"


class NotFound(DomainError):
    status_code = 404
    default_message = "Not found"


class RepNotFound(NotFound):
    default_message = "Rep not found"


class Unauthorized(DomainError):
    status_code = 401
    default_message = "Unauthorized"


class Conflict(DomainError):
    status_code = 409
    default_message = "Conflict"


class StorageError(DomainError):
    status_code = 500
    default_message = "Storage failure"
