class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class ValidationError(AppError):
    """Raised when a booking candidate is malformed (unknown day token, null field, empty batch)."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=422, details=details)

class ReferenceNotFoundError(AppError):
    """Raised when a booking references a missing record or a section outside its grade."""
    def __init__(self, errors: list[str], message: str = None, details: dict = None):
        self.errors = list(errors)
        payload = {"errors": self.errors}
        payload.update(details or {})
        super().__init__(message or ", ".join(self.errors), status_code=400, details=payload)

class ConflictError(AppError):
    """Raised when a booking would double-book a teacher, room or section.

    ``message`` is the first detected conflict; every detected conflict is kept
    in ``conflicts`` and mirrored into ``details``.
    """
    def __init__(self, message: str, conflicts: list = None, details: dict = None):
        self.conflicts = list(conflicts or [])
        payload = {"conflicts": [conflict.model_dump(mode="json") for conflict in self.conflicts]}
        payload.update(details or {})
        super().__init__(message, status_code=409, details=payload)

class StorageConstraintError(AppError):
    """Raised when the database rejects a booking that passed the conflict check.

    This signals a concurrent writer won the race. It is never retried here;
    resubmitting re-runs the full check against fresh state.
    """
    def __init__(self, message: str = "Schedule conflict detected by storage constraint", details: dict = None):
        super().__init__(message, status_code=409, details=details)

class NotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(f"{resource_type} with id {resource_id} not found", status_code=404)
