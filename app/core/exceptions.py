from fastapi import HTTPException, status


class ValidationError(HTTPException):
    """A required field is missing or malformed."""

    def __init__(self, detail: str = "Invalid input"):
        super().__init__(
            status_code=422,
            detail=detail,
        )


class AuthorizationError(HTTPException):
    """The caller lacks the grant for this model and operation."""

    def __init__(self, detail: str = "Not enough permissions"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
        )


class NotFound(HTTPException):
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
        )


class InvalidTransition(HTTPException):
    """An appointment status change the lifecycle does not allow."""

    def __init__(self, detail: str = "Invalid status transition"):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
        )
