from fastapi import HTTPException, status


class UnauthorizedError(HTTPException):
    def __init__(self, detail: str = "Invalid or missing authentication"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class ValidationError(HTTPException):
    """Field-level rule violation. ``errors`` maps field name to reason."""

    def __init__(self, errors: dict[str, str], message: str = "Validation failed"):
        self.errors = dict(errors)
        super().__init__(
            status_code=422,
            detail={"message": message, "errors": self.errors},
        )


class AuthorizationError(HTTPException):
    def __init__(self, detail: str = "Not allowed to perform this action"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFoundError(HTTPException):
    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=f"{entity} {entity_id} not found")


class ConflictError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class InvalidTransitionError(ConflictError):
    def __init__(self, entity: str, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"{entity} cannot move from '{current}' to '{requested}'")


class UpstreamError(HTTPException):
    def __init__(self, detail: str = "Storage backend unavailable, please retry later"):
        super().__init__(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)
