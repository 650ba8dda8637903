from fastapi import HTTPException, status

class BaseAppException(HTTPException):
    def __init__(self, status_code: int, detail: str):
        super().__init__(status_code=status_code, detail=detail)

class ValidationError(BaseAppException):
    def __init__(self, detail: str = "Validation error"):
        super().__init__(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)

class NotFoundError(BaseAppException):
    def __init__(self, detail: str = "Unexpected Error: Item not found."):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)

class InvalidFilterValueError(ValidationError):
    def __init__(self, detail: str = "Unexpected Error: Filter value must be an array."):
        super().__init__(detail=detail)

class UnauthorizedError(BaseAppException):
    """Raised by route gates; the handler decides between a 401 and a redirect."""

    def __init__(self, detail: str = "Unauthorized."):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)
