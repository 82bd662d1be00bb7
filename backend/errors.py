from fastapi import HTTPException


class MissingFields(HTTPException):
    def __init__(self, detail: str = "Missing required fields"):
        super().__init__(status_code=400, detail=detail)


class InvalidArgument(HTTPException):
    def __init__(self, detail: str = "Invalid argument"):
        super().__init__(status_code=400, detail=detail)


class NotFound(HTTPException):
    def __init__(self, detail: str = "Item not found"):
        super().__init__(status_code=404, detail=detail)


class InsufficientStock(HTTPException):
    # Business rule rejection, the caller can retry with a smaller quantity.
    def __init__(self, detail: str = "Not enough inventory for this sale"):
        super().__init__(status_code=400, detail=detail)


class StorageFailure(HTTPException):
    def __init__(self, detail: str = "Storage failure"):
        super().__init__(status_code=500, detail=detail)
