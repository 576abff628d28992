"""
Named failures surfaced by the API.

Every error renders as {"error": <code>, "detail": <message>} with the
status code carried by the exception class.
"""
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse


class ServiceError(Exception):
    code = "SERVICE_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    headers: dict[str, str] | None = None

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail()
        super().__init__(self.detail)

    def default_detail(self) -> str:
        return self.code.replace("_", " ").capitalize()


class Unauthorized(ServiceError):
    code = "UNAUTHORIZED"
    status_code = status.HTTP_401_UNAUTHORIZED
    headers = {"WWW-Authenticate": "Bearer"}


class Forbidden(ServiceError):
    code = "FORBIDDEN"
    status_code = status.HTTP_403_FORBIDDEN

    def default_detail(self) -> str:
        return "Admin only"


class NotFound(ServiceError):
    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str):
        self.entity = entity
        super().__init__(f"{entity.capitalize()} not found")


class InvalidQuantity(ServiceError):
    code = "INVALID_QUANTITY"
    status_code = status.HTTP_400_BAD_REQUEST

    def default_detail(self) -> str:
        return "Quantity must be a positive integer"


class InsufficientStock(ServiceError):
    code = "INSUFFICIENT_STOCK"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, product_id: str, requested: int, available: int):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Stock not enough for product {product_id}: requested {requested}, available {available}"
        )


class UpstreamUnavailable(ServiceError):
    code = "UPSTREAM_UNAVAILABLE"
    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, service: str, reason: str = ""):
        self.service = service
        self.reason = reason
        message = f"{service.capitalize()} service unavailable"
        super().__init__(f"{message}: {reason}" if reason else message)


class StoreError(ServiceError):
    code = "STORE_ERROR"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def default_detail(self) -> str:
        return "Order store unavailable"


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "detail": exc.detail},
        headers=exc.headers,
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)
