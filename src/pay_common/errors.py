"""Unified error codes and custom exceptions.

Every business error belongs to one of four kinds, each a subclass of AppError
with a fixed HTTP status:

  NotFoundError      404  entity missing or not owned by the caller
  ConflictError      409  uniqueness violated / state forbids the operation
  InvalidInputError  400  bad payload or reference to an unusable provider
  InternalError      500  unexpected store failure

Error code ranges:
  1xxx: User
  2xxx: Payment provider
  3xxx: Payment method
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


class NotFoundError(AppError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 404)


class ConflictError(AppError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 409)


class InvalidInputError(AppError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 400)


class AuthenticationError(AppError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 401)


# --- 1xxx: User ---

class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: str) -> None:
        super().__init__(1001, f"User not found: {user_id}")


class PhoneExistsError(ConflictError):
    def __init__(self) -> None:
        super().__init__(1002, "Phone number already registered")


class EmailExistsError(ConflictError):
    def __init__(self) -> None:
        super().__init__(1003, "Email already registered")


class ApiKeyRequiredError(AuthenticationError):
    def __init__(self) -> None:
        super().__init__(1004, "API key is required")


class InvalidApiKeyError(AuthenticationError):
    def __init__(self) -> None:
        super().__init__(1005, "Invalid API key")


# --- 2xxx: Payment provider ---

class ProviderNotFoundError(NotFoundError):
    def __init__(self, provider_id: str) -> None:
        super().__init__(2001, f"Payment provider not found: {provider_id}")


class ProviderNameExistsError(ConflictError):
    def __init__(self, name: str) -> None:
        super().__init__(2002, f"Payment provider name already exists: {name}")


class ProviderInUseError(ConflictError):
    def __init__(self, provider_id: str, method_count: int) -> None:
        super().__init__(
            2003,
            f"Payment provider {provider_id} is referenced by {method_count} payment method(s)",
        )


# --- 3xxx: Payment method ---

class PaymentMethodNotFoundError(NotFoundError):
    def __init__(self, method_id: str) -> None:
        super().__init__(3001, f"Payment method not found: {method_id}")


class PaymentMethodExistsError(ConflictError):
    def __init__(self, provider_method_id: str) -> None:
        super().__init__(3002, f"Payment method already exists: {provider_method_id}")


class InvalidProviderError(InvalidInputError):
    def __init__(self, provider_id: str) -> None:
        super().__init__(3003, f"Invalid or inactive payment provider: {provider_id}")


class PaymentMethodInactiveError(InvalidInputError):
    def __init__(self, method_id: str) -> None:
        super().__init__(3004, f"Payment method is inactive: {method_id}")


class NoDefaultPaymentMethodError(NotFoundError):
    def __init__(self) -> None:
        super().__init__(3005, "No default payment method")


# --- 9xxx: System ---

class ValidationFailedError(InvalidInputError):
    def __init__(self, detail: str) -> None:
        super().__init__(9001, detail)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class RequestTimeoutError(AppError):
    def __init__(self) -> None:
        super().__init__(9003, "Request timed out", 504)
