"""Payment methods REST API — all endpoints require X-API-Key and act on the
caller's own methods only."""

from fastapi import APIRouter, Query, Request, status

from src.pay_common.enums import PaymentMethodType
from src.pay_common.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT, PageRequest
from src.pay_common.response import ApiResponse, paginated_response, success_response
from src.pay_gateway.auth.dependencies import CurrentUser
from src.pay_gateway.dependencies import DbSession, PaymentMethodServiceDep
from src.pay_method.application.schemas import (
    CreatePaymentMethodRequest,
    PaymentMethodResponse,
    UpdatePaymentMethodRequest,
)
from src.pay_method.domain.models import PaymentMethod

router = APIRouter(prefix="/payment-methods", tags=["payment-methods"])


def _get_request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "req_unknown")


def _dump(method: PaymentMethod) -> dict:
    return PaymentMethodResponse.from_domain(method).model_dump(mode="json")


@router.get("", response_model=ApiResponse, summary="List caller's payment methods")
async def list_payment_methods(
    request: Request,
    user: CurrentUser,
    db: DbSession,
    methods: PaymentMethodServiceDep,
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    method_type: PaymentMethodType | None = Query(None, alias="type"),
    is_active: bool = Query(False, alias="isActive", description="true → active only"),
    provider_id: str | None = Query(None, alias="providerId"),
) -> ApiResponse:
    result = await methods.list_for_user(
        db, user.id, PageRequest(page, limit), method_type, is_active, provider_id
    )
    resp = paginated_response(
        result,
        [_dump(m) for m in result.items],
        "Payment methods retrieved successfully",
    )
    resp.request_id = _get_request_id(request)
    return resp


@router.get("/active", response_model=ApiResponse, summary="List caller's active payment methods")
async def list_active_payment_methods(
    request: Request, user: CurrentUser, db: DbSession, methods: PaymentMethodServiceDep
) -> ApiResponse:
    active = await methods.list_active_for_user(db, user.id)
    resp = success_response(
        [_dump(m) for m in active], "Active payment methods retrieved successfully"
    )
    resp.request_id = _get_request_id(request)
    return resp


@router.get("/default", response_model=ApiResponse, summary="Fetch caller's default payment method")
async def get_default_payment_method(
    request: Request, user: CurrentUser, db: DbSession, methods: PaymentMethodServiceDep
) -> ApiResponse:
    method = await methods.get_default_for_user(db, user.id)
    resp = success_response(_dump(method), "Default payment method retrieved successfully")
    resp.request_id = _get_request_id(request)
    return resp


@router.get("/{method_id}", response_model=ApiResponse, summary="Fetch payment method")
async def get_payment_method(
    request: Request,
    method_id: str,
    user: CurrentUser,
    db: DbSession,
    methods: PaymentMethodServiceDep,
) -> ApiResponse:
    method = await methods.get_for_user(db, method_id, user.id)
    resp = success_response(_dump(method), "Payment method retrieved successfully")
    resp.request_id = _get_request_id(request)
    return resp


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse,
    summary="Create payment method",
)
async def create_payment_method(
    request: Request,
    body: CreatePaymentMethodRequest,
    user: CurrentUser,
    db: DbSession,
    methods: PaymentMethodServiceDep,
) -> ApiResponse:
    method = await methods.create(db, user.id, body)
    resp = success_response(_dump(method), "Payment method created successfully")
    resp.request_id = _get_request_id(request)
    return resp


@router.put("/{method_id}", response_model=ApiResponse, summary="Update payment method")
async def update_payment_method(
    request: Request,
    method_id: str,
    body: UpdatePaymentMethodRequest,
    user: CurrentUser,
    db: DbSession,
    methods: PaymentMethodServiceDep,
) -> ApiResponse:
    method = await methods.update(db, method_id, user.id, body)
    resp = success_response(_dump(method), "Payment method updated successfully")
    resp.request_id = _get_request_id(request)
    return resp


@router.delete("/{method_id}", response_model=ApiResponse, summary="Delete payment method")
async def delete_payment_method(
    request: Request,
    method_id: str,
    user: CurrentUser,
    db: DbSession,
    methods: PaymentMethodServiceDep,
) -> ApiResponse:
    await methods.delete(db, method_id, user.id)
    resp = success_response(None, "Payment method deleted successfully")
    resp.request_id = _get_request_id(request)
    return resp


@router.patch(
    "/{method_id}/set-default",
    response_model=ApiResponse,
    summary="Make payment method the caller's default",
)
async def set_default_payment_method(
    request: Request,
    method_id: str,
    user: CurrentUser,
    db: DbSession,
    methods: PaymentMethodServiceDep,
) -> ApiResponse:
    method = await methods.set_default(db, method_id, user.id)
    resp = success_response(_dump(method), "Payment method set as default successfully")
    resp.request_id = _get_request_id(request)
    return resp


@router.patch(
    "/{method_id}/deactivate",
    response_model=ApiResponse,
    summary="Deactivate payment method",
)
async def deactivate_payment_method(
    request: Request,
    method_id: str,
    user: CurrentUser,
    db: DbSession,
    methods: PaymentMethodServiceDep,
) -> ApiResponse:
    method = await methods.deactivate(db, method_id, user.id)
    resp = success_response(_dump(method), "Payment method deactivated successfully")
    resp.request_id = _get_request_id(request)
    return resp
