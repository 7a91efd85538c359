"""Payment providers REST API — all endpoints require X-API-Key.

Writes also drop the provider's backend from ProviderRegistry so the next
lookup rebuilds it from the stored config.
"""

from fastapi import APIRouter, Query, Request, status

from src.pay_common.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT, PageRequest
from src.pay_common.response import ApiResponse, paginated_response, success_response
from src.pay_gateway.auth.dependencies import CurrentUser
from src.pay_gateway.dependencies import DbSession, ProviderRegistryDep, ProviderServiceDep
from src.pay_provider.application.schemas import (
    CreateProviderRequest,
    ProviderResponse,
    UpdateProviderRequest,
)

router = APIRouter(prefix="/payment-providers", tags=["payment-providers"])


def _get_request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "req_unknown")


@router.get("", response_model=ApiResponse, summary="List payment providers")
async def list_providers(
    request: Request,
    _user: CurrentUser,
    db: DbSession,
    providers: ProviderServiceDep,
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    active_only: bool = Query(False, alias="activeOnly"),
) -> ApiResponse:
    result = await providers.list_providers(db, PageRequest(page, limit), active_only)
    resp = paginated_response(
        result,
        [ProviderResponse.from_domain(p).model_dump(mode="json") for p in result.items],
        "Payment providers retrieved successfully",
    )
    resp.request_id = _get_request_id(request)
    return resp


@router.get("/active", response_model=ApiResponse, summary="List active payment providers")
async def list_active_providers(
    request: Request, _user: CurrentUser, db: DbSession, providers: ProviderServiceDep
) -> ApiResponse:
    active = await providers.list_active_providers(db)
    resp = success_response(
        [ProviderResponse.from_domain(p).model_dump(mode="json") for p in active],
        "Active payment providers retrieved successfully",
    )
    resp.request_id = _get_request_id(request)
    return resp


@router.get("/{provider_id}", response_model=ApiResponse, summary="Fetch payment provider")
async def get_provider(
    request: Request,
    provider_id: str,
    _user: CurrentUser,
    db: DbSession,
    providers: ProviderServiceDep,
) -> ApiResponse:
    provider = await providers.get_provider(db, provider_id)
    resp = success_response(
        ProviderResponse.from_domain(provider).model_dump(mode="json"),
        "Payment provider retrieved successfully",
    )
    resp.request_id = _get_request_id(request)
    return resp


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse,
    summary="Create payment provider",
)
async def create_provider(
    request: Request,
    body: CreateProviderRequest,
    _user: CurrentUser,
    db: DbSession,
    providers: ProviderServiceDep,
) -> ApiResponse:
    provider = await providers.create_provider(db, body)
    resp = success_response(
        ProviderResponse.from_domain(provider).model_dump(mode="json"),
        "Payment provider created successfully",
    )
    resp.request_id = _get_request_id(request)
    return resp


@router.put("/{provider_id}", response_model=ApiResponse, summary="Update payment provider")
async def update_provider(
    request: Request,
    provider_id: str,
    body: UpdateProviderRequest,
    _user: CurrentUser,
    db: DbSession,
    providers: ProviderServiceDep,
    registry: ProviderRegistryDep,
) -> ApiResponse:
    provider = await providers.update_provider(db, provider_id, body)
    registry.refresh(provider.name)
    resp = success_response(
        ProviderResponse.from_domain(provider).model_dump(mode="json"),
        "Payment provider updated successfully",
    )
    resp.request_id = _get_request_id(request)
    return resp


@router.delete("/{provider_id}", response_model=ApiResponse, summary="Delete payment provider")
async def delete_provider(
    request: Request,
    provider_id: str,
    _user: CurrentUser,
    db: DbSession,
    providers: ProviderServiceDep,
    registry: ProviderRegistryDep,
) -> ApiResponse:
    provider = await providers.delete_provider(db, provider_id)
    registry.refresh(provider.name)
    resp = success_response(None, "Payment provider deleted successfully")
    resp.request_id = _get_request_id(request)
    return resp


@router.patch(
    "/{provider_id}/toggle",
    response_model=ApiResponse,
    summary="Toggle payment provider active flag",
)
async def toggle_provider(
    request: Request,
    provider_id: str,
    _user: CurrentUser,
    db: DbSession,
    providers: ProviderServiceDep,
    registry: ProviderRegistryDep,
) -> ApiResponse:
    provider = await providers.toggle_active(db, provider_id)
    registry.refresh(provider.name)
    state = "activated" if provider.is_active else "deactivated"
    resp = success_response(
        ProviderResponse.from_domain(provider).model_dump(mode="json"),
        f"Payment provider {state} successfully",
    )
    resp.request_id = _get_request_id(request)
    return resp
