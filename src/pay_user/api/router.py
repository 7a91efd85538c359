"""Users REST API — open endpoints (no API key), camelCase bodies with nama/telp."""

from fastapi import APIRouter, Query, Request, status

from src.pay_common.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT, PageRequest
from src.pay_common.response import ApiResponse, paginated_response, success_response
from src.pay_gateway.dependencies import DbSession, UserServiceDep
from src.pay_user.application.schemas import (
    ApiKeyResponse,
    CreateUserRequest,
    UpdateUserRequest,
    UserResponse,
)

router = APIRouter(prefix="/users", tags=["users"])


def _get_request_id(request: Request) -> str:
    """Read request_id injected by RequestLogMiddleware, fallback if absent."""
    return getattr(request.state, "request_id", "req_unknown")


@router.get("", response_model=ApiResponse, summary="List / search users")
async def list_users(
    request: Request,
    db: DbSession,
    users: UserServiceDep,
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    search: str | None = Query(None, max_length=100, description="Matches nama, telp or email"),
) -> ApiResponse:
    result = await users.list_users(db, PageRequest(page, limit), search)
    resp = paginated_response(
        result,
        [UserResponse.from_domain(u).model_dump(mode="json") for u in result.items],
        "Users retrieved successfully",
    )
    resp.request_id = _get_request_id(request)
    return resp


@router.get("/telp/{telp}", response_model=ApiResponse, summary="Fetch user by phone")
async def get_user_by_phone(
    request: Request, telp: str, db: DbSession, users: UserServiceDep
) -> ApiResponse:
    user = await users.get_user_by_phone(db, telp)
    resp = success_response(
        UserResponse.from_domain(user).model_dump(mode="json"), "User retrieved successfully"
    )
    resp.request_id = _get_request_id(request)
    return resp


@router.get("/{user_id}", response_model=ApiResponse, summary="Fetch user")
async def get_user(
    request: Request, user_id: str, db: DbSession, users: UserServiceDep
) -> ApiResponse:
    user = await users.get_user(db, user_id)
    resp = success_response(
        UserResponse.from_domain(user).model_dump(mode="json"), "User retrieved successfully"
    )
    resp.request_id = _get_request_id(request)
    return resp


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse,
    summary="Create user",
)
async def create_user(
    request: Request, body: CreateUserRequest, db: DbSession, users: UserServiceDep
) -> ApiResponse:
    user = await users.create_user(db, body)
    resp = success_response(
        UserResponse.from_domain(user).model_dump(mode="json"), "User created successfully"
    )
    resp.request_id = _get_request_id(request)
    return resp


@router.put("/{user_id}", response_model=ApiResponse, summary="Update user")
async def update_user(
    request: Request,
    user_id: str,
    body: UpdateUserRequest,
    db: DbSession,
    users: UserServiceDep,
) -> ApiResponse:
    user = await users.update_user(db, user_id, body)
    resp = success_response(
        UserResponse.from_domain(user).model_dump(mode="json"), "User updated successfully"
    )
    resp.request_id = _get_request_id(request)
    return resp


@router.delete("/{user_id}", response_model=ApiResponse, summary="Delete user")
async def delete_user(
    request: Request, user_id: str, db: DbSession, users: UserServiceDep
) -> ApiResponse:
    user = await users.delete_user(db, user_id)
    resp = success_response(
        UserResponse.from_domain(user).model_dump(mode="json"), "User deleted successfully"
    )
    resp.request_id = _get_request_id(request)
    return resp


@router.post("/{user_id}/api-key", response_model=ApiResponse, summary="Issue / rotate API key")
async def issue_api_key(
    request: Request, user_id: str, db: DbSession, users: UserServiceDep
) -> ApiResponse:
    user = await users.issue_api_key(db, user_id)
    data = ApiKeyResponse(user_id=user.id, api_key=user.api_key or "")
    resp = success_response(data.model_dump(mode="json"), "API key issued successfully")
    resp.request_id = _get_request_id(request)
    return resp
