"""User directory routes."""

from fastapi import APIRouter, HTTPException
from protean.utils.globals import current_domain

from storefront.api.identity import CurrentCaller, OptionalCaller
from storefront.api.schemas import RegisterUserRequest, UserResponse
from storefront.identity.registration import RegisterUser
from storefront.identity.user import Role, User

user_router = APIRouter(prefix="/users", tags=["users"])


@user_router.post("", status_code=201, response_model=UserResponse)
async def register_user(body: RegisterUserRequest, caller: OptionalCaller) -> UserResponse:
    """Register a directory entry.

    A signed-in caller registers under their gateway-issued id. Only admins
    may create admin accounts.
    """
    if body.role == Role.ADMIN.value and not (caller and caller.is_admin):
        raise HTTPException(status_code=403, detail="Only admins can create admin accounts")

    command = RegisterUser(
        user_id=caller.user_id if caller and not caller.is_admin else None,
        name=body.name,
        email=body.email,
        phone_number=body.phone_number,
        wilaya=body.wilaya,
        role=body.role,
    )
    user_id = current_domain.process(command, asynchronous=False)
    return UserResponse.from_user(current_domain.repository_for(User).get(user_id))


@user_router.get("/me", response_model=UserResponse)
async def get_me(caller: CurrentCaller) -> UserResponse:
    return UserResponse.from_user(current_domain.repository_for(User).get(caller.user_id))
