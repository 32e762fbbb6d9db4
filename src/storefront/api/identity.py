"""Request identity, as asserted by the upstream authentication gateway.

The gateway authenticates the user and forwards ``X-User-Id`` and
``X-User-Role``. The storefront trusts those headers as given.
"""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Header, HTTPException

from storefront.identity.user import Role
from storefront.utils.logging import bind_request_context


@dataclass(frozen=True)
class Caller:
    user_id: str
    role: str = Role.CUSTOMER.value

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value


def optional_caller(
    x_user_id: Annotated[str | None, Header()] = None,
    x_user_role: Annotated[str | None, Header()] = None,
) -> Caller | None:
    if not x_user_id:
        return None
    caller = Caller(user_id=x_user_id, role=(x_user_role or Role.CUSTOMER.value).lower())
    bind_request_context(user_id=caller.user_id)
    return caller


def current_caller(caller: Annotated[Caller | None, Depends(optional_caller)]) -> Caller:
    if caller is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return caller


def require_admin(caller: Annotated[Caller, Depends(current_caller)]) -> Caller:
    if not caller.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return caller


CurrentCaller = Annotated[Caller, Depends(current_caller)]
AdminCaller = Annotated[Caller, Depends(require_admin)]
OptionalCaller = Annotated[Caller | None, Depends(optional_caller)]
