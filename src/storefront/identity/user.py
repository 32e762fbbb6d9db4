"""User aggregate: the directory of customers and admins.

Credentials are issued and checked upstream. This record holds the profile
the storefront needs: who to notify, who is an admin, where they live.
"""

import re
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, String

from storefront.domain import storefront

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class Role(Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"


@storefront.event(part_of="User")
class UserRegistered:
    __version__ = 1

    user_id = Identifier(required=True)
    name = String(required=True)
    email = String(required=True)
    role = String(required=True)
    registered_at = DateTime(required=True)


@storefront.aggregate
class User:
    name = String(required=True, max_length=100)
    email = String(required=True, max_length=254)
    phone_number = String(max_length=20)
    wilaya = String(max_length=50)
    role = String(choices=Role, default=Role.CUSTOMER.value)
    registered_at = DateTime()

    @invariant.post
    def email_must_look_like_an_address(self):
        if not _EMAIL_PATTERN.match(self.email or ""):
            raise ValidationError({"email": [f"'{self.email}' is not a valid email address"]})

    @classmethod
    def register(cls, name, email, role=Role.CUSTOMER.value, phone_number=None, wilaya=None, user_id=None):
        """Create a directory entry. ``user_id`` is the id the identity provider issued, when known."""
        now = datetime.now(UTC)
        identity = {"id": user_id} if user_id else {}
        user = cls(
            **identity,
            name=name,
            email=email.strip().lower(),
            phone_number=phone_number,
            wilaya=wilaya,
            role=role,
            registered_at=now,
        )
        user.raise_(
            UserRegistered(
                user_id=str(user.id),
                name=user.name,
                email=user.email,
                role=user.role,
                registered_at=now,
            )
        )
        return user

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value
