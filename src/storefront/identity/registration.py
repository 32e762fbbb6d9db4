"""User registration and directory lookups."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.errors import ConflictError
from storefront.identity.user import Role, User
from storefront.ordering.wilaya import canonical_wilaya


@storefront.command(part_of="User")
class RegisterUser:
    user_id = Identifier()
    name = String(required=True, max_length=100)
    email = String(required=True, max_length=254)
    phone_number = String(max_length=20)
    wilaya = String(max_length=50)
    role = String(max_length=20, default=Role.CUSTOMER.value)


def find_by_email(email) -> User | None:
    found = current_domain.repository_for(User)._dao.query.filter(email=email.strip().lower()).all().items
    return found[0] if found else None


def admins() -> list[User]:
    return list(current_domain.repository_for(User)._dao.query.filter(role=Role.ADMIN.value).all().items)


def _exists(user_id) -> bool:
    try:
        current_domain.repository_for(User).get(str(user_id))
    except ObjectNotFoundError:
        return False
    return True


def display_name(user_id) -> str:
    """The user's name, or their id when the directory has no record of them."""
    try:
        return current_domain.repository_for(User).get(str(user_id)).name
    except ObjectNotFoundError:
        return str(user_id)


@storefront.command_handler(part_of=User)
class RegisterUserHandler:
    @handle(RegisterUser)
    def register_user(self, command):
        if find_by_email(command.email) is not None:
            raise ConflictError({"email": [f"{command.email} is already registered"]})
        if command.user_id and _exists(command.user_id):
            raise ConflictError({"user_id": [f"User {command.user_id} is already registered"]})

        user = User.register(
            name=command.name,
            email=command.email,
            role=command.role or Role.CUSTOMER.value,
            phone_number=command.phone_number,
            wilaya=canonical_wilaya(command.wilaya) if command.wilaya else None,
            user_id=command.user_id,
        )
        current_domain.repository_for(User).add(user)
        return str(user.id)
