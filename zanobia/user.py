"""Users, permissions and roles: models, validation, access checks and services."""

from __future__ import annotations

import re
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field, replace
from typing import Any, Iterator

from zanobia.errors import ErrorDetails, ForbiddenError, UnauthorizedError
from zanobia.validation import raise_if_invalid
from zanobia.warehouse import Warehouse

SYS_ADMIN_PERMISSION_HANDLE = "sys_admin"
HAS_USER_CONTROL_PERMISSION = "has_user_control"
HAS_PRODUCT_CONTROL_PERMISSION = "has_product_control"
HAS_BATCH_CONTROL_PERMISSION = "has_batch_control"
CAN_DELETE_PRODUCT_PERMISSION = "can_delete_product"
CAN_DELETE_BATCH_PERMISSION = "can_delete_batch"

_ROLE_NAME = re.compile(r"[a-z]{3,50}")
_EMAIL = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
_DIGIT = re.compile(r"\d")
_SYMBOL = re.compile(r"[!@#$%^&*()_+{}\[\]:;<>,.?~\\/-]")
_PERSON_NAME = re.compile(r"[A-Za-z]+([-'][A-Za-z]+)*")


@dataclass
class Permission:
    handle: str = ""
    name: str = ""
    description: str = ""
    is_secret: bool = False
    id: int | None = None


@dataclass
class PermissionClaim:
    handle: str
    name: str = ""
    description: str = ""


@dataclass
class Role:
    name: str
    description: str = ""
    permission_handles: list[str] = field(default_factory=list)
    id: int | None = None


@dataclass
class UserInput:
    email: str
    password: str
    first_name: str
    last_name: str
    permission_handles: list[str] = field(default_factory=list)


@dataclass
class User:
    id: int = 0
    email: str | None = None
    first_name: str = ""
    last_name: str = ""
    is_active: bool = False
    hash: str | None = None
    warehouses: list[Warehouse] = field(default_factory=list)
    permissions: dict[str, PermissionClaim] = field(default_factory=dict)

    def has_permission(self, permission_handle: str) -> bool:
        return permission_handle in self.permissions


@dataclass
class UserLoginInput:
    email: str
    password: str


def generate_initial_permissions() -> list[Permission]:
    return [
        Permission(name="system admin", is_secret=True, handle=SYS_ADMIN_PERMISSION_HANDLE),
        Permission(name="has user control", handle=HAS_USER_CONTROL_PERMISSION),
        Permission(name="has product control", handle=HAS_PRODUCT_CONTROL_PERMISSION),
        Permission(name="has batch control", handle=HAS_BATCH_CONTROL_PERMISSION),
        Permission(name="can delete product", handle=CAN_DELETE_PRODUCT_PERMISSION),
        Permission(name="can delete batch", handle=CAN_DELETE_BATCH_PERMISSION),
    ]


def generate_handle(name: str) -> str:
    return name.replace(" ", "_").lower()


def _byte_length(text: str) -> int:
    return len(text.encode("utf-8"))


def validate_role_name(name: str) -> ErrorDetails:
    if _ROLE_NAME.fullmatch(name):
        return ErrorDetails()
    return ErrorDetails(
        message="role name must be between 3 and 50 lower case characters", field="name"
    )


def validate_role_description(description: str) -> ErrorDetails:
    if _byte_length(description) > 255:
        return ErrorDetails(
            message="role description must be less than 255 characters",
            field="description",
        )
    return ErrorDetails()


def validate_permissions(permissions: list[str]) -> ErrorDetails:
    if not permissions:
        return ErrorDetails(
            message="role must have at least one permission", field="handles"
        )
    return ErrorDetails()


def validate_role(role: Role) -> None:
    raise_if_invalid(
        "invalid role input",
        [
            validate_role_name(role.name),
            validate_role_description(role.description),
            validate_permissions(role.permission_handles),
        ],
    )


def validate_email(email: str) -> ErrorDetails:
    if _EMAIL.fullmatch(email):
        return ErrorDetails()
    return ErrorDetails(message="invalid email address", field="email")


def validate_password(password: str) -> ErrorDetails:
    long_enough = _byte_length(password) >= 8
    if long_enough and _DIGIT.search(password) and _SYMBOL.search(password):
        return ErrorDetails()
    return ErrorDetails(
        message=(
            "password must be at least 8 characters long and contain at least "
            "one number and one special character"
        ),
        field="password",
    )


def validate_first_name(first_name: str) -> ErrorDetails:
    if _PERSON_NAME.fullmatch(first_name):
        return ErrorDetails()
    return ErrorDetails(message="invalid first name", field="firstName")


def validate_last_name(last_name: str) -> ErrorDetails:
    if _PERSON_NAME.fullmatch(last_name):
        return ErrorDetails()
    return ErrorDetails(message="invalid last name", field="lastName")


def validate_user(user_input: UserInput) -> None:
    raise_if_invalid(
        "invalid user input",
        [
            validate_email(user_input.email),
            validate_password(user_input.password),
            validate_first_name(user_input.first_name),
            validate_last_name(user_input.last_name),
        ],
    )


def validate_permission_name(name: str) -> ErrorDetails:
    if 3 <= _byte_length(name) <= 50:
        return ErrorDetails()
    return ErrorDetails(
        message="permission name must be between 3 and 50 characters", field="name"
    )


def validate_permission_description(description: str) -> ErrorDetails:
    if _byte_length(description) > 255:
        return ErrorDetails(
            message="permission description must be less than 255 characters",
            field="description",
        )
    return ErrorDetails()


def validate_permission(permission: Permission) -> None:
    raise_if_invalid(
        "invalid permission input",
        [
            validate_permission_name(permission.name),
            validate_permission_description(permission.description),
        ],
    )


_current_user: ContextVar[User | None] = ContextVar("current_user", default=None)


@contextmanager
def user_scope(user: User) -> Iterator[User]:
    """Make ``user`` the authenticated user for the enclosed code."""
    token = _current_user.set(user)
    try:
        yield user
    finally:
        _current_user.reset(token)


def get_user_from_context() -> User:
    """Return the current user, or an empty user when none is set."""
    user = _current_user.get()
    return user if user is not None else User()


def check_permissions(user: User, *permissions: str) -> User:
    """Return ``user`` if it holds every permission; system admins hold all."""
    if user.id == 0:
        raise UnauthorizedError("Invalid user")
    if user.has_permission(SYS_ADMIN_PERMISSION_HANDLE):
        return user
    for permission in permissions:
        if not user.has_permission(permission):
            raise ForbiddenError("User does not have permission", permission)
    return user


class PermissionService:
    """Permission operations over a storage repository."""

    def __init__(self, repository: Any) -> None:
        self.repository = repository

    def initiate_initial_permissions(self) -> None:
        self.repository.initiate_all(generate_initial_permissions())

    def create_permission(self, permission: Permission) -> None:
        validate_permission(permission)
        self.repository.create_permission(
            replace(permission, handle=generate_handle(permission.name))
        )

    def find_permission_by_handle(self, handle: str) -> Permission:
        return self.repository.find_by_handle(handle)

    def get_all_permissions(self) -> list[Permission]:
        return self.repository.get_all_permissions()


class RoleService:
    """Role operations over a storage repository."""

    def __init__(self, repository: Any) -> None:
        self.repository = repository

    def create_role(self, role: Role) -> None:
        validate_role(role)
        self.repository.create_role(role)

    def get_roles(self) -> list[Role]:
        return self.repository.get_roles()