"""
Actions a principal may be granted on a subject.
"""
from enum import Enum


class Action(str, Enum):
    Manage = "manage"
    Create = "create"
    Read = "read"
    ReadOwn = "readown"
    ReadAll = "readall"
    Update = "update"
    Delete = "delete"
    ListOwn = "listown"
    ListAll = "listall"
    # Users actions
    UserReadOwn = "user_read_own"
    UserReadAny = "user_read_any"
    UserCreateOwn = "user_create_own"
    UserCreateAny = "user_create_any"
    UserUpdateOwn = "user_update_own"
    UserUpdateAny = "user_update_any"
    # FIXME: these reuse the update values, so they are aliases of
    # UserUpdateOwn/UserUpdateAny and grant exactly the same thing.
    # Kept as-is until the intended delete semantics are confirmed.
    UserDeleteOwn = "user_update_own"
    UserDeleteAny = "user_update_any"
    UserCreateJwt = "user_create_jwt"
