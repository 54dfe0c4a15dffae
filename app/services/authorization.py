"""
Authorization Gate

Pure decision functions run before any state change:
1. Role membership  - the operation declares which roles may call it  -> Forbidden
2. Ownership        - the resource's owner must be the caller; TnP officers
                      are scoped by college instead                   -> Forbidden
3. Lifecycle state  - the resource must be in the expected state      -> BadRequest

None of these touch the database; callers load the documents first.
"""

from typing import Any, Iterable, Optional

from app.core.errors import BadRequestError, ForbiddenError


def ensure_role(principal: dict, *roles: str, message: Optional[str] = None) -> None:
    """Raise Forbidden unless the principal holds one of `roles`."""
    if principal.get("role") not in roles:
        raise ForbiddenError(message or f"Role {principal.get('role')} is not allowed to access this resource")


def is_owner(owner_id: Any, principal: dict) -> bool:
    return owner_id is not None and str(owner_id) == principal.get("user_id")


def ensure_owner(owner_id: Any, principal: dict, message: str = "You can only access your own resources") -> None:
    """Raise Forbidden unless the principal owns the resource."""
    if not is_owner(owner_id, principal):
        raise ForbiddenError(message)


def ensure_same_college(target_college: Any, officer_college: Any,
                        message: str = "You can only manage students from your college") -> None:
    """TnP officers act only on users of their own college."""
    if target_college is None or officer_college is None or str(target_college) != str(officer_college):
        raise ForbiddenError(message)


def ensure_owner_or_role(owner_id: Any, principal: dict, roles: Iterable[str], message: str) -> None:
    """Owners pass; otherwise the principal must hold one of `roles`."""
    if is_owner(owner_id, principal) or principal.get("role") in roles:
        return
    raise ForbiddenError(message)


def ensure_state(current: str, allowed: Iterable[str], message: str) -> None:
    """State-dependent check: invalid lifecycle state is a BadRequest, never Forbidden."""
    if current not in set(allowed):
        raise BadRequestError(message)
