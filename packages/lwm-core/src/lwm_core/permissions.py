"""Role checks deciding who may administer a labwork workflow."""

from __future__ import annotations

from collections.abc import Iterable

from lwm_schemas.labwork import Authority
from lwm_schemas.primitives import CourseId, UserRole


def has_any_role(authorities: Iterable[Authority], *roles: UserRole) -> bool:
    """Return True if any authority grants one of the roles, regardless of scope."""
    wanted = {UserRole(role) for role in roles}
    return any(UserRole(authority.role) in wanted for authority in authorities)


def has_admin_status(authorities: Iterable[Authority]) -> bool:
    """Return True if the authorities include the admin role."""
    return has_any_role(authorities, UserRole.ADMIN)


def is_course_manager(course_id: CourseId, authorities: Iterable[Authority]) -> bool:
    """Return True if the authorities include a manager grant for the course."""
    return any(
        UserRole(authority.role) is UserRole.COURSE_MANAGER
        and authority.course == course_id
        for authority in authorities
    )


def can_administer(authorities: Iterable[Authority], course_id: CourseId) -> bool:
    """Decide whether the actor may administer the course's labworks.

    Args:
        authorities: Authorities of the acting user.
        course_id: Course owning the labwork.

    Returns:
        bool: True for the course's manager or a global admin.
    """
    authorities = list(authorities)
    return is_course_manager(course_id, authorities) or has_admin_status(authorities)
