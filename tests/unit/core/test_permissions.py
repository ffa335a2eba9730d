"""Unit tests for the permission evaluator."""

import pytest

from lwm_core.permissions import (
    can_administer,
    has_admin_status,
    has_any_role,
    is_course_manager,
)
from lwm_schemas.labwork import Authority
from lwm_schemas.primitives import UserRole
from tests.helpers.labwork_factory import (
    COURSE_ID,
    OTHER_COURSE_ID,
    admin_authorities,
    manager_authorities,
    student_authorities,
)


@pytest.mark.unit
def test_course_manager_of_course_can_administer() -> None:
    assert can_administer(manager_authorities(), COURSE_ID)


@pytest.mark.unit
def test_course_manager_of_other_course_cannot_administer() -> None:
    """Manager grants are scoped to their course."""
    authorities = manager_authorities(OTHER_COURSE_ID)

    assert not is_course_manager(COURSE_ID, authorities)
    assert not can_administer(authorities, COURSE_ID)


@pytest.mark.unit
def test_admin_can_administer_any_course() -> None:
    assert has_admin_status(admin_authorities())
    assert can_administer(admin_authorities(), COURSE_ID)
    assert can_administer(admin_authorities(), OTHER_COURSE_ID)


@pytest.mark.unit
@pytest.mark.parametrize(
    "role",
    [
        UserRole.COURSE_EMPLOYEE,
        UserRole.COURSE_ASSISTANT,
        UserRole.EMPLOYEE,
        UserRole.STUDENT,
    ],
)
def test_other_roles_cannot_administer(role: UserRole) -> None:
    authorities = [Authority(role=role, course=COURSE_ID)]

    assert not can_administer(authorities, COURSE_ID)


@pytest.mark.unit
def test_no_authorities_cannot_administer() -> None:
    assert not can_administer([], COURSE_ID)


@pytest.mark.unit
def test_has_any_role_ignores_scope() -> None:
    authorities = [Authority(role=UserRole.COURSE_ASSISTANT, course=OTHER_COURSE_ID)]

    assert has_any_role(
        authorities, UserRole.COURSE_ASSISTANT, UserRole.COURSE_EMPLOYEE
    )
    assert not has_any_role(student_authorities(), UserRole.ADMIN)


@pytest.mark.unit
def test_can_administer_accepts_iterators() -> None:
    """Authorities may be consumed only once."""
    assert can_administer(iter(admin_authorities()), COURSE_ID)
