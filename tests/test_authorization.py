"""
Tests for the authorization gate decision functions.
"""

import pytest
from bson import ObjectId

from app.core.errors import BadRequestError, ForbiddenError
from app.services.authorization import (
    ensure_owner, ensure_owner_or_role, ensure_role, ensure_same_college, ensure_state, is_owner,
)

STUDENT = {"user_id": "65f000000000000000000001", "email": "s@example.com", "role": "Student"}
TNP = {"user_id": "65f000000000000000000002", "email": "t@example.com", "role": "TnP"}


class TestRoles:

    def test_allowed_role_passes(self):
        ensure_role(STUDENT, "Student", "TnP")

    def test_other_role_is_forbidden(self):
        with pytest.raises(ForbiddenError):
            ensure_role(STUDENT, "Recruiter")

    def test_custom_message(self):
        with pytest.raises(ForbiddenError) as exc:
            ensure_role(STUDENT, "TnP", message="TnP only")
        assert exc.value.message == "TnP only"


class TestOwnership:

    def test_owner_matches_object_id(self):
        assert is_owner(ObjectId(STUDENT["user_id"]), STUDENT)
        ensure_owner(ObjectId(STUDENT["user_id"]), STUDENT)

    def test_non_owner_is_forbidden(self):
        with pytest.raises(ForbiddenError):
            ensure_owner(ObjectId(TNP["user_id"]), STUDENT)

    def test_missing_owner_never_matches(self):
        assert not is_owner(None, STUDENT)

    def test_owner_or_role(self):
        ensure_owner_or_role(ObjectId(), TNP, ["TnP"], "nope")
        with pytest.raises(ForbiddenError):
            ensure_owner_or_role(ObjectId(), STUDENT, ["TnP"], "nope")


class TestCollegeScope:

    def test_same_college(self):
        college = ObjectId()
        ensure_same_college(college, str(college))

    def test_different_college(self):
        with pytest.raises(ForbiddenError):
            ensure_same_college(ObjectId(), ObjectId())

    def test_missing_college(self):
        with pytest.raises(ForbiddenError):
            ensure_same_college(None, ObjectId())


class TestState:

    def test_allowed_state(self):
        ensure_state("Pending", ["Pending"], "only pending")

    def test_wrong_state_is_bad_request_not_forbidden(self):
        with pytest.raises(BadRequestError) as exc:
            ensure_state("Approved", ["Pending"], "only pending")
        assert exc.value.status_code == 400
        assert not isinstance(exc.value, ForbiddenError)
