"""Tests for workbody members, composition and composition history."""

import pytest

from services.members.repository import (
    add_composition_member,
    add_member,
    delete_member,
    list_composition,
    list_history,
    remove_composition_member,
    search_members,
    update_composition_member,
    update_member,
)
from utils.errors import NotFoundError, ValidationError


@pytest.fixture
def db(fake_db):
    fake_db.tables["workbodies"] = [
        {"id": "wb-1", "name": "Examination Committee", "type": "committee"},
        {"id": "wb-2", "name": "Task Force on CPD", "type": "task-force"},
    ]
    fake_db.tables["workbody_members"] = [
        {"id": "m-1", "workbody_id": "wb-1", "name": "Ayesha Malik", "role": "Convener", "email": "ayesha@pec.org.pk"},
        {"id": "m-2", "workbody_id": "wb-2", "name": "Bilal Shah", "role": "Member", "email": None},
        {"id": "m-3", "workbody_id": None, "name": "Ayesha Orphan", "role": "Member"},
    ]
    return fake_db


def test_add_member_writes_history_and_audit(db) -> None:
    member = add_member("wb-1", {"name": "Omar Farooq", "role": "Secretary", "has_cv": True}, changed_by="admin", client=db)
    assert member.workbody_id == "wb-1"
    assert member.has_cv is True
    entry = db.rows("workbody_composition_history")[-1]
    assert entry["change_type"] == "member_added"
    assert entry["change_details"]["name"] == "Omar Farooq"
    assert db.rows("audit_logs")[-1]["table_name"] == "workbody_members"


def test_add_member_requires_name_and_role(db) -> None:
    with pytest.raises(ValidationError) as excinfo:
        add_member("wb-1", {"name": " "}, client=db)
    assert excinfo.value.errors == ["Name is required", "Role is required"]


def test_update_member_records_before_and_after(db) -> None:
    updated = update_member("m-1", {"role": "Chairman"}, client=db)
    assert updated.role == "Chairman"
    details = db.rows("workbody_composition_history")[-1]["change_details"]
    assert details["before"] == {"role": "Convener"}
    assert details["after"] == {"role": "Chairman"}


def test_delete_member(db) -> None:
    delete_member("m-2", changed_by="admin", client=db)
    assert [m["id"] for m in db.rows("workbody_members")] == ["m-1", "m-3"]
    assert db.rows("workbody_composition_history")[-1]["change_type"] == "member_removed"
    with pytest.raises(NotFoundError):
        delete_member("m-2", client=db)


def test_search_needs_two_characters(db) -> None:
    assert search_members("a", client=db) == []
    assert db.calls == []


def test_search_matches_name_role_or_email_and_joins_workbody(db) -> None:
    results = search_members("ayesha", client=db)
    assert [(r.name, r.workbody_name, r.workbody_type) for r in results] == [
        ("Ayesha Malik", "Examination Committee", "committee")
    ]
    by_role = search_members("MEMBER", client=db)
    assert [r.id for r in by_role] == ["m-2"]


def test_composition_add_list_and_remove(db) -> None:
    assignment = add_composition_member("wb-1", "user-9", "Member", assigned_by="admin", client=db)
    assert [c.user_id for c in list_composition("wb-1", client=db)] == ["user-9"]

    update_composition_member(assignment.id, role="Convener", client=db)
    assert db.rows("workbody_composition")[0]["role"] == "Convener"

    remove_composition_member(assignment.id, client=db)
    assert list_composition("wb-1", client=db) == []
    changes = [c.change_type for c in list_history("wb-1", client=db)]
    assert sorted(changes) == ["composition_added", "composition_updated", "composition_updated"]


def test_composition_update_needs_a_valid_change(db) -> None:
    with pytest.raises(ValidationError):
        update_composition_member("c-1", client=db)
    with pytest.raises(ValidationError):
        update_composition_member("c-1", status="archived", client=db)
