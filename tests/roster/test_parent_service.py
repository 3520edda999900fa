import pytest

from src.school_attendance.school_attendance.core.exceptions import NotFoundError, ValidationError
from src.school_attendance.school_attendance.roster.service import ParentService

from tests.fakes import sample_roster


def _service():
    students, _, parents = sample_roster()
    return ParentService(parents, students), students, parents


def test_get_with_children():
    svc, _, _ = _service()

    body = svc.get_with_children("P1").to_dict()

    assert body["parentId"] == "P1"
    assert [c["studentId"] for c in body["children"]] == ["S1", "S3"]
    assert body["children"][0]["admissionNo"] == "ADM-1"


def test_unknown_parent_is_not_found():
    svc, _, _ = _service()

    with pytest.raises(NotFoundError):
        svc.get_with_children("P404")
    with pytest.raises(NotFoundError):
        svc.add_child(parent_id="P404", student_id="S2")


def test_create_with_children_links_students():
    svc, students, parents = _service()

    created = svc.create_with_children(name=" Ravi ", email="ravi@example.com", children=["S2", "S4", "S2"])

    assert parents.count() == 2
    assert created.parent.name == "Ravi"
    assert {c.student_id for c in created.children} == {"S2", "S4"}
    assert students.get_by_id("S4").parent_id == created.parent.parent_id


def test_create_requires_name_and_email():
    svc, _, _ = _service()

    with pytest.raises(ValidationError):
        svc.create_with_children(name="", email="x@example.com")
    with pytest.raises(ValidationError):
        svc.create_with_children(name="Ravi", email=None)


def test_child_of_another_parent_cannot_be_relinked():
    svc, _, parents = _service()

    with pytest.raises(ValidationError):
        svc.create_with_children(name="Ravi", email="ravi@example.com", children=["S1"])
    assert parents.count() == 1


def test_add_child_and_count():
    svc, students, _ = _service()

    updated = svc.add_child(parent_id="P1", student_id="S2")

    assert {c.student_id for c in updated.children} == {"S1", "S2", "S3"}
    assert students.get_by_id("S2").parent_id == "P1"
    assert svc.count_parents() == 1
    assert len(svc.list_parents()) == 1


def test_add_unknown_child_is_not_found():
    svc, _, _ = _service()

    with pytest.raises(NotFoundError):
        svc.add_child(parent_id="P1", student_id="S404")
