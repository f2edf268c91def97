"""Validation engine: collection of violations, coercion and defaults."""

import uuid

import pytest
from pydantic.alias_generators import to_camel

from task_tracker.config import MAX_PAGE_LIMIT
from task_tracker.errors import ValidationFailed
from task_tracker.models import TaskStatus
from task_tracker.schemas.common import ApiModel
from task_tracker.schemas.task import MAX_PAGE, TaskCreate, TaskIdPath, TaskListQuery, TaskUpdate
from task_tracker.schemas.user import UserCreate
from task_tracker.validation import AtLeastOneOf, InputSchema, Violation, require_valid, validate


def test_valid_payload_yields_normalized_value():
    result = validate(TaskCreate, {"title": "Buy milk"})

    assert result.ok
    assert result.value.title == "Buy milk"
    assert result.value.status is TaskStatus.PENDING
    assert result.value.description is None


def test_violations_are_collected_not_short_circuited():
    result = validate(UserCreate, {"name": "", "email": "nope", "password": "1"})

    assert not result.ok
    assert result.value is None
    assert [v.path for v in result.violations] == [("name",), ("email",), ("password",)]


def test_length_messages():
    result = validate(UserCreate, {"name": "Al", "email": "al@example.com", "password": "x" * 300})

    messages = {v.path: v.message for v in result.violations}
    assert messages[("name",)] == "name must be at least 3 characters"
    assert messages[("password",)] == "password must be at most 255 characters"


def test_password_is_never_echoed_as_offending_value():
    result = validate(UserCreate, {"name": "Alice", "email": "a@example.com", "password": "123"})

    assert result.violations[0].path == ("password",)
    assert result.violations[0].value is None


def test_non_object_payload_is_a_root_violation():
    result = validate(TaskCreate, ["not", "an", "object"])

    assert result.violations == [Violation(path=(), message="Expected a JSON object", value=["not", "an", "object"])]


def test_require_valid_raises_with_every_violation():
    with pytest.raises(ValidationFailed) as info:
        require_valid(TaskCreate, {"title": "", "status": "archived"})

    assert {v.path for v in info.value.violations} == {("title",), ("status",)}


def test_at_least_one_of_rule():
    rule = AtLeastOneOf(fields=("a", "b"), message="need a or b")

    assert rule.check({"b": None}) is None
    assert rule.check({"c": 1}) == Violation(path=("a", "b"), message="need a or b")


def test_cross_field_rule_runs_alongside_field_rules():
    result = validate(TaskUpdate, {})

    assert len(result.violations) == 1
    assert result.violations[0].path == ("title", "description", "status")


def test_update_accepts_any_single_field():
    for payload in ({"title": "t"}, {"description": None}, {"status": "cancelled"}):
        assert validate(TaskUpdate, payload).ok, payload


def test_violation_to_dict_hides_value_unless_asked():
    violation = Violation(path=("page",), message="page must be a positive number", value="0")

    assert violation.to_dict() == {"path": ["page"], "message": "page must be a positive number"}
    assert violation.to_dict(include_value=True)["value"] == "0"


def test_list_query_defaults():
    params = require_valid(TaskListQuery, {})

    assert (params.page, params.limit) == (1, 10)
    assert (params.sort_by, params.sort_order) == ("createdAt", "desc")
    assert params.status is None and params.search is None


def test_list_query_coerces_strings():
    params = require_valid(TaskListQuery, {"page": "3", "limit": " 25 ", "status": "completed", "search": "  milk "})

    assert (params.page, params.limit) == (3, 25)
    assert params.status is TaskStatus.COMPLETED
    assert params.search == "milk"


@pytest.mark.parametrize("raw, expected", [("asc", "asc"), ("DESC", "desc"), ("ascending", "asc"), ("", "desc")])
def test_sort_order_normalization(raw, expected):
    assert require_valid(TaskListQuery, {"sortOrder": raw}).sort_order == expected


def test_page_and_limit_messages_name_the_parameter():
    result = validate(TaskListQuery, {"page": "0", "limit": "x"})

    messages = {v.path: v.message for v in result.violations}
    assert messages == {("page",): "page must be a positive number", ("limit",): "limit must be a number"}


def test_limit_upper_bound():
    result = validate(TaskListQuery, {"limit": str(MAX_PAGE_LIMIT + 1)})

    assert result.violations[0].message == f"limit must not exceed {MAX_PAGE_LIMIT}"


@pytest.mark.parametrize("raw", ["1_0", "+3", "3.0", "1e2", "٣"])
def test_page_accepts_only_plain_decimal_digits(raw):
    result = validate(TaskListQuery, {"page": raw})

    assert [(v.path, v.message) for v in result.violations] == [(("page",), "page must be a number")]


def test_page_upper_bound_keeps_offset_in_range():
    assert (MAX_PAGE - 1) * MAX_PAGE_LIMIT <= 2**63 - 1

    assert require_valid(TaskListQuery, {"page": str(MAX_PAGE), "limit": str(MAX_PAGE_LIMIT)}).page == MAX_PAGE
    result = validate(TaskListQuery, {"page": str(MAX_PAGE + 1)})
    assert result.violations[0].message == f"page must not exceed {MAX_PAGE}"


def test_overlong_page_is_rejected():
    result = validate(TaskListQuery, {"page": "9" * 5000})

    assert [v.path for v in result.violations] == [("page",)]


def test_input_and_response_bases_use_config_dict():
    for base in (InputSchema, ApiModel):
        assert "Config" not in vars(base)
        assert base.model_config["alias_generator"] is to_camel
        assert base.model_config["populate_by_name"] is True
    assert ApiModel.model_config["from_attributes"] is True


def test_blank_filters_are_treated_as_absent():
    params = require_valid(TaskListQuery, {"status": "", "search": "   ", "sortBy": ""})

    assert params.status is None
    assert params.search is None
    assert params.sort_by == "createdAt"


def test_task_id_is_canonicalized():
    raw = uuid.uuid4()

    assert require_valid(TaskIdPath, {"id": str(raw).upper()}).id == str(raw)


def test_task_id_must_be_uuid():
    result = validate(TaskIdPath, {"id": "42"})

    assert result.violations[0].message == "Task id must be a valid UUID"
