"""
Name: Predicate SQL Compiler Tests

Responsibilities:
  - Validate each predicate node compiles to parametrized SQL
  - Validate composite nodes keep their own parentheses
  - Validate unsupported fields/nodes fail loudly
"""

from datetime import datetime, timezone
from uuid import uuid4

import pytest
from app.domain.entities import DocumentStatus
from app.domain.visibility import (
    AllOf,
    AnyOf,
    CreatedBetween,
    FacetEquals,
    FieldEquals,
    FieldIn,
    HasAllTags,
    MatchAll,
    MatchNone,
    TextSearch,
)
from app.domain.workspaces import WorkspaceType
from app.infrastructure.repositories.postgres.predicate_sql import compile_predicate

pytestmark = pytest.mark.unit


def test_constants():
    assert compile_predicate(MatchAll()) == ("TRUE", [])
    assert compile_predicate(MatchNone()) == ("FALSE", [])


def test_field_equals_uses_enum_value():
    sql, params = compile_predicate(FieldEquals("workspace", WorkspaceType.CAM))

    assert sql == "workspace = %s"
    assert params == ["cam"]


def test_field_in_uses_any():
    sql, params = compile_predicate(
        FieldIn("status", (DocumentStatus.STORED, DocumentStatus.ARCHIVED))
    )

    assert sql == "status = ANY(%s)"
    assert params == [["stored", "archived"]]


def test_empty_field_in_matches_nothing():
    assert compile_predicate(FieldIn("status", ())) == ("FALSE", [])


def test_text_search_escapes_like_wildcards():
    sql, params = compile_predicate(TextSearch("100%_ok"))

    assert sql == "(title ILIKE %s OR description ILIKE %s OR file_name ILIKE %s)"
    assert params == ["%100\\%\\_ok%"] * 3


def test_tags_and_facets():
    assert compile_predicate(HasAllTags(("a", "b"))) == ("tags @> %s", [["a", "b"]])
    assert compile_predicate(FacetEquals("area", "obras")) == (
        "facets ->> %s = %s",
        ["area", "obras"],
    )


def test_created_between():
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)

    assert compile_predicate(CreatedBetween(start=start)) == (
        "(created_at >= %s)",
        [start],
    )
    assert compile_predicate(CreatedBetween()) == ("TRUE", [])


def test_visibility_or_stays_grouped_inside_and():
    user_id = uuid4()
    predicate = AllOf(
        (
            AnyOf(
                (
                    FieldEquals("created_by", user_id),
                    FieldEquals("status", DocumentStatus.STORED),
                )
            ),
            FieldEquals("workspace", WorkspaceType.CAM),
        )
    )

    sql, params = compile_predicate(predicate)

    assert sql == "((((created_by = %s) OR (status = %s))) AND (workspace = %s))"
    assert params == [user_id, "stored", "cam"]


def test_empty_composites():
    assert compile_predicate(AllOf(())) == ("TRUE", [])
    assert compile_predicate(AnyOf(())) == ("FALSE", [])


def test_unknown_field_is_rejected():
    with pytest.raises(ValueError):
        compile_predicate(FieldEquals("password_hash", "x"))


def test_unknown_node_is_rejected():
    with pytest.raises(TypeError):
        compile_predicate(object())
