"""
Name: Workspace Facet Schema Tests

Responsibilities:
  - Validate per-workspace facet schemas
  - Validate normalization of raw facet input
"""

import pytest
from app.domain.facets import (
    MAX_FREE_TEXT_LENGTH,
    facet_schema,
    normalize_facets,
    validate_facets,
)
from app.domain.workspaces import WorkspaceType

pytestmark = pytest.mark.unit


def test_cam_schema_keys():
    keys = [definition.key for definition in facet_schema(WorkspaceType.CAM)]

    assert keys == ["tipo", "prioridad"]


def test_valid_facets_have_no_errors():
    errors = validate_facets(WorkspaceType.CAM, {"tipo": "registro", "prioridad": "alta"})

    assert errors == []


def test_empty_facets_are_valid():
    assert validate_facets(WorkspaceType.AMPP, None) == []
    assert validate_facets(WorkspaceType.AMPP, {}) == []


def test_unknown_key_is_rejected():
    errors = validate_facets(WorkspaceType.CAM, {"municipio": "Rosario"})

    assert errors == ["Unknown facet 'municipio' for workspace cam"]


def test_value_outside_allowlist_is_rejected():
    errors = validate_facets(WorkspaceType.CAM, {"prioridad": "urgente"})

    assert len(errors) == 1
    assert "Invalid value 'urgente' for facet 'prioridad'" in errors[0]


def test_free_text_facet_length():
    ok = validate_facets(WorkspaceType.AMPP, {"municipio": "Rosario"})
    too_long = validate_facets(
        WorkspaceType.AMPP, {"municipio": "x" * (MAX_FREE_TEXT_LENGTH + 1)}
    )

    assert ok == []
    assert too_long == [
        f"Facet 'municipio' must be at most {MAX_FREE_TEXT_LENGTH} characters"
    ]


def test_blank_value_is_rejected():
    errors = validate_facets(WorkspaceType.CAM, {"tipo": "   "})

    assert errors == ["Facet 'tipo' must be a non-empty string"]


def test_normalize_trims_and_drops_empty():
    assert normalize_facets({" tipo ": " registro ", "prioridad": "", "": "x"}) == {
        "tipo": "registro"
    }
    assert normalize_facets(None) == {}
