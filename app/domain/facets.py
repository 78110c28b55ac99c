"""
===============================================================================
TARJETA CRC — domain/facets.py
===============================================================================

Módulo:
    Esquema de Facetas por Workspace

Responsabilidades:
    - Declarar las facetas tipadas (clave -> valores permitidos) de cada
      workspace, reemplazando convenciones de tags tipo "categoria:decreto".
    - Validar facetas recibidas en upload/update y en filtros de listado.

Colaboradores:
    - domain.workspaces.WorkspaceType
    - application/usecases/documents: upload y update de metadata.
    - interfaces/api/http/routers/workspaces.py: expone el esquema.

Notas:
    - allowed=None significa texto libre (se valida solo longitud).
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Mapping

from .workspaces import WorkspaceType

MAX_FREE_TEXT_LENGTH: Final[int] = 100


@dataclass(frozen=True, slots=True)
class FacetDefinition:
    key: str
    label: str
    allowed: tuple[str, ...] | None = None


def _facet(key: str, label: str, *allowed: str) -> FacetDefinition:
    return FacetDefinition(key=key, label=label, allowed=tuple(allowed) or None)


FACET_SCHEMAS: Final[Mapping[WorkspaceType, tuple[FacetDefinition, ...]]] = {
    WorkspaceType.CAM: (
        _facet(
            "tipo",
            "Tipo de documento",
            "comercial",
            "empresarial",
            "registro",
            "certificado",
            "tramite",
        ),
        _facet("prioridad", "Prioridad", "alta", "media", "baja"),
    ),
    WorkspaceType.AMPP: (
        _facet(
            "categoria",
            "Categoría",
            "ordenanza",
            "resolucion",
            "decreto",
            "acta",
            "informe",
            "convenio",
        ),
        _facet("municipio", "Municipio"),
        _facet("urgencia", "Urgencia", "urgente", "normal", "baja"),
    ),
    WorkspaceType.PRESIDENCIA: (
        _facet(
            "clasificacion", "Clasificación", "confidencial", "restringido", "publico"
        ),
        _facet(
            "categoria",
            "Categoría",
            "decreto",
            "resolucion",
            "directiva",
            "memorandum",
            "informe_ejecutivo",
            "acuerdo",
        ),
        _facet("prioridad", "Prioridad", "critica", "alta", "media", "baja"),
        _facet(
            "aprobacion", "Aprobación", "pendiente", "aprobado", "rechazado", "revision"
        ),
    ),
    WorkspaceType.INTENDENCIA: (
        _facet("territorio", "Territorio", "urbano", "rural", "mixto"),
        _facet(
            "categoria",
            "Categoría",
            "planificacion",
            "obras",
            "permisos",
            "fiscalizacion",
            "emergencia",
        ),
        _facet("prioridad", "Prioridad", "emergencia", "alta", "media", "baja"),
        _facet("departamento", "Departamento"),
    ),
    WorkspaceType.COMISIONES_CF: (
        _facet(
            "comision",
            "Comisión",
            "fiscalizacion",
            "auditoria",
            "control",
            "supervision",
            "investigacion",
        ),
        _facet("alcance", "Alcance", "municipal", "regional", "nacional"),
        _facet("severidad", "Severidad", "critico", "alto", "medio", "bajo"),
        _facet(
            "investigacion",
            "Investigación",
            "abierta",
            "en_proceso",
            "cerrada",
            "suspendida",
        ),
    ),
}


def facet_schema(workspace: WorkspaceType) -> tuple[FacetDefinition, ...]:
    return FACET_SCHEMAS.get(workspace, ())


def validate_facets(
    workspace: WorkspaceType, facets: Mapping[str, str] | None
) -> list[str]:
    """
    Valida facetas contra el esquema del workspace.

    Retorna una lista de errores legibles (vacía si todo es válido).
    """
    if not facets:
        return []

    schema = {definition.key: definition for definition in facet_schema(workspace)}
    errors: list[str] = []
    for key, raw_value in facets.items():
        definition = schema.get(key)
        if definition is None:
            errors.append(f"Unknown facet '{key}' for workspace {workspace.value}")
            continue
        value = (raw_value or "").strip() if isinstance(raw_value, str) else raw_value
        if not isinstance(value, str) or not value:
            errors.append(f"Facet '{key}' must be a non-empty string")
            continue
        if definition.allowed is None:
            if len(value) > MAX_FREE_TEXT_LENGTH:
                errors.append(
                    f"Facet '{key}' must be at most {MAX_FREE_TEXT_LENGTH} characters"
                )
            continue
        if value not in definition.allowed:
            allowed = ", ".join(definition.allowed)
            errors.append(f"Invalid value '{value}' for facet '{key}' (allowed: {allowed})")
    return errors


def normalize_facets(facets: Mapping[str, str] | None) -> dict[str, str]:
    """Trim de claves/valores; descarta entradas vacías."""
    if not facets:
        return {}
    normalized: dict[str, str] = {}
    for key, value in facets.items():
        clean_key = str(key).strip()
        clean_value = str(value).strip() if value is not None else ""
        if clean_key and clean_value:
            normalized[clean_key] = clean_value
    return normalized
