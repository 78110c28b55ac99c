"""
===============================================================================
DOCUMENT INPUT RULES (validación de metadata y archivo)
===============================================================================

Responsibilities:
    - Límites de metadata (título, descripción, tags) alineados con los
      CHECK / VARCHAR del esquema.
    - Allowlist de MIME types y normalización de nombres de archivo.
    - Construcción de la storage key: <workspace>/<user>/<document>/<file>.

Collaborators:
    - upload_document / update_document_metadata
    - interfaces/api/http/dependencies (415 temprano por MIME)
===============================================================================
"""

from __future__ import annotations

import hashlib
import re
from typing import Final, Iterable, List
from uuid import UUID

from ....domain.workspaces import WorkspaceType

TITLE_MIN_LENGTH: Final[int] = 3
TITLE_MAX_LENGTH: Final[int] = 500
DESCRIPTION_MAX_LENGTH: Final[int] = 2000
MAX_TAGS: Final[int] = 10
TAG_MAX_LENGTH: Final[int] = 50
FILE_NAME_MAX_LENGTH: Final[int] = 255  # documents.file_name VARCHAR(255)

ALLOWED_MIME_TYPES: Final[frozenset[str]] = frozenset(
    {
        # Documentos
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "application/vnd.ms-powerpoint",
        "application/vnd.openxmlformats-officedocument.presentationml.presentation",
        "text/plain",
        "text/csv",
        # Imágenes
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
        "image/bmp",
        # Comprimidos
        "application/zip",
        "application/x-rar-compressed",
        "application/x-7z-compressed",
    }
)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def normalize_mime_type(mime_type: str | None) -> str:
    """'Application/PDF; charset=x' -> 'application/pdf'."""
    return (mime_type or "").split(";", 1)[0].strip().lower()


def is_allowed_mime_type(mime_type: str | None) -> bool:
    return normalize_mime_type(mime_type) in ALLOWED_MIME_TYPES


def validate_title(title: str | None) -> str | None:
    """Devuelve mensaje de error o None."""
    value = (title or "").strip()
    if len(value) < TITLE_MIN_LENGTH:
        return f"Title must be at least {TITLE_MIN_LENGTH} characters"
    if len(value) > TITLE_MAX_LENGTH:
        return f"Title must be at most {TITLE_MAX_LENGTH} characters"
    return None


def validate_description(description: str | None) -> str | None:
    if description is not None and len(description) > DESCRIPTION_MAX_LENGTH:
        return f"Description must be at most {DESCRIPTION_MAX_LENGTH} characters"
    return None


def normalize_tags(tags: Iterable[str] | None) -> List[str]:
    """Trim + descarta vacíos + dedupe preservando orden."""
    seen: set[str] = set()
    result: List[str] = []
    for tag in tags or []:
        value = (tag or "").strip()
        if value and value not in seen:
            seen.add(value)
            result.append(value)
    return result


def validate_tags(tags: List[str]) -> str | None:
    if len(tags) > MAX_TAGS:
        return f"A document can have at most {MAX_TAGS} tags"
    for tag in tags:
        if len(tag) > TAG_MAX_LENGTH:
            return f"Tag '{tag[:20]}...' exceeds {TAG_MAX_LENGTH} characters"
    return None


def truncate_file_name(file_name: str | None) -> str:
    """Recorta a FILE_NAME_MAX_LENGTH conservando la extensión."""
    name = (file_name or "").strip() or "document"
    if len(name) <= FILE_NAME_MAX_LENGTH:
        return name
    stem, dot, ext = name.rpartition(".")
    if dot and stem and 0 < len(ext) <= 16:
        return stem[: FILE_NAME_MAX_LENGTH - len(ext) - 1] + "." + ext
    return name[:FILE_NAME_MAX_LENGTH]


def sanitize_file_name(file_name: str | None) -> str:
    """Nombre seguro para la storage key (sin separadores de path)."""
    base = (file_name or "").replace("\\", "/").rsplit("/", 1)[-1].strip()
    cleaned = _UNSAFE_FILENAME_CHARS.sub("_", base).strip("._")
    return cleaned or "file"


def build_storage_key(
    *,
    workspace: WorkspaceType,
    user_id: UUID,
    document_id: UUID,
    file_name: str,
) -> str:
    return f"{workspace.value}/{user_id}/{document_id}/{sanitize_file_name(file_name)}"


def compute_file_hash(content: bytes) -> str:
    """SHA-256 hex (64 caracteres)."""
    return hashlib.sha256(content).hexdigest()
