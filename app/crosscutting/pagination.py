# app/crosscutting/pagination.py
"""
===============================================================================
MÓDULO: Utilidades de paginación (offset + cursor base64)
===============================================================================

Objetivo
--------
Paginación simple y consistente para listados (documentos, usuarios,
actividad):
- limit acotado por endpoint (default / máximo)
- cursor opaco basado en offset codificado (alternativa a offset crudo)

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  clamp_limit + resolve_offset + encode/decode_cursor

Colaboradores:
  - application/usecases (listados)
  - interfaces/api/http/schemas (next_cursor en respuestas)
===============================================================================
"""

from __future__ import annotations

import base64
import binascii


def encode_cursor(offset: int) -> str:
    raw = f"offset:{max(0, int(offset))}".encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("utf-8")


def decode_cursor(cursor: str) -> int:
    """Cursor inválido => 0 (primera página)."""
    try:
        decoded = base64.urlsafe_b64decode(cursor.encode("utf-8")).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return 0
    prefix, _, value = decoded.partition(":")
    if prefix != "offset" or not value.isdigit():
        return 0
    return int(value)


def clamp_limit(limit: int | None, *, default: int, maximum: int) -> int:
    """limit <= 0 o None => default; limit > maximum => maximum."""
    if limit is None or limit <= 0:
        return default
    return min(limit, maximum)


def resolve_offset(*, cursor: str | None, offset: int | None) -> int:
    """El cursor tiene prioridad sobre offset; nunca negativo."""
    if cursor:
        return decode_cursor(cursor)
    return max(0, offset or 0)


def next_cursor(*, offset: int, limit: int, total: int) -> str | None:
    if offset + limit < total:
        return encode_cursor(offset + limit)
    return None
