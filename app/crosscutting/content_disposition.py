"""
===============================================================================
TARJETA CRC — crosscutting/content_disposition.py
===============================================================================

Responsabilidades:
  - Armar el header Content-Disposition para descargas (attachment/inline).
  - Soportar nombres no-latin1 (CJK, emojis) sin romper el encoding del header.

Colaboradores:
  - routers/documents.py (contenido proxied por la API)
  - storage/s3_file_storage.py (ResponseContentDisposition de presigned URLs)

Notas:
  - Nombres ASCII: `filename="..."`.
  - Resto: fallback ASCII + `filename*=UTF-8''...` (RFC 5987 / 6266), igual
    que starlette.FileResponse.
===============================================================================
"""

from __future__ import annotations

import unicodedata
from pathlib import PurePosixPath
from urllib.parse import quote

_DEFAULT_NAME = "document"


def _to_ascii(value: str) -> str:
    normalized = unicodedata.normalize("NFKD", value)
    return normalized.encode("ascii", "ignore").decode("ascii")


def _ascii_fallback(filename: str) -> str:
    """"reporte ñ.pdf" -> "reporte n.pdf"; "报告.pdf" -> "document.pdf"."""
    path = PurePosixPath(filename)
    stem = _to_ascii(path.stem).strip(" .") or _DEFAULT_NAME
    return f"{stem}{_to_ascii(path.suffix)}"


def build_content_disposition(filename: str | None, *, inline: bool = False) -> str:
    kind = "inline" if inline else "attachment"
    name = (filename or "").replace("\r", "").replace("\n", "").strip() or _DEFAULT_NAME

    try:
        name.encode("ascii")
    except UnicodeEncodeError:
        fallback = _ascii_fallback(name).replace('"', "'")
        encoded = quote(name, safe="")
        return f"{kind}; filename=\"{fallback}\"; filename*=UTF-8''{encoded}"

    return f'{kind}; filename="{name.replace(chr(34), chr(39))}"'
