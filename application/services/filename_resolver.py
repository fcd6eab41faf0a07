# application/services/filename_resolver.py
from __future__ import annotations
import re
from pathlib import Path

from domain.errors import UnsafeFilenameError

_DRIVE = re.compile(r"^[A-Za-z]:")


def check_filename(name: str) -> str:
    """
    El nombre viene del correo (no confiable). Se rechaza, no se aplana:
    separadores, '.'/'..', rutas absolutas o con unidad y caracteres de control.
    """
    if not name or not name.strip():
        raise UnsafeFilenameError(name, "vacío")
    if name in (".", ".."):
        raise UnsafeFilenameError(name, "nombre reservado")
    if "/" in name or "\\" in name:
        raise UnsafeFilenameError(name, "contiene separadores de ruta")
    if _DRIVE.match(name):
        raise UnsafeFilenameError(name, "ruta con unidad")
    if any(ord(ch) < 32 or ord(ch) == 127 for ch in name):
        raise UnsafeFilenameError(name, "caracteres de control")
    return name


def resolve_unique_path(directory: Path, proposed: str) -> Path:
    """
    directory/proposed si no existe; si no, directory/0-proposed, 1-proposed, ...
    No hay creación exclusiva aquí: somos el único escritor del directorio.
    """
    name = check_filename(proposed)
    candidate = directory / name
    n = 0
    while candidate.exists():
        candidate = directory / f"{n}-{name}"
        n += 1
    return candidate
