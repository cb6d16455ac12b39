"""Funções auxiliares para o cofre de credenciais."""

import base64
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, TextIO

from dotenv import dotenv_values


def encode_bytes(value: bytes) -> str:
    """Codifica bytes em base64 URL-safe para serialização."""
    return base64.urlsafe_b64encode(bytes(value)).decode("ascii")


def decode_bytes(value: Any) -> bytes:
    """Converte valor serializado de volta para bytes.

    Suporta:
    - bytes / bytearray (retorna cópia em bytes)
    - string base64 URL-safe (formato gerado por encode_bytes)

    Raises:
        TypeError: Se o valor não for str, bytes ou bytearray
        ValueError: Se a string não for base64 válido

    Examples:
        >>> decode_bytes(b"salt")
        b'salt'
        >>> decode_bytes("c2FsdA==")
        b'salt'
    """
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)

    if not isinstance(value, str):
        raise TypeError(f"Valor deve ser str ou bytes, recebido: {type(value)}")

    try:
        return base64.b64decode(value.encode("ascii"), altchars=b"-_", validate=True)
    except (ValueError, UnicodeEncodeError) as exc:
        raise ValueError("Valor não está em base64 válido") from exc


def to_secret_bytes(value: Optional[Any]) -> Optional[bytes]:
    """Normaliza valor explícito de credencial (str vira UTF-8)."""
    if value is None:
        return None
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    raise TypeError(f"Valor da credencial deve ser str ou bytes, recebido: {type(value)}")


def read_file_bytes(path: str) -> bytes:
    """Lê o conteúdo completo de um arquivo como bytes."""
    return Path(path).read_bytes()


def parse_env_stream(stream: TextIO) -> Dict[str, str]:
    """Parseia um stream .env usando python-dotenv."""
    data = dotenv_values(stream=stream)
    return {key: value for key, value in data.items() if value is not None}


def parse_env_file(path: Path) -> Dict[str, str]:
    """Parseia um arquivo .env usando python-dotenv."""
    with path.open("r", encoding="utf-8", errors="strict") as f:
        return parse_env_stream(f)


def _lock_file(file_handle: TextIO) -> None:
    if os.name == "nt":
        import msvcrt

        file_handle.seek(0)
        msvcrt.locking(file_handle.fileno(), msvcrt.LK_LOCK, 1)
        return

    import fcntl

    fcntl.flock(file_handle.fileno(), fcntl.LOCK_EX)


def _unlock_file(file_handle: TextIO) -> None:
    if os.name == "nt":
        import msvcrt

        file_handle.seek(0)
        msvcrt.locking(file_handle.fileno(), msvcrt.LK_UNLCK, 1)
        return

    import fcntl

    fcntl.flock(file_handle.fileno(), fcntl.LOCK_UN)


@contextmanager
def locked_file(path: Path, mode: int = 0o600) -> Iterator[TextIO]:
    """Abre o arquivo e aplica lock exclusivo enquanto estiver em uso.

    Arquivos novos são criados com permissão restrita (padrão 0600).
    """
    fd = os.open(path, os.O_RDWR | os.O_CREAT, mode)
    file_handle = os.fdopen(fd, "r+", encoding="utf-8", errors="strict")
    _lock_file(file_handle)
    try:
        yield file_handle
    finally:
        _unlock_file(file_handle)
        file_handle.close()
