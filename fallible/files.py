"""Fallible file access built on the propagation protocol."""
from __future__ import annotations
import errno
from pathlib import Path
from typing import IO, Any, Optional

from .logging import logger
from .protocol import fallible
from .result import Failure


log = logger()


CHUNK_SIZE = 4096


@fallible
def open_file(path: Path | str, mode: str = "rb") -> IO[Any] | Failure:
    try:
        return open(path, mode)
    except OSError as e:
        log.debug("could not open `%s`: %s", path, e.strerror)
        return Failure(e.errno or errno.EIO)


@fallible
def read_all(stream: IO[bytes], chunk_size: int = CHUNK_SIZE) -> bytes | Failure:
    chunks: list[bytes] = []
    try:
        while chunk := stream.read(chunk_size):
            chunks.append(chunk)
    except OSError as e:
        log.debug("read failed after %d chunks: %s", len(chunks), e)
        return Failure(e.errno or errno.EIO)
    return b"".join(chunks)


@fallible
async def read_from_file(path: Path | str, chunk_size: int = CHUNK_SIZE) -> bytes:
    log.debug("reading `%s`", path)
    with await open_file(path, "rb") as f:
        return await read_all(f, chunk_size)


@fallible
async def read_text(path: Path | str, encoding: Optional[str] = None,
                    chunk_size: int = CHUNK_SIZE) -> str | Failure:
    data = await read_from_file(path, chunk_size)
    try:
        return data.decode(encoding or "utf-8")
    except UnicodeDecodeError as e:
        log.debug("`%s` is not valid %s: %s", path, e.encoding, e.reason)
        return Failure(errno.EILSEQ)
    except LookupError:
        log.debug("unknown encoding `%s`", encoding)
        return Failure(errno.EINVAL)
