"""Stream helpers shared by the codecs.

Every codec accepts either a filesystem path or an already open stream.
Files opened here are always closed before returning; streams passed in
by the caller are left open.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from typing import IO, Iterator, Optional, Union

PathOrFile = Union[str, "os.PathLike[str]", IO]


def describe(path_or_file) -> Optional[str]:
    """Return a printable name for error messages."""
    if hasattr(path_or_file, 'read') or hasattr(path_or_file, 'write'):
        return getattr(path_or_file, 'name', None)
    return os.fspath(path_or_file)


def read_bytes(path_or_file: PathOrFile) -> bytes:
    if hasattr(path_or_file, 'read'):
        data = path_or_file.read()
        if isinstance(data, str):
            data = data.encode('utf-8')
        return data
    with open(path_or_file, 'rb') as f:
        return f.read()


def decode_text(data: bytes) -> str:
    """Decode file text, tolerating a UTF-8 BOM and stray bytes."""
    return data.decode('utf-8-sig', errors='replace')


@contextmanager
def open_binary(path_or_file: PathOrFile) -> Iterator[IO[bytes]]:
    if hasattr(path_or_file, 'write'):
        yield path_or_file
        return
    with open(path_or_file, 'wb') as stream:
        yield stream


@contextmanager
def open_text(path_or_file: PathOrFile) -> Iterator[IO[str]]:
    if hasattr(path_or_file, 'write'):
        yield path_or_file
        return
    with open(path_or_file, 'w', encoding='utf-8', newline='\n') as stream:
        yield stream
