"""I/O utilities for meshport.

Codecs are chosen by file extension.  STL and FBX additionally look at
the file content (ASCII/binary STL, binary FBX rejection) inside their
readers.
"""

from __future__ import annotations

import logging
import os
from typing import Callable, Dict, List, Optional

from meshport.errors import UnsupportedFormatError
from meshport.mesh import Mesh

from .fbx import read_fbx, write_fbx
from .lwo import read_lwo, write_lwo
from .max3ds import read_3ds, write_3ds
from .obj import read_obj, write_obj
from .ply import read_ply, write_ply
from .stl import read_stl, write_stl

logger = logging.getLogger(__name__)

Reader = Callable[..., Mesh]
Writer = Callable[..., None]

_READERS: Dict[str, Reader] = {
    '.3ds': read_3ds,
    '.lwo': read_lwo,
    '.obj': read_obj,
    '.stl': read_stl,
    '.ply': read_ply,
    '.fbx': read_fbx,
}

_WRITERS: Dict[str, Writer] = {
    '.3ds': write_3ds,
    '.lwo': write_lwo,
    '.obj': write_obj,
    '.stl': write_stl,
    '.ply': write_ply,
    '.fbx': write_fbx,
}

# writers that accept an object/surface name
_NAMED = {
    '.3ds': 'name',
    '.lwo': 'surface_name',
    '.obj': 'name',
    '.stl': 'name',
}


def _extension(path) -> str:
    return os.path.splitext(os.fspath(path))[1].lower()


def supported_extensions() -> List[str]:
    return sorted(_READERS)


def reader_for(path) -> Reader:
    """Return the reader function for ``path``'s extension."""
    ext = _extension(path)
    try:
        return _READERS[ext]
    except KeyError:
        raise UnsupportedFormatError(
            f"unsupported file format {ext or '(none)'!r}; "
            f"expected one of {', '.join(supported_extensions())}",
            path=os.fspath(path)) from None


def writer_for(path) -> Writer:
    """Return the writer function for ``path``'s extension."""
    ext = _extension(path)
    try:
        return _WRITERS[ext]
    except KeyError:
        raise UnsupportedFormatError(
            f"cannot write {ext or '(none)'!r} files; "
            f"expected one of {', '.join(sorted(_WRITERS))}",
            path=os.fspath(path)) from None


def load_mesh(path) -> Mesh:
    """Load a mesh from any supported file."""
    reader = reader_for(path)
    logger.debug("loading %s with %s", path, reader.__name__)
    return reader(path)


def write_mesh(path, mesh: Mesh, name: Optional[str] = None) -> None:
    """Write ``mesh`` in the format implied by ``path``'s extension.

    ``name`` becomes the object or surface name for formats that store
    one, and is ignored otherwise.
    """
    writer = writer_for(path)
    keyword = _NAMED.get(_extension(path))
    if name is not None and keyword:
        writer(path, mesh, **{keyword: name})
    else:
        writer(path, mesh)


__all__ = [
    'load_mesh', 'write_mesh', 'supported_extensions', 'reader_for', 'writer_for',
    'read_3ds', 'write_3ds', 'read_lwo', 'write_lwo', 'read_obj', 'write_obj',
    'read_stl', 'write_stl', 'read_ply', 'write_ply', 'read_fbx', 'write_fbx',
]
