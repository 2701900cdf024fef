"""
DXF export of projected wireframes.

Writes the 2D segments produced by :func:`meshport.view.project_wireframe`
as LINE entities using the ezdxf library.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Sequence, Tuple, Union

import ezdxf

logger = logging.getLogger(__name__)

Segment = Tuple[Sequence[float], Sequence[float]]


def write_wireframe_dxf(output_path: Union[str, Path], segments: Iterable[Segment],
                        layer: str = 'WIREFRAME') -> int:
    """Write 2D line segments to a DXF file.

    Args:
        output_path: Path of the DXF file to create.
        segments: ``((x0, y0), (x1, y1))`` pairs in drawing units.
        layer: DXF layer that receives the lines.

    Returns:
        The number of LINE entities written.
    """
    doc = ezdxf.new(dxfversion='R2010', setup=False)
    doc.layers.new(layer, dxfattribs={'color': 7})
    msp = doc.modelspace()

    count = 0
    for p0, p1 in segments:
        msp.add_line((p0[0], p0[1]), (p1[0], p1[1]), dxfattribs={'layer': layer})
        count += 1

    doc.saveas(str(output_path))
    logger.info("wrote %d wireframe lines to %s", count, output_path)
    return count


__all__ = ['write_wireframe_dxf']
