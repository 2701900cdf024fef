"""
3D text generation for meshport.

Text is turned into flattened 2D outline paths, which
:func:`meshport.extrude.extrude_outlines` sweeps into wall meshes.  Two
glyph sources are available:

- TrueType/OpenType fonts through freetype-py.  Quadratic and cubic
  outline segments are flattened into ``curve_segments`` line pieces.
- A built-in 3x5 block font, one closed rectangle per lit cell.  It is
  used when ``font="block"`` is requested or no font file can be found.

Example usage::

    from meshport.text3d import text_mesh
    from meshport.io import write_mesh

    label = text_mesh("ROBOT", height=10.0, depth=2.0)
    write_mesh("robot_label.stl", label)

    # Use a specific font file, or the block font
    label = text_mesh("ROBOT", 10.0, 2.0, font="/path/to/font.ttf")
    label = text_mesh("ROBOT", 10.0, 2.0, font="block")
"""

from __future__ import annotations

import logging
import os
import platform
from typing import List, Optional, Sequence, Tuple

import freetype

from meshport import config
from meshport.extrude import extrude_outlines
from meshport.mesh import Mesh

logger = logging.getLogger(__name__)

Point2 = Tuple[float, float]
Path2 = List[Point2]

# Block font: 3 cells wide, 5 cells tall, rows listed top to bottom.
BLOCK_WIDTH = 3
BLOCK_HEIGHT = 5
BLOCK_ADVANCE = 4

BLOCK_FONT = {
    'A': ("###", "#.#", "###", "#.#", "#.#"),
    'B': ("##.", "#.#", "##.", "#.#", "##."),
    'C': ("###", "#..", "#..", "#..", "###"),
    'D': ("##.", "#.#", "#.#", "#.#", "##."),
    'E': ("###", "#..", "##.", "#..", "###"),
    'F': ("###", "#..", "##.", "#..", "#.."),
    'G': ("###", "#..", "#.#", "#.#", "###"),
    'H': ("#.#", "#.#", "###", "#.#", "#.#"),
    'I': ("###", ".#.", ".#.", ".#.", "###"),
    'J': ("..#", "..#", "..#", "#.#", "###"),
    'K': ("#.#", "#.#", "##.", "#.#", "#.#"),
    'L': ("#..", "#..", "#..", "#..", "###"),
    'M': ("#.#", "###", "###", "#.#", "#.#"),
    'N': ("##.", "#.#", "#.#", "#.#", "#.#"),
    'O': ("###", "#.#", "#.#", "#.#", "###"),
    'P': ("###", "#.#", "###", "#..", "#.."),
    'Q': ("###", "#.#", "#.#", "###", "..#"),
    'R': ("##.", "#.#", "##.", "#.#", "#.#"),
    'S': ("###", "#..", "###", "..#", "###"),
    'T': ("###", ".#.", ".#.", ".#.", ".#."),
    'U': ("#.#", "#.#", "#.#", "#.#", "###"),
    'V': ("#.#", "#.#", "#.#", "#.#", ".#."),
    'W': ("#.#", "#.#", "###", "###", "#.#"),
    'X': ("#.#", "#.#", ".#.", "#.#", "#.#"),
    'Y': ("#.#", "#.#", ".#.", ".#.", ".#."),
    'Z': ("###", "..#", ".#.", "#..", "###"),
    '0': ("###", "#.#", "#.#", "#.#", "###"),
    '1': (".#.", "##.", ".#.", ".#.", "###"),
    '2': ("###", "..#", "###", "#..", "###"),
    '3': ("###", "..#", "###", "..#", "###"),
    '4': ("#.#", "#.#", "###", "..#", "..#"),
    '5': ("###", "#..", "###", "..#", "###"),
    '6': ("###", "#..", "###", "#.#", "###"),
    '7': ("###", "..#", "..#", "..#", "..#"),
    '8': ("###", "#.#", "###", "#.#", "###"),
    '9': ("###", "#.#", "###", "..#", "###"),
    '-': ("...", "...", "###", "...", "..."),
    '.': ("...", "...", "...", "...", ".#."),
    ' ': ("...", "...", "...", "...", "..."),
}

# drawn for characters the block font does not know
_PLACEHOLDER = ("###", "###", "###", "###", "###")


def find_system_font(font_name: str) -> Optional[str]:
    """Find a font by name in system font directories.

    Args:
        font_name: Name of the font (e.g., "Arial", "DejaVuSans")

    Returns:
        Path to the font file, or None if not found
    """
    system = platform.system()
    font_dirs = []

    if system == "Darwin":  # macOS
        font_dirs = [
            "/System/Library/Fonts",
            "/System/Library/Fonts/Supplemental",
            "/Library/Fonts",
            os.path.expanduser("~/Library/Fonts"),
        ]
    elif system == "Linux":
        font_dirs = [
            "/usr/share/fonts",
            "/usr/local/share/fonts",
            os.path.expanduser("~/.fonts"),
            os.path.expanduser("~/.local/share/fonts"),
        ]
    elif system == "Windows":
        font_dirs = [
            os.path.join(os.environ.get("WINDIR", "C:\\Windows"), "Fonts"),
        ]

    patterns = [
        f"{font_name}.ttf",
        f"{font_name}.otf",
        f"{font_name.lower()}.ttf",
        f"{font_name.lower()}.otf",
    ]

    for font_dir in font_dirs:
        if not os.path.isdir(font_dir):
            continue
        for pattern in patterns:
            font_path = os.path.join(font_dir, pattern)
            if os.path.exists(font_path):
                return font_path

        # one level of subdirectories (truetype/, dejavu/, ...)
        try:
            subdirs = os.listdir(font_dir)
        except OSError:
            continue
        for subdir in subdirs:
            subdir_path = os.path.join(font_dir, subdir)
            if not os.path.isdir(subdir_path):
                continue
            for pattern in patterns:
                font_path = os.path.join(subdir_path, pattern)
                if os.path.exists(font_path):
                    return font_path

    return None


def quadratic_points(p0: Point2, p1: Point2, p2: Point2, segments: int) -> Path2:
    """Sample a quadratic Bezier at ``t = 1/segments .. 1`` (start excluded)."""
    points = []
    for i in range(1, segments + 1):
        t = i / segments
        u = 1.0 - t
        x = u * u * p0[0] + 2 * u * t * p1[0] + t * t * p2[0]
        y = u * u * p0[1] + 2 * u * t * p1[1] + t * t * p2[1]
        points.append((x, y))
    return points


def cubic_points(p0: Point2, p1: Point2, p2: Point2, p3: Point2, segments: int) -> Path2:
    """Sample a cubic Bezier at ``t = 1/segments .. 1`` (start excluded)."""
    points = []
    for i in range(1, segments + 1):
        t = i / segments
        u = 1.0 - t
        x = (u * u * u * p0[0] + 3 * u * u * t * p1[0]
             + 3 * u * t * t * p2[0] + t * t * t * p3[0])
        y = (u * u * u * p0[1] + 3 * u * u * t * p1[1]
             + 3 * u * t * t * p2[1] + t * t * t * p3[1])
        points.append((x, y))
    return points


def _close_paths(paths: Sequence[Path2]) -> List[Path2]:
    """Drop paths under 3 points and repeat the first point at the end."""
    closed = []
    for path in paths:
        if len(path) < 3:
            continue
        if path[0] != path[-1]:
            path = list(path) + [path[0]]
        closed.append(path)
    return closed


class _OutlineCollector:
    """Receives freetype decompose callbacks and flattens them into paths."""

    def __init__(self, scale: float, x_offset: float, segments: int):
        self.scale = scale
        self.x_offset = x_offset
        self.segments = segments
        self.paths: List[Path2] = []
        self.current: Path2 = []

    def _point(self, v) -> Point2:
        # outline coordinates are 26.6 fixed point
        return (v.x / 64.0 * self.scale + self.x_offset, v.y / 64.0 * self.scale)

    def move_to(self, a, ctx):
        if self.current:
            self.paths.append(self.current)
        self.current = [self._point(a)]

    def line_to(self, a, ctx):
        self.current.append(self._point(a))

    def conic_to(self, a, b, ctx):
        start = self.current[-1]
        self.current.extend(quadratic_points(start, self._point(a), self._point(b),
                                             self.segments))

    def cubic_to(self, a, b, c, ctx):
        start = self.current[-1]
        self.current.extend(cubic_points(start, self._point(a), self._point(b),
                                         self._point(c), self.segments))

    def finish(self) -> List[Path2]:
        if self.current:
            self.paths.append(self.current)
            self.current = []
        return self.paths


def _freetype_outlines(text: str, height: float, font_path: str, segments: int) -> List[Path2]:
    face = freetype.Face(font_path)
    face.set_char_size(64 * 64)
    flags = freetype.FT_LOAD_DEFAULT | freetype.FT_LOAD_NO_BITMAP

    # scale so that a capital H is `height` tall
    face.load_char('H', flags)
    bbox = face.glyph.outline.get_bbox()
    ref_height = (bbox.yMax - bbox.yMin) / 64.0
    scale = height / ref_height if ref_height > 0 else 1.0

    paths: List[Path2] = []
    x_offset = 0.0
    for char in text:
        face.load_char(char, flags)
        glyph = face.glyph
        collector = _OutlineCollector(scale, x_offset, segments)
        glyph.outline.decompose(None, move_to=collector.move_to, line_to=collector.line_to,
                                conic_to=collector.conic_to, cubic_to=collector.cubic_to)
        paths.extend(_close_paths(collector.finish()))
        x_offset += glyph.advance.x / 64.0 * scale

    return paths


def _cell_path(col: int, row: int, cell: float, x_offset: float) -> Path2:
    x0 = x_offset + col * cell
    y0 = (BLOCK_HEIGHT - 1 - row) * cell
    x1 = x0 + cell
    y1 = y0 + cell
    return [(x0, y0), (x1, y0), (x1, y1), (x0, y1), (x0, y0)]


def _block_outlines(text: str, height: float) -> List[Path2]:
    cell = height / BLOCK_HEIGHT
    paths: List[Path2] = []
    x_offset = 0.0
    for char in text.upper():
        rows = BLOCK_FONT.get(char, _PLACEHOLDER)
        for row, bits in enumerate(rows):
            for col, bit in enumerate(bits):
                if bit == '#':
                    paths.append(_cell_path(col, row, cell, x_offset))
        x_offset += BLOCK_ADVANCE * cell
    return paths


def _resolve_font(font: Optional[str]) -> Optional[str]:
    """Map a font argument to a font file path, or None for the block font."""
    if font is None:
        font = config.get('text.font', 'Arial')
    if font == 'block':
        return None
    if os.path.isfile(font):
        return font
    return find_system_font(font)


def text_outlines(text: str, height: float, font: Optional[str] = None,
                  curve_segments: Optional[int] = None) -> List[Path2]:
    """Convert ``text`` into closed 2D outline paths.

    Args:
        text: String to convert
        height: Height of a capital letter in drawing units
        font: Font specification (default from config ``text.font``):
            - "block": use the built-in block font
            - Font name (e.g., "Arial"): search system fonts
            - Path to .ttf/.otf file: use that file
        curve_segments: line pieces per curved outline segment
            (default from config ``text.curve_segments``)

    Returns:
        List of closed paths, each a list of ``(x, y)`` points whose last
        point repeats the first.
    """
    if curve_segments is None:
        curve_segments = int(config.get('text.curve_segments', 20))
    font_path = _resolve_font(font)
    if font_path is None:
        if font not in (None, 'block'):
            logger.warning("font %r not found, using block font", font)
        return _block_outlines(text, height)
    logger.debug("text: rendering %r with %s", text, font_path)
    return _freetype_outlines(text, height, font_path, curve_segments)


def text_mesh(text: str, height: float, depth: float, font: Optional[str] = None) -> Mesh:
    """Create an extruded text mesh (side walls only)."""
    if not text:
        raise ValueError("text must not be empty")
    mesh = extrude_outlines(text_outlines(text, height, font), depth)
    logger.info("text mesh %r: %d vertices, %d faces", text, len(mesh.vertices), len(mesh.faces))
    return mesh


__all__ = [
    'BLOCK_FONT', 'find_system_font', 'quadratic_points', 'cubic_points',
    'text_outlines', 'text_mesh',
]
