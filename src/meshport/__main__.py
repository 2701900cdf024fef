#!/usr/bin/env python3
"""
Command line interface for meshport.

Usage:
    python -m meshport info FILE
    python -m meshport convert SRC DST [--name NAME]
    python -m meshport cube DST [--size S]
    python -m meshport text TEXT DST [--height H] [--depth D] [--font F]
    python -m meshport wireframe SRC DST.dxf [--width W] [--height H] [--rx A] [--ry A] [--rz A]

Examples:
    # Show vertex/face counts and bounds
    python -m meshport info model.3ds

    # Convert between any two supported formats
    python -m meshport convert model.lwo model.obj

    # Raised label, block font
    python -m meshport text "V1.0" label.stl --height 10 --depth 2 --font block

    # 2D wireframe drawing, rotated 30 degrees about X
    python -m meshport -v wireframe model.stl model.dxf --rx 30
"""

import argparse
import math
import sys

from meshport import __version__, config
from meshport.logging_config import setup_logging


def cmd_info(args):
    """Print a summary of a mesh file."""
    from meshport.io import load_mesh

    mesh = load_mesh(args.file)
    lo, hi = mesh.bounds()
    print(f"{args.file}: {len(mesh.vertices)} vertices, {len(mesh.faces)} faces")
    print(f"  bounds: ({lo.x:g}, {lo.y:g}, {lo.z:g}) - ({hi.x:g}, {hi.y:g}, {hi.z:g})")
    c = mesh.center()
    print(f"  center: ({c.x:g}, {c.y:g}, {c.z:g})")
    print(f"  max extent: {mesh.max_extent():g}")
    return 0


def cmd_convert(args):
    """Read one mesh file and write it in another format."""
    from meshport.io import load_mesh, write_mesh

    mesh = load_mesh(args.src)
    write_mesh(args.dst, mesh, name=args.name)
    print(f"Wrote {args.dst}: {len(mesh.vertices)} vertices, {len(mesh.faces)} faces")
    return 0


def cmd_cube(args):
    """Write the cube fixture."""
    from meshport.io import write_mesh
    from meshport.mesh import cube_mesh

    mesh = cube_mesh(args.size)
    write_mesh(args.dst, mesh)
    print(f"Wrote {args.dst}: cube of size {args.size:g}")
    return 0


def cmd_text(args):
    """Extrude text outlines into a mesh file."""
    from meshport.io import write_mesh
    from meshport.text3d import text_mesh

    mesh = text_mesh(args.text, args.height, args.depth, font=args.font)
    write_mesh(args.dst, mesh)
    print(f"Wrote {args.dst}: {len(mesh.vertices)} vertices, {len(mesh.faces)} faces")
    return 0


def cmd_wireframe(args):
    """Project a mesh to 2D and save the clipped edges as DXF."""
    from meshport.io import load_mesh
    from meshport.io.dxf import write_wireframe_dxf
    from meshport.view import project_wireframe

    mesh = load_mesh(args.src)
    segments = project_wireframe(mesh, args.width, args.height,
                                 math.radians(args.rx), math.radians(args.ry),
                                 math.radians(args.rz))
    count = write_wireframe_dxf(args.dst, segments)
    print(f"Wrote {args.dst}: {count} lines")
    return 0


def build_parser():
    parser = argparse.ArgumentParser(
        prog='meshport',
        description='Read, write and convert 3DS, LWO, FBX, OBJ, STL and PLY meshes',
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help='Increase log output (-v info, -vv debug)')
    parser.add_argument('--log-file', help='Also write log messages to this file')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    info_parser = subparsers.add_parser('info', help='Show mesh statistics')
    info_parser.add_argument('file', help='Mesh file')
    info_parser.set_defaults(func=cmd_info)

    convert_parser = subparsers.add_parser('convert', help='Convert between formats')
    convert_parser.add_argument('src', help='Input mesh file')
    convert_parser.add_argument('dst', help='Output mesh file (format from extension)')
    convert_parser.add_argument('--name', help='Object or surface name for the output')
    convert_parser.set_defaults(func=cmd_convert)

    cube_parser = subparsers.add_parser('cube', help='Write a test cube')
    cube_parser.add_argument('dst', help='Output mesh file')
    cube_parser.add_argument('--size', type=float, default=1.0, help='Edge length')
    cube_parser.set_defaults(func=cmd_cube)

    text_parser = subparsers.add_parser('text', help='Create extruded text')
    text_parser.add_argument('text', help='Text to render')
    text_parser.add_argument('dst', help='Output mesh file')
    text_parser.add_argument('--height', type=float, default=10.0, help='Capital letter height')
    text_parser.add_argument('--depth', type=float, default=2.0, help='Extrusion depth')
    text_parser.add_argument('--font', help='Font name, font file, or "block"')
    text_parser.set_defaults(func=cmd_text)

    wire_parser = subparsers.add_parser('wireframe', help='Export a 2D wireframe as DXF')
    wire_parser.add_argument('src', help='Input mesh file')
    wire_parser.add_argument('dst', help='Output DXF file')
    wire_parser.add_argument('--width', type=float, default=800.0, help='Viewport width')
    wire_parser.add_argument('--height', type=float, default=600.0, help='Viewport height')
    wire_parser.add_argument('--rx', type=float, default=0.0, help='Rotation about X (degrees)')
    wire_parser.add_argument('--ry', type=float, default=0.0, help='Rotation about Y (degrees)')
    wire_parser.add_argument('--rz', type=float, default=0.0, help='Rotation about Z (degrees)')
    wire_parser.set_defaults(func=cmd_wireframe)

    return parser


def _log_level(verbose):
    if verbose >= 2:
        return 'DEBUG'
    if verbose == 1:
        return 'INFO'
    return config.get('logging.level', 'WARNING')


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(_log_level(args.verbose), args.log_file)

    try:
        return args.func(args)
    except (ValueError, OSError) as e:  # MeshFormatError is a ValueError
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
