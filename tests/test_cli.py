import ezdxf
import pytest

from meshport.__main__ import build_parser, main
from meshport.io import load_mesh


def test_cube_and_info(tmp_path, capsys):
    path = tmp_path / 'cube.3ds'
    assert main(['cube', str(path), '--size', '2']) == 0
    assert path.exists()

    assert main(['info', str(path)]) == 0
    out = capsys.readouterr().out
    assert '8 vertices, 12 faces' in out
    assert 'max extent: 2' in out


def test_convert(tmp_path):
    src = tmp_path / 'cube.lwo'
    dst = tmp_path / 'cube.obj'
    assert main(['cube', str(src)]) == 0
    assert main(['convert', str(src), str(dst), '--name', 'Box']) == 0
    assert 'o Box' in dst.read_text()
    mesh = load_mesh(dst)
    assert len(mesh.faces) == 12


def test_text(tmp_path):
    dst = tmp_path / 'label.stl'
    assert main(['text', 'HI', str(dst), '--height', '5', '--depth', '1', '--font', 'block']) == 0
    mesh = load_mesh(dst)
    assert len(mesh.faces) > 0


def test_wireframe(tmp_path):
    src = tmp_path / 'cube.ply'
    dst = tmp_path / 'cube.dxf'
    assert main(['cube', str(src)]) == 0
    assert main(['wireframe', str(src), str(dst), '--rx', '30', '--ry', '20']) == 0
    doc = ezdxf.readfile(str(dst))
    assert len(doc.modelspace().query('LINE')) == 36


def test_unsupported_format(tmp_path, capsys):
    assert main(['info', str(tmp_path / 'model.xyz')]) == 1
    assert 'Error:' in capsys.readouterr().err


def test_missing_file(tmp_path, capsys):
    assert main(['info', str(tmp_path / 'missing.obj')]) == 1
    assert 'Error:' in capsys.readouterr().err


def test_verbose_logging_to_file(tmp_path):
    log = tmp_path / 'run.log'
    path = tmp_path / 'cube.stl'
    assert main(['-vv', '--log-file', str(log), 'cube', str(path)]) == 0
    text = log.read_text()
    assert 'DEBUG' in text
    assert 'wrote binary STL' in text


def test_no_command(capsys):
    assert main([]) == 1


def test_parser_defaults():
    args = build_parser().parse_args(['wireframe', 'a.stl', 'b.dxf'])
    assert args.width == 800.0
    assert args.height == 600.0
    assert args.rx == 0.0
    with pytest.raises(SystemExit):
        build_parser().parse_args(['cube'])
