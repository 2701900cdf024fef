import os

import pytest

from meshport import config
from meshport.io.lwo import build_lwo
from meshport.io.obj import write_obj
from meshport.mesh import cube_mesh


def test_bundled_defaults():
    assert config.get("obj.exporter") == "meshport"
    assert config.get("lwo.surface_name") == "Default"
    assert config.get("lwo.surface_color") == [0.8, 0.8, 0.8]
    assert config.get("text.curve_segments") == 20
    assert config.get("view.fill") == 0.8


def test_missing_keys_return_default():
    assert config.get("no.such.key") is None
    assert config.get("no.such.key", 5) == 5
    assert config.get("obj.exporter.deeper", "x") == "x"


def test_get_settings_returns_copy():
    settings = config.get_settings()
    settings["obj"]["exporter"] = "changed"
    assert config.get("obj.exporter") == "meshport"


def test_env_override(tmp_path, monkeypatch):
    first = tmp_path / "site.yaml"
    first.write_text("lwo:\n  surface_name: Chrome\nobj:\n  exporter: site-tool\n")
    second = tmp_path / "project.yaml"
    second.write_text("obj:\n  exporter: project-tool\n")
    monkeypatch.setenv(config.MESHPORT_CONFIG, os.pathsep.join([str(first), str(second)]))
    config.clear_cache()

    assert config.get("lwo.surface_name") == "Chrome"
    # nested dicts merge key by key
    assert config.get("lwo.surface_color") == [0.8, 0.8, 0.8]
    # later files win
    assert config.get("obj.exporter") == "project-tool"

    assert b"Chrome\0" in build_lwo(cube_mesh())
    path = tmp_path / "cube.obj"
    write_obj(path, cube_mesh())
    assert "# Exported from project-tool" in path.read_text()


def test_missing_env_file_ignored(tmp_path, monkeypatch):
    monkeypatch.setenv(config.MESHPORT_CONFIG, str(tmp_path / "absent.yaml"))
    config.clear_cache()
    assert config.get("obj.exporter") == "meshport"


def test_non_mapping_file_rejected(tmp_path, monkeypatch):
    bad = tmp_path / "bad.yaml"
    bad.write_text("- just\n- a list\n")
    monkeypatch.setenv(config.MESHPORT_CONFIG, str(bad))
    config.clear_cache()
    with pytest.raises(ValueError):
        config.get_settings()
