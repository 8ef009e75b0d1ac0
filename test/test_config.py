import os
import pytest
from core.config import AppConfig, load_config, default_config_path
from core.filter_kinds import FilterKind

@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in ("FILTERPHOTO_LIBRARY_DIR", "FILTERPHOTO_THEME", "FILTERPHOTO_FORMAT",
                "FILTERPHOTO_CONFIG", "XDG_CONFIG_HOME", "XDG_PICTURES_DIR"):
        monkeypatch.delenv(var, raising=False)

def test_defaults():
    config = AppConfig()
    assert config.image_format == "png"
    assert config.theme == "cyborg"
    assert config.filter_kind is FilterKind.SEPIA_TONE
    assert config.default_intensity == 0.5
    assert config.library_dir.endswith(os.path.join("Pictures", "FilterPhoto"))

def test_missing_file_gives_defaults(tmp_path):
    config = load_config(str(tmp_path / "nope.yaml"))
    assert config.image_format == "png"

def test_yaml_values(tmp_path):
    p = tmp_path / "config.yaml"
    p.write_text(
        "library_dir: /photos/out\n"
        "image_format: JPG\n"
        "default_filter: Gaussian Blur\n"
        "default_intensity: 0.25\n"
        "unknown_key: ignored\n"
    )
    config = load_config(str(p))
    assert config.library_dir == "/photos/out"
    assert config.image_format == "jpg"
    assert config.filter_kind is FilterKind.GAUSSIAN_BLUR
    assert config.default_intensity == 0.25

def test_env_overrides_yaml(tmp_path, monkeypatch):
    p = tmp_path / "config.yaml"
    p.write_text("theme: flatly\nimage_format: png\n")
    monkeypatch.setenv("FILTERPHOTO_THEME", "darkly")
    monkeypatch.setenv("FILTERPHOTO_FORMAT", "tiff")
    monkeypatch.setenv("FILTERPHOTO_LIBRARY_DIR", str(tmp_path / "lib"))
    config = load_config(str(p))
    assert config.theme == "darkly"
    assert config.image_format == "tiff"
    assert config.library_dir == str(tmp_path / "lib")

@pytest.mark.parametrize("text", [
    "image_format: bmpx\n",
    "default_filter: posterize\n",
    "default_intensity: 1.5\n",
    "- just\n- a list\n",
])
def test_invalid_values_rejected(tmp_path, text):
    p = tmp_path / "config.yaml"
    p.write_text(text)
    with pytest.raises(ValueError):
        load_config(str(p))

def test_config_path_lookup(monkeypatch, tmp_path):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    assert default_config_path() == os.path.join(str(tmp_path), "filterphoto", "config.yaml")
    monkeypatch.setenv("FILTERPHOTO_CONFIG", "/etc/fp.yaml")
    assert default_config_path() == "/etc/fp.yaml"
