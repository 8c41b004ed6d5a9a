from pathlib import Path

from servosphere.setup_directories import setup_output_directories


def test_setup_output_directories_creates_all(tmp_path):
    dirs = setup_output_directories(tmp_path)

    assert set(dirs.keys()) == {"base", "summary", "trials", "logs"}

    for path in dirs.values():
        assert isinstance(path, Path)
        assert path.exists()
        assert path.is_dir()


def test_setup_output_directories_is_idempotent(tmp_path):
    dirs1 = setup_output_directories(tmp_path)
    dirs2 = setup_output_directories(tmp_path)

    assert dirs1 == dirs2


def test_nested_base_is_created(tmp_path):
    dirs = setup_output_directories(tmp_path / "a" / "b")

    assert dirs["base"] == (tmp_path / "a" / "b").resolve()
    assert dirs["logs"] == dirs["base"] / "logs"
    assert dirs["logs"].is_dir()
