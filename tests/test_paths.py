from pathlib import Path

import pytest

from showtree.errors import InvalidNameError
from showtree.paths import child_path, subdir_path, validate_name


@pytest.mark.parametrize("name", ["", ".", "..", "a/b", "a\\b"])
def test_validate_name_rejects(name):
    """Verify validate name rejects behavior."""
    with pytest.raises(InvalidNameError):
        validate_name(name)


def test_validate_name_accepts_plain_names():
    """Verify validate name accepts plain names behavior."""
    assert validate_name("sh_010") == "sh_010"


def test_subdir_path_joins_components(tmp_path: Path):
    """Verify subdir path joins components behavior."""
    assert subdir_path(tmp_path, "") == tmp_path
    assert subdir_path(tmp_path, "pub/cam") == tmp_path / "pub" / "cam"


def test_child_path_is_deterministic(tmp_path: Path):
    """Verify child path is deterministic behavior."""
    assert child_path(tmp_path, "u1") == child_path(tmp_path, "u1") == tmp_path / "u1"
