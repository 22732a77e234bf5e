import pytest

from luix.path import Path


def test_path_iter():
    it = iter(Path("/a/b/c.file"))
    assert next(it) == "a"
    assert next(it) == "b"
    assert next(it) == "c.file"
    assert next(it, None) is None

    it = iter(Path("/c.file"))
    assert next(it) == "c.file"

    assert next(iter(Path("/")), None) is None


def test_repeated_separators_skipped():
    assert list(Path("//boot///init/")) == ["boot", "init"]


@pytest.mark.parametrize("text", ["", "boot/init", "relative"])
def test_relative_path_rejected(text):
    with pytest.raises(ValueError):
        Path(text)


def test_str_round_trip():
    assert str(Path("/boot/kernel")) == "/boot/kernel"