import pathlib

import pytest

RESOURCES = pathlib.Path(__file__).parent / "resources"


@pytest.fixture
def resources() -> pathlib.Path:
    return RESOURCES


def write_file(path: pathlib.Path, content: str | bytes) -> pathlib.Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, str):
        content = content.encode("utf-8")
    path.write_bytes(content)
    return path


@pytest.fixture
def make_file():
    return write_file
