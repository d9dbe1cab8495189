# tests/test_paths.py
from pathlib import Path
import pytest

from app.errors import BoundaryViolation
from app.services.paths import clean, is_within, relative, resolve

ROOT = Path("/data")


def test_resolve_plain_paths():
    assert resolve(ROOT, "/world/level.dat") == Path("/data/world/level.dat")
    assert resolve(ROOT, "//world//region/") == Path("/data/world/region")
    assert resolve(ROOT, "/world/./../plugins") == Path("/data/plugins")
    assert resolve(ROOT, "plugins/config.yml") == Path("/data/plugins/config.yml")


@pytest.mark.parametrize("request_path", ["", "/", "//", "/.", "/world/..", "/./world/../."])
def test_root_spellings_resolve_to_root(request_path):
    assert resolve(ROOT, request_path) == ROOT


@pytest.mark.parametrize(
    "request_path",
    ["/../../etc/passwd", "..", "../data2/secret", "/world/../../etc", "a/../../b", "/../data"],
)
def test_resolve_rejects_traversal(request_path):
    with pytest.raises(BoundaryViolation):
        resolve(ROOT, request_path)


def test_resolve_rejects_nul_byte():
    with pytest.raises(BoundaryViolation):
        resolve(ROOT, "/level\x00.dat")


def test_resolve_does_not_touch_disk():
    root = Path("/no/such/volume")
    assert resolve(root, "/a/b") == Path("/no/such/volume/a/b")


def test_clean():
    assert clean("/") == ""
    assert clean("//a//b/") == "a/b"
    assert clean("/../x") == "../x"


def test_is_within_uses_component_boundary():
    assert is_within("/data", "/data")
    assert is_within("/data", "/data/world")
    assert not is_within("/data", "/data2")
    assert not is_within("/data", "/data2/world")
    assert is_within("/", "/etc")


def test_relative():
    assert relative(ROOT, ROOT) == "/"
    assert relative(ROOT, Path("/data/world/region")) == "/world/region"
