# tests/test_paths.py
import os
from pathlib import Path

import pytest

from app.errors import BadRequestError
from app.services.paths import PathSanitizer

TRAVERSALS = [
    "../escape.txt",
    "../../etc/passwd",
    "/etc/passwd",
    "a/../../b",
    "..\\..\\windows\\system32",
    "./../x/./y",
    "a/b/../../../../c",
    "//etc/shadow",
    "..",
    "/",
]


def _inside(root: Path, rel: str) -> bool:
    joined = os.path.normpath(os.path.join(str(root), rel))
    return joined == str(root) or joined.startswith(str(root) + os.sep)


def test_plain_paths_are_kept(tmp_path: Path):
    s = PathSanitizer(tmp_path)
    assert s.sanitize("notes.txt") == "notes.txt"
    assert s.sanitize("a/b/c.txt") == "a/b/c.txt"
    assert s.sanitize("a/./b/../c.txt") == "a/c.txt"
    assert s.sanitize("") == ""
    assert s.sanitize("a/..") == ""


@pytest.mark.parametrize("raw", TRAVERSALS)
def test_traversal_never_escapes(tmp_path: Path, raw: str):
    s = PathSanitizer(tmp_path)
    rel = s.sanitize(raw)
    assert not rel.startswith("/")
    assert ".." not in rel.split("/")
    assert _inside(tmp_path, rel)


@pytest.mark.parametrize("raw", TRAVERSALS + ["a/b", "x/../y", "%2e%2e/secret"])
def test_sanitize_is_idempotent(tmp_path: Path, raw: str):
    s = PathSanitizer(tmp_path)
    once = s.sanitize(raw)
    assert s.sanitize(once) == once


def test_escape_falls_back_to_basename(tmp_path: Path):
    s = PathSanitizer(tmp_path)
    assert s.sanitize("../escape.txt") == "escape.txt"
    assert s.sanitize("/etc/passwd") == "passwd"
    assert s.sanitize("..\\..\\boot.ini") == "boot.ini"


def test_sibling_with_common_prefix_is_not_inside(tmp_path: Path):
    root = tmp_path / "root"
    s = PathSanitizer(root)
    # "/.../root-evil/x" shares a string prefix with the root but is outside it
    assert s.sanitize("../root-evil/x") == "x"


def test_encoded_sequences_are_literal(tmp_path: Path):
    s = PathSanitizer(tmp_path)
    assert s.sanitize("%2e%2e/secret") == "%2e%2e/secret"


def test_reject_policy_raises(tmp_path: Path):
    s = PathSanitizer(tmp_path, policy="reject")
    assert s.sanitize("a/b.txt") == "a/b.txt"
    with pytest.raises(BadRequestError) as ei:
        s.sanitize("../escape.txt")
    assert ei.value.code == "PATH_ESCAPES_ROOT"


def test_resolve_joins_under_root(tmp_path: Path):
    s = PathSanitizer(tmp_path)
    assert s.resolve("") == Path(s.root)
    assert s.resolve("a/b.txt") == Path(s.root) / "a" / "b.txt"
