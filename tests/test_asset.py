"""Tests for the asset library."""

import pytest

from cluster_assets.asset import File, Parents, merge_files, sort_files
from cluster_assets.exceptions import FileConflictError, SynthesisError

from .conftest import FakeAsset


def test_merge_files_sorted_by_path() -> None:
    """Test that merged files are ordered by path regardless of input order."""
    first = [File("manifests/b.yaml", b"b"), File("tls/a.crt", b"a")]
    second = [File("manifests/a.yaml", b"a"), File("manifests/B.yaml", b"B")]

    merged = merge_files(first, second)
    assert [f.filename for f in merged] == [
        "manifests/B.yaml",
        "manifests/a.yaml",
        "manifests/b.yaml",
        "tls/a.crt",
    ]
    assert merge_files(second, first) == merged


def test_merge_files_duplicate_path() -> None:
    """Test that two files with the same path are rejected."""
    with pytest.raises(FileConflictError, match="manifests/a.yaml"):
        merge_files([File("manifests/a.yaml", b"1")], [File("manifests/a.yaml", b"2")])


def test_sort_files_bytewise() -> None:
    """Test sorting compares paths byte-wise."""
    files = [
        File("manifests/host-etcd-service.yaml", b""),
        File("manifests/host-etcd-service-endpoints.yaml", b""),
    ]
    sort_files(files)
    assert [f.filename for f in files] == [
        "manifests/host-etcd-service-endpoints.yaml",
        "manifests/host-etcd-service.yaml",
    ]


def test_parents_get_asset() -> None:
    """Test typed access to resolved dependencies."""
    dep = FakeAsset("dep")
    parents = Parents({"dep": dep})

    assert parents.get_asset("dep", FakeAsset) is dep
    assert list(parents) == ["dep"]
    assert len(parents) == 1

    with pytest.raises(SynthesisError, match="other was not declared"):
        parents.get_asset("other", FakeAsset)

    with pytest.raises(SynthesisError, match="is not of type File"):
        parents.get_asset("dep", File)  # type: ignore[type-var]


def test_parents_read_only() -> None:
    """Test the dependencies view can't be modified."""
    parents = Parents({"dep": FakeAsset("dep")})
    with pytest.raises(TypeError):
        parents["other"] = FakeAsset("other")  # type: ignore[index]
