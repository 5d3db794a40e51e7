"""Tests for local snapshot storage."""

import os
import pytest
from cvbuilder.models.cv_models import CVDocument
from cvbuilder.services.local_storage import CV_DATA_KEY, USER_ID_KEY, LocalStorage


def test_missing_snapshot_loads_none(storage):
    """Test loading with nothing saved returns None."""
    assert storage.load_cv() is None


def test_save_and_load(storage, sample_cv):
    """Test a saved CV loads back equal."""
    assert storage.save_cv(sample_cv)
    assert storage.load_cv() == sample_cv


def test_snapshot_is_single_json_blob(storage, sample_cv):
    """Test the snapshot is one JSON file under the fixed key."""
    storage.save_cv(sample_cv)
    files = [p.name for p in storage.directory.iterdir()]
    assert files == [f"{CV_DATA_KEY}.json"]


def test_clear_removes_snapshot(storage):
    """Test clearing forgets the snapshot and tolerates repeats."""
    storage.save_cv(CVDocument.new())
    storage.clear_cv()
    storage.clear_cv()
    assert storage.load_cv() is None


@pytest.mark.skipif(os.name == "nt" or os.geteuid() == 0, reason="needs POSIX permissions as non-root")
def test_write_failure_is_swallowed(tmp_path):
    """Test a write failure is reported as False instead of raising."""
    locked = tmp_path / "locked"
    locked.mkdir()
    locked.chmod(0o500)
    try:
        assert LocalStorage(locked).save_cv(CVDocument.new()) is False
    finally:
        locked.chmod(0o700)


def test_write_failure_when_directory_is_a_file(tmp_path):
    """Test saving into a path that is a regular file fails softly."""
    blocker = tmp_path / "blocker"
    blocker.write_text("x")
    assert LocalStorage(blocker).save_cv(CVDocument.new()) is False


def test_user_id_is_stable(storage):
    """Test the anonymous id is created once and reused."""
    first = storage.get_or_create_user_id()
    second = LocalStorage(storage.directory).get_or_create_user_id()

    assert first.startswith("user_")
    assert first == second
    assert (storage.directory / f"{USER_ID_KEY}.json").exists()
