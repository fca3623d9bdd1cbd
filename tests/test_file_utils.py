import os
from unittest.mock import patch

import pytest

from rollping.file_utils import publish_atomically


def test_publish_atomically_writes_and_creates_parent(tmp_path):
    target = tmp_path / "cache" / "db.mmdb"

    publish_atomically(target, b"payload")

    assert target.read_bytes() == b"payload"
    assert os.listdir(target.parent) == ["db.mmdb"]


def test_publish_atomically_replaces_existing(tmp_path):
    target = tmp_path / "db.mmdb"
    target.write_bytes(b"old")

    publish_atomically(target, b"new")

    assert target.read_bytes() == b"new"


def test_publish_atomically_cleans_up_on_failure(tmp_path):
    target = tmp_path / "db.mmdb"

    with patch("rollping.file_utils.os.replace", side_effect=OSError("rename failed")):
        with pytest.raises(OSError):
            publish_atomically(target, b"payload")

    assert list(tmp_path.iterdir()) == []
