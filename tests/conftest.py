"""Global pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from propsnap._storage.blob_local import LocalBlobStore
from propsnap._storage.records_json import JsonRecordStore


@pytest.fixture
def temp_storage_dir(tmp_path):
    """Working directory shared by the file-backed stores."""
    return tmp_path / "store"


@pytest.fixture
def mock_global_config(temp_storage_dir):
    return {
        "working_dir": str(temp_storage_dir),
        "local_blob_root": str(temp_storage_dir / "blobs"),
        "url_signing_secret": "test-secret",
        "archive_container": "backups",
    }


@pytest.fixture
def record_store(mock_global_config):
    return JsonRecordStore(global_config=mock_global_config)


@pytest.fixture
def blob_store(mock_global_config):
    return LocalBlobStore(global_config=mock_global_config)
