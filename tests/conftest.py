import io
import logging
import shutil
from unittest.mock import patch

import pytest

from branchmirror.config import ConfigAccessor
from tests.helpers import RecordingBackend, create_source_repo, ls_remote_output


@pytest.fixture
def capture_logs():
    """Fixture to capture log output during tests."""
    log_stream = io.StringIO()
    handler = logging.StreamHandler(log_stream)
    logger = logging.getLogger("branchmirror")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)

    yield log_stream

    logger.removeHandler(handler)
    log_stream.close()


@pytest.fixture
def backend():
    """Recording backend whose remote has main, develop and feature/x."""
    return RecordingBackend(
        refs=ls_remote_output(
            "refs/heads/develop",
            "refs/heads/main",
            "refs/heads/feature/x",
            "refs/tags/v1.0",
        )
    )


# git fixtures


@pytest.fixture
def source_repo(tmp_path):
    """A local repository with main, develop and feature/x branches."""
    if shutil.which("git") is None:
        pytest.skip("git is not available on the system")
    return create_source_repo(tmp_path / "upstream")


@pytest.fixture
def source_url(source_repo) -> str:
    return source_repo.as_uri()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path_factory):
    """Keep tests independent of the user's configuration file."""
    config = ConfigAccessor(tmp_path_factory.mktemp("config") / "branchmirror.cfg")
    with patch("branchmirror.config.config", config):
        yield config
