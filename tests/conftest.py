"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from setulab.adapters.mock import MockRuntime
from setulab.core.models.prereq import OSProfile


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep every test away from real settings files and SETULAB_* vars."""
    for var in (
        "SETULAB_BASE_DIR",
        "SETULAB_NETWORK",
        "SETULAB_LOG_LEVEL",
        "SETULAB_LOG_FILE",
        "SETULAB_LOG_FILE_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    return workdir


@pytest.fixture
def base_dir(tmp_path: Path) -> Path:
    """Instance root; not created up front."""
    return tmp_path / "setulab"


@pytest.fixture
def runtime() -> MockRuntime:
    return MockRuntime()


@pytest.fixture
def ubuntu() -> OSProfile:
    return OSProfile(
        distro_id="ubuntu",
        version_id="22.04",
        codename="jammy",
        kernel="6.5.0",
        architecture="amd64",
        raw_machine="x86_64",
    )
