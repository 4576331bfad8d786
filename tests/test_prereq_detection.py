"""
Tests for host and tool detection.

``platform``, ``shutil.which`` and the ``_capture`` helper are patched so
the results never depend on the machine running the tests.
"""

from pathlib import Path

import pytest

from setulab.core.models.prereq import OSProfile
from setulab.core.services.prereq import detection
from setulab.core.services.prereq.detection import (
    check_tool,
    detect_os,
    get_tool_version,
    normalize_arch,
    system_info,
)


@pytest.fixture
def linux_x86(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(detection.platform, "machine", lambda: "x86_64")
    monkeypatch.setattr(detection.platform, "release", lambda: "6.5.0-14-generic")
    monkeypatch.setattr(detection.platform, "system", lambda: "Linux")


def _which(*present: str):
    return lambda name: f"/usr/bin/{name}" if name in present else None


def _captures(table: dict[tuple[str, ...], tuple[int, str] | None]):
    """Fake ``_capture`` answering from a command → result table."""
    def capture(cmd, timeout=10):
        return table.get(tuple(cmd))
    return capture


# ── Architecture ────────────────────────────────────────────────────


class TestNormalizeArch:
    @pytest.mark.parametrize("machine, expected", [
        ("x86_64", "amd64"),
        ("aarch64", "arm64"),
        ("armv7l", "armv7"),
        ("riscv64", "riscv64"),
    ])
    def test_mapping(self, machine: str, expected: str):
        assert normalize_arch(machine) == expected


# ── OS detection ────────────────────────────────────────────────────


class TestDetectOs:
    def test_os_release(self, tmp_path: Path, linux_x86):
        release = tmp_path / "os-release"
        release.write_text(
            'NAME="Ubuntu"\n'
            'ID=ubuntu\n'
            'VERSION_ID="22.04"\n'
            'VERSION_CODENAME=jammy\n'
            '# comment\n'
        )
        profile = detect_os(os_release=release, redhat_release=tmp_path / "none")
        assert profile.distro_id == "ubuntu"
        assert profile.version_id == "22.04"
        assert profile.codename == "jammy"
        assert profile.architecture == "amd64"
        assert profile.raw_machine == "x86_64"
        assert profile.kernel == "6.5.0-14-generic"

    def test_redhat_release_fallback(self, tmp_path: Path, linux_x86):
        redhat = tmp_path / "redhat-release"
        redhat.write_text("CentOS Linux release 7.9.2009 (Core)\n")
        profile = detect_os(os_release=tmp_path / "none", redhat_release=redhat)
        assert profile.distro_id == "rhel"
        assert profile.version_id == "7.9"

    def test_kernel_fallback(self, tmp_path: Path, linux_x86):
        profile = detect_os(os_release=tmp_path / "none", redhat_release=tmp_path / "none")
        assert profile.distro_id == "linux"
        assert profile.version_id == "6.5.0-14-generic"
        assert profile.codename == ""

    def test_label(self):
        assert OSProfile(distro_id="debian", version_id="12").label == "debian 12"
        assert OSProfile(distro_id="arch").label == "arch"


# ── Tool versions ───────────────────────────────────────────────────


class TestGetToolVersion:
    def test_docker(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(detection.shutil, "which", _which("docker"))
        monkeypatch.setattr(detection, "_capture", _captures({
            ("docker", "--version"): (0, "Docker version 24.0.7, build afdd53b\n"),
        }))
        assert get_tool_version("docker") == "24.0.7"

    def test_task_uses_generic_extraction(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(detection.shutil, "which", _which("task"))
        monkeypatch.setattr(detection, "_capture", _captures({
            ("task", "--version"): (0, "Task version: v3.37.2 (h1:abc)\n"),
        }))
        assert get_tool_version("task") == "3.37.2"

    def test_not_on_path(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(detection.shutil, "which", _which())
        assert get_tool_version("git") is None

    def test_unknown_tool(self):
        assert get_tool_version("nonexistent-tool") is None


# ── Tool checks ─────────────────────────────────────────────────────


class TestCheckTool:
    def test_missing(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(detection.shutil, "which", _which())
        check = check_tool("jq")
        assert not check.installed
        assert check.version is None

    def test_docker_healthy(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(detection.shutil, "which", _which("docker"))
        monkeypatch.setattr(detection, "_capture", _captures({
            ("docker", "--version"): (0, "Docker version 24.0.7, build afdd53b"),
            ("docker", "info"): (0, "Server: ..."),
            ("docker", "ps"): (0, "CONTAINER ID"),
        }))
        check = check_tool("docker")
        assert check.installed
        assert check.version == "24.0.7"
        assert check.path == "/usr/bin/docker"
        assert check.notes == []

    def test_docker_daemon_down(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(detection.shutil, "which", _which("docker"))
        monkeypatch.setattr(detection, "_capture", _captures({
            ("docker", "--version"): (0, "Docker version 24.0.7"),
            ("docker", "info"): (1, "Cannot connect to the Docker daemon"),
        }))
        check = check_tool("docker")
        assert check.installed
        assert "daemon is not running" in check.notes[0]

    def test_docker_needs_sudo(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(detection.shutil, "which", _which("docker"))
        monkeypatch.setattr(detection, "_capture", _captures({
            ("docker", "--version"): (0, "Docker version 24.0.7"),
            ("docker", "info"): (0, ""),
            ("docker", "ps"): (1, "permission denied"),
        }))
        check = check_tool("docker")
        assert "requires sudo" in check.notes[0]

    def test_compose_plugin(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(detection.shutil, "which", _which("docker"))
        monkeypatch.setattr(detection, "_capture", _captures({
            ("docker", "compose", "version", "--short"): (0, "2.21.0\n"),
        }))
        check = check_tool("docker-compose")
        assert check.installed
        assert check.version == "2.21.0"
        assert check.variant == "plugin"

    def test_compose_standalone(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(detection.shutil, "which", _which("docker", "docker-compose"))
        monkeypatch.setattr(detection, "_capture", _captures({
            ("docker", "compose", "version", "--short"): (1, "unknown command"),
            ("docker-compose", "--version"): (0, "docker-compose version 1.29.2, build 5becea4c"),
        }))
        check = check_tool("docker-compose")
        assert check.installed
        assert check.version == "1.29.2"
        assert check.variant == "standalone"
        assert any("Compose v2" in n for n in check.notes)

    def test_compose_missing(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(detection.shutil, "which", _which("docker"))
        monkeypatch.setattr(detection, "_capture", _captures({}))
        assert not check_tool("docker-compose").installed


# ── System summary ──────────────────────────────────────────────────


class TestSystemInfo:
    def test_keys(self, ubuntu: OSProfile, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        meminfo = tmp_path / "meminfo"
        meminfo.write_text("MemTotal:        8048576 kB\nMemFree: 1 kB\n")
        monkeypatch.setattr(detection, "MEMINFO", meminfo)
        info = system_info(ubuntu, workdir=tmp_path)
        assert list(info) == [
            "OS", "Architecture", "Kernel", "User", "Home", "Shell",
            "Available Space", "Total Memory",
        ]
        assert info["OS"] == "ubuntu 22.04"
        assert info["Architecture"] == "amd64"
        assert info["Total Memory"] == "7.7G"

    def test_memory_unknown(self, ubuntu: OSProfile, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(detection, "MEMINFO", tmp_path / "missing")
        assert system_info(ubuntu, workdir=tmp_path)["Total Memory"] == "unknown"
