"""
Tests for version extraction and MAJOR.MINOR comparison.

Pure unit tests, no subprocess.
"""

import pytest

from setulab.core.services.prereq.version import (
    extract_version,
    normalize_major_minor,
    version_at_least,
)


class TestExtractVersion:
    @pytest.mark.parametrize("text, expected", [
        ("Docker version 24.0.7, build afdd53b", "24.0.7"),
        ("v2.21.0", "2.21.0"),
        ("Task version: v3.37.2 (h1:abc)", "3.37.2"),
        ("docker-compose version 1.29.2, build 5becea4c", "1.29.2"),
        ("jq-1.6", "1.6"),
        ("git version 2.43.0", "2.43.0"),
    ])
    def test_extracts(self, text: str, expected: str):
        assert extract_version(text) == expected

    def test_triple_preferred_over_earlier_pair(self):
        assert extract_version("build 1.2 of tool 3.4.5") == "3.4.5"

    def test_no_version(self):
        assert extract_version("command not found") is None
        assert extract_version("") is None


class TestNormalizeMajorMinor:
    def test_patch_discarded(self):
        assert normalize_major_minor("20.10.5") == (20, 10)

    def test_leading_v(self):
        assert normalize_major_minor("v2.21.0") == (2, 21)

    def test_bare_major(self):
        assert normalize_major_minor("3") == (3, 0)

    def test_garbage(self):
        assert normalize_major_minor("unknown") is None


class TestVersionAtLeast:
    @pytest.mark.parametrize("actual, required, expected", [
        ("20.10.5", "20.10", True),
        ("20.10", "20.10", True),
        ("24.0.7", "20.10", True),
        ("19.03.12", "20.10", False),
        ("9.9", "20.10", False),
        ("2.1", "2.0", True),
        ("2.0", "2.0", True),
        ("1.29.2", "2.0", False),
        ("20.9", "20.10", False),
    ])
    def test_numeric_comparison(self, actual: str, required: str, expected: bool):
        assert version_at_least(actual, required) is expected

    def test_unparseable_actual_fails(self):
        assert version_at_least("dev", "2.0") is False

    def test_invalid_floor_raises(self):
        with pytest.raises(ValueError):
            version_at_least("2.0", "latest")
