"""Tests for configuration and error types."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from portcheck.config import DEFAULT_MAX_CONCURRENCY, ScanConfig, load_config
from portcheck.errors import ConfigError, InvalidPortError, InvalidRangeError, PortcheckError


class TestScanConfig:
    """Tests for ScanConfig."""

    def test_defaults(self):
        """Test: Defaults match the documented values."""
        config = ScanConfig()
        assert config.max_concurrency == DEFAULT_MAX_CONCURRENCY == 100
        assert config.resolve_process is False
        assert config.bind_host == "0.0.0.0"
        assert config.proc_root == Path("/proc")
        assert config.color is None

    def test_concurrency_must_be_positive(self):
        """Test: A zero ceiling is rejected."""
        with pytest.raises(ValidationError):
            ScanConfig(max_concurrency=0)

    def test_bind_host_accepts_ip_literals(self):
        """Test: IPv4 and IPv6 addresses are valid bind hosts."""
        assert ScanConfig(bind_host="127.0.0.1").bind_host == "127.0.0.1"
        assert ScanConfig(bind_host="::").bind_host == "::"

    def test_bind_host_rejects_names(self):
        """Test: A hostname is not a bind address."""
        with pytest.raises(ValidationError, match="bind_host"):
            ScanConfig(bind_host="localhost")

    def test_extra_fields_ignored(self):
        """Test: Unknown keys do not fail validation."""
        config = ScanConfig(max_concurrency=5, unknown_key="x")
        assert config.max_concurrency == 5


class TestLoadConfig:
    """Tests for load_config."""

    def test_load(self, tmp_path):
        """Test: Values are read from JSON."""
        path = tmp_path / "portcheck.json"
        path.write_text(json.dumps({"max_concurrency": 25, "resolve_process": True}))

        config = load_config(path)
        assert config.max_concurrency == 25
        assert config.resolve_process is True

    def test_missing_file(self, tmp_path):
        """Test: Missing file raises ConfigError."""
        with pytest.raises(ConfigError, match="file not found"):
            load_config(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        """Test: Malformed JSON raises ConfigError."""
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(ConfigError, match="invalid JSON"):
            load_config(path)

    def test_invalid_structure(self, tmp_path):
        """Test: Values failing validation raise ConfigError."""
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"max_concurrency": -1}))
        with pytest.raises(ConfigError) as exc_info:
            load_config(path)
        assert exc_info.value.code == "CONFIG_ERROR"

    def test_non_object(self, tmp_path):
        """Test: A JSON list is not a config."""
        path = tmp_path / "list.json"
        path.write_text("[1, 2]")
        with pytest.raises(ConfigError, match="must be an object"):
            load_config(path)


class TestErrors:
    """Tests for the error hierarchy."""

    def test_base_error(self):
        """Test: Default code and dict form."""
        error = PortcheckError("something broke")
        assert error.code == "UNKNOWN_ERROR"
        assert error.to_dict() == {"error": "something broke", "code": "UNKNOWN_ERROR"}
        assert str(error) == "something broke"

    def test_invalid_port(self):
        """Test: InvalidPortError carries the offending value."""
        error = InvalidPortError("70000")
        assert isinstance(error, PortcheckError)
        assert error.to_dict() == {
            "error": "Invalid port number: '70000'",
            "code": "INVALID_PORT",
            "value": "70000",
        }

    def test_invalid_range_with_reason(self):
        """Test: InvalidRangeError includes its reason."""
        error = InvalidRangeError("100-50", "start port is greater than end port")
        data = error.to_dict()
        assert data["code"] == "INVALID_RANGE"
        assert data["reason"] == "start port is greater than end port"
        assert "100-50" in error.message

    def test_invalid_range_without_reason(self):
        """Test: Reason is optional."""
        error = InvalidRangeError("x-y")
        assert "reason" not in error.to_dict()
        assert error.message == "Invalid port range 'x-y'"
