"""统一错误类型定义。"""

from __future__ import annotations

from typing import Any

__all__ = ["PortcheckError", "InvalidPortError", "InvalidRangeError", "ConfigError"]


class PortcheckError(Exception):
    """portcheck 基础错误类。"""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "UNKNOWN_ERROR"

    def to_dict(self) -> dict[str, Any]:
        """转换为字典格式。"""
        return {"error": self.message, "code": self.code}


class InvalidPortError(PortcheckError):
    """端口号非法（非数字或超出 1-65535）。"""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"Invalid port number: '{value}'", "INVALID_PORT")

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["value"] = self.value
        return result


class InvalidRangeError(PortcheckError):
    """端口范围非法。"""

    def __init__(self, value: str, reason: str | None = None) -> None:
        self.value = value
        self.reason = reason

        if reason:
            msg = f"Invalid port range '{value}': {reason}"
        else:
            msg = f"Invalid port range '{value}'"

        super().__init__(msg, "INVALID_RANGE")

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["value"] = self.value
        if self.reason:
            result["reason"] = self.reason
        return result


class ConfigError(PortcheckError):
    """配置文件读取或校验错误。"""

    def __init__(self, path: str, error: str) -> None:
        self.path = path
        super().__init__(f"Invalid config file '{path}': {error}", "CONFIG_ERROR")
