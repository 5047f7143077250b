"""
Insomnia Generator - Custom Exceptions

This module defines custom exception classes for the generator.
"""

from typing import Any, Dict, Optional


class InsomniaGeneratorException(Exception):
    """Base exception for all generator errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or "INSOMNIA_GENERATOR_ERROR"
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            return f"{self.message} (Code: {self.error_code}, Context: {self.context})"
        return f"{self.message} (Code: {self.error_code})"


class ConfigurationException(InsomniaGeneratorException):
    """Exception raised for malformed generator configuration."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        super().__init__(
            message,
            error_code="CONFIG_ERROR",
            context={"config_key": config_key} if config_key else {},
        )


class SchemaException(InsomniaGeneratorException):
    """Exception raised when the descriptor set is inconsistent."""

    def __init__(self, message: str, file_name: Optional[str] = None):
        super().__init__(
            message,
            error_code="SCHEMA_ERROR",
            context={"file_name": file_name} if file_name else {},
        )


class PluginException(InsomniaGeneratorException):
    """Exception raised for protoc plugin transport errors."""

    def __init__(self, message: str):
        super().__init__(message, error_code="PLUGIN_ERROR")
