"""
Exception Definitions - Custom exceptions for Cozy Companion
============================================================

This module defines the custom exceptions used throughout the application.
Normal chat flow never raises: these signal broken configuration, broken
rule banks, or misuse of the conversation model.
"""


class CompanionError(Exception):
    """
    Base exception for all Cozy Companion errors.

    Attributes:
        message (str): Human-readable error description
        details (dict): Additional error details for debugging
    """

    def __init__(self, message: str, details: dict = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error description
            details: Optional dictionary with additional error context
        """
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return formatted error message with details if present."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigError(CompanionError):
    """
    Configuration-related errors.

    Raised when there are issues with:
    - Invalid configuration values
    - Configuration parsing errors
    - Unreadable configuration files
    """
    pass


class RuleError(CompanionError):
    """
    Rule bank errors.

    Raised when there are issues with:
    - A bank without a trailing catch-all rule
    - Invalid regular expressions in a rule
    - Malformed rule files
    """
    pass


class ConversationError(CompanionError):
    """
    Conversation model errors.

    Raised when a caller tries to append an empty message or
    rebuild a message from incomplete data.
    """
    pass
