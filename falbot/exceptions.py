"""
Custom exceptions for the bot, providing a structured error hierarchy.
"""


class BotBaseException(Exception):
    """Base exception for all custom exceptions in this bot."""

    pass


class ConfigurationError(BotBaseException):
    """Raised for errors in bot configuration, like missing keys or invalid values."""

    pass


class APIError(BotBaseException):
    """Raised for errors related to external API interactions (Discord, fal.ai, rate oracle)."""

    pass


class DeliveryError(BotBaseException):
    """Raised when a finished artifact could not be downloaded or sent to the user."""

    pass


class BalanceStoreError(BotBaseException):
    """Raised when the balance store cannot be read or written."""

    pass
