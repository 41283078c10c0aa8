"""
Error taxonomy for the evaluation engine.

Only configuration errors escape to the caller; everything else is contained
at the level of a single (token, exchange) fetch or notification delivery.
"""


class ArbitrageError(Exception):
    """Base class for all engine errors"""


class ConfigurationError(ArbitrageError, ValueError):
    """Configuration cannot be used as written (e.g. a malformed token)"""


class DataUnavailable(ArbitrageError):
    """A price could not be obtained for one exchange and token"""

    def __init__(self, exchange: str, token: str, reason: str):
        self.exchange = exchange
        self.token = token
        self.reason = reason
        super().__init__(f"{exchange} {token}: {reason}")


class NotificationFailure(ArbitrageError):
    """Delivery to a notification channel failed"""
