"""Error types for settings panels and cloud variable stores.

Explicit ``save()``/``load()`` calls propagate these to the caller. Only the
one-time panel bootstrap swallows them.
"""


class CloudSettingsError(Exception):
    """Base exception for all cloudsettings errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(CloudSettingsError):
    """Raised for malformed panel declarations or configuration.

    Examples: a persistence command with fewer than two tokens, duplicate
    literal names in a panel schema, a hub store without a token.
    """


class SettingTypeError(CloudSettingsError, TypeError):
    """Raised when a value's kind is unsupported or differs from the setting's kind."""

    def __init__(self, setting_name: str, expected: str, actual: str):
        message = (
            f"Setting '{setting_name}' holds {expected} values, got {actual}"
        )
        details = {
            "setting": setting_name,
            "expected": expected,
            "actual": actual,
        }
        super().__init__(message, details)
        self.setting_name = setting_name


class StoreError(CloudSettingsError):
    """Base class for remote store transport failures."""

    operation = "access"

    def __init__(self, key: str, reason: str, status_code: int = 0):
        message = f"Failed to {self.operation} cloud variable '{key}': {reason}"
        details = {"key": key, "reason": reason}
        if status_code:
            details["status_code"] = status_code
        super().__init__(message, details)
        self.key = key
        self.status_code = status_code


class StoreReadError(StoreError):
    """Raised when a variable is absent or the store cannot be read."""

    operation = "read"


class StoreWriteError(StoreError):
    """Raised when the store rejects or cannot receive a write."""

    operation = "write"


class SerializationError(CloudSettingsError):
    """Raised when settings values cannot be encoded for storage."""

    def __init__(self, reason: str):
        super().__init__(f"Cannot encode settings: {reason}", {"reason": reason})


class DeserializationError(CloudSettingsError):
    """Raised when a stored blob is corrupt or not a settings mapping."""

    def __init__(self, key: str, reason: str):
        message = f"Cannot decode settings stored at '{key}': {reason}"
        super().__init__(message, {"key": key, "reason": reason})
        self.key = key
