"""Domain-specific errors for proxiscan."""


class ProxiscanError(Exception):
    """Base error for proxiscan."""


class SignatureValidationError(ProxiscanError):
    """Raised when a signature table file does not conform to schema or semantics."""


class SignatureLoadError(ProxiscanError):
    """Raised when reading signature table sources fails."""


class SettingsValidationError(ProxiscanError):
    """Raised when the user settings file is malformed."""


class DeviceNotFoundError(ProxiscanError):
    """Raised when an operation targets a device id the registry does not hold."""


class SessionStateError(ProxiscanError):
    """Raised on an illegal scan session transition."""


class StorageError(ProxiscanError):
    """Raised by key-value storage when a read or write fails."""


class RadioError(ProxiscanError):
    """Base radio error."""


class AdapterUnavailableError(RadioError):
    """Raised when the Bluetooth adapter is off or missing."""


class ConnectorError(ProxiscanError):
    """Raised when connecting to or disconnecting from a device fails."""
