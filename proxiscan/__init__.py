"""BLE advertisement classification and proximity estimation."""

__version__ = "0.1.0"
