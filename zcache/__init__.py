"""Thread-safe in-memory key/value cache with time-based expiry and proxy keys."""

__version__ = "2.0.0"
__all__ = ["cache", "proxy"]