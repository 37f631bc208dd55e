from .interfaces import Driver, DriverConnection, ResultCursor

__all__ = ["Driver", "DriverConnection", "ResultCursor"]
