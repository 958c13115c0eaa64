class AutoFolioError(Exception):
    """Base class for all AutoFolio errors"""
    pass

class InvalidInput(AutoFolioError, ValueError):
    """Raised when a computation receives malformed input"""
    pass

class InvalidAllocation(InvalidInput):
    """Raised when target percentages are missing, negative or do not sum to 100"""
    pass

class InsufficientData(AutoFolioError):
    """Raised when fewer than 2 aligned days of price history are available"""
    pass

class PriceSourceError(AutoFolioError):
    """Raised when a price provider fails or returns unusable data"""
    pass

class BalanceSourceError(AutoFolioError):
    """Raised when wallet balances cannot be retrieved"""
    pass

class NotificationError(AutoFolioError):
    """Raised when a notification cannot be delivered"""
    pass
