"""
Error types raised by the content store.
"""


class StorageError(Exception):
    """Raised when item content cannot be stored or retrieved."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
