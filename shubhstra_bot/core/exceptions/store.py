"""
Data-store exceptions.
"""


class DataStoreError(Exception):
    """Raised when the data store cannot complete a call."""
    pass


class NotFoundError(DataStoreError):
    """Raised when a mutation targets a record that does not exist."""
    pass
