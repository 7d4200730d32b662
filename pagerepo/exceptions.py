from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

# Failures raised by the underlying data source are passed through untouched.
DataSourceError = SQLAlchemyError


class InvalidArgumentError(ValueError):
    """Raised when a paging or sorting argument is rejected before querying"""


class NonUniqueResultError(Exception):
    """Raised when a single-result lookup matches more than one row"""


class ObjectStorageError(Exception):
    """Raised when storing an object in the repository fails"""

    def __init__(self, message: str, original_exception: Optional[Exception]):
        super().__init__(message)
        self.original_exception = original_exception
