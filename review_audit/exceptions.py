"""
Fatal errors raised while turning an upload into metrics.

Row-level problems are never raised; they are dropped by the parser.
"""

from typing import List


class ReviewAuditError(ValueError):
    """Base class for errors that require a corrected input file."""


class EmptyFileError(ReviewAuditError):
    """Tokenizing produced zero rows."""

    def __init__(self, message: str = "File appears to be empty."):
        super().__init__(message)


class ColumnResolutionError(ReviewAuditError):
    """The mandatory date or rating column could not be located."""

    def __init__(self, headers: List[str]):
        self.headers = list(headers)
        super().__init__(
            "Could not identify Date or Rating columns. "
            f"Found headers: {', '.join(self.headers)}"
        )


class NoReviewsError(ReviewAuditError):
    """Every row was dropped, nothing left to aggregate."""

    def __init__(self, message: str = "No valid reviews found."):
        super().__init__(message)
