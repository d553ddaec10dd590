"""
Error types raised by ingestion, editing and the session store
"""


class DatasetError(ValueError):
    """Base class for everything the dashboard reports back to the user"""


class EmptyFile(DatasetError):
    def __init__(self, message: str = "File appears to be empty"):
        super().__init__(message)


class MalformedRow(DatasetError):
    """A data row whose field count differs from the header's"""

    def __init__(self, row_index: int, expected: int, actual: int):
        self.row_index = row_index
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Row {row_index} has {actual} columns instead of {expected}"
        )


class UnsupportedFileType(DatasetError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unsupported file type: {name!r}. Please upload a CSV file")


class InvalidFillRule(DatasetError):
    def __init__(self, column: str, reason: str):
        self.column = column
        self.reason = reason
        super().__init__(f"Cannot fill column '{column}': {reason}")


class NoPendingEdit(DatasetError):
    def __init__(self):
        super().__init__("There is no pending edit to apply")


class DatasetNotFound(DatasetError):
    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Dataset session '{session_id}' not found or expired")
