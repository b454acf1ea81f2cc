"""
Custom exceptions used throughout the Duplicatable package.
"""


class DuplicatableException(Exception):
    """Exception class specific to the Duplicatable package.

    Args:
        msg (str): Optional message for the exception.
    """

    def __init__(self, msg=""):
        super().__init__(msg)
        self._msg = msg


class DuplicatableConfigurationError(DuplicatableException):
    """A duplication configuration value is malformed."""


class DuplicatableSchemaError(DuplicatableConfigurationError):
    """A configured path names a relationship the schema does not have.

    Args:
        path (str): The dotted path being resolved.
        segment (str): The segment that failed to resolve.
        table (str): Name of the table the segment was looked up on.
    """

    def __init__(self, path: str, segment: str, table: str):
        super().__init__(f"Unknown relationship '{segment}' on '{table}' in path '{path}'")
        self.path = path
        self.segment = segment
        self.table = table


class DuplicatableNotFoundError(DuplicatableException):
    """The requested record does not exist in the repository.

    Args:
        table (str): Name of the table that was searched.
        record_id: Identifier that was requested.
    """

    def __init__(self, table: str, record_id):
        super().__init__(f"Record not found in table '{table}' with primary key {record_id!r}")
        self.table = table
        self.record_id = record_id
