# obra/schemas/error_type.py
from enum import Enum


class ErrorType(str, Enum):
    '''
    Structured classification of what went wrong in an operation.

    INPUT_ERROR: payload is malformed (schema failure, unknown field). Caller fixes the input.
    NOT_FOUND: a referenced project / stage / activity / material / ledger row does not exist.
    VALIDATION_ERROR: a domain rule rejected the write (executed cap, stock overdraft). Not retried.
    PERMISSION_DENIED: no logged-in session.
    DATABASE_ERROR: engine failure or lock contention that outlived the retries. Retry may work.
    SYSTEM_ERROR: anything unclassified.
    '''
    INPUT_ERROR = "INPUT_ERROR"
    NOT_FOUND = "NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    DATABASE_ERROR = "DATABASE_ERROR"
    SYSTEM_ERROR = "SYSTEM_ERROR"
