# obra/operations/error_classification.py
from typing import Any, Dict, Optional, Tuple

from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.exc import SQLAlchemyError

from obra.logger import get_logger
from obra.schemas.error_type import ErrorType
from obra.schemas.operation_result import OperationResult
from obra.services.errors import NotFoundError, UnknownFieldError, ValidationError

logger = get_logger(__name__)


def classify_error(e: Exception) -> Tuple[ErrorType, Optional[Dict[str, Any]]]:
    """
    Map an exception raised below the operations layer to an ErrorType
    plus structured detail for the caller.
    """
    # --- input ---
    if isinstance(e, SchemaValidationError):
        return ErrorType.INPUT_ERROR, {
            "errors": [
                {"loc": [str(part) for part in err["loc"]], "msg": err["msg"], "type": err["type"]}
                for err in e.errors()
            ]
        }
    if isinstance(e, UnknownFieldError):
        return ErrorType.INPUT_ERROR, e.detail()

    # --- domain ---
    if isinstance(e, NotFoundError):
        return ErrorType.NOT_FOUND, {"entity": e.entity, "id": e.entity_id}
    if isinstance(e, ValidationError):
        return ErrorType.VALIDATION_ERROR, e.detail() or None

    # --- DB / system ---
    if isinstance(e, SQLAlchemyError):
        return ErrorType.DATABASE_ERROR, None
    return ErrorType.SYSTEM_ERROR, None


def failure_result(e: Exception) -> OperationResult:
    error_type, detail = classify_error(e)

    if error_type == ErrorType.SYSTEM_ERROR:
        logger.exception("unexpected failure: %s", e)
    elif error_type == ErrorType.DATABASE_ERROR:
        logger.error("database failure: %s", e)

    return OperationResult(
        ok=False,
        error_type=error_type,
        error_message=str(e),
        error_detail=detail,
        data=None,
        side_effect=False,
    )
