# obra/schemas/operation_result.py
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel

from obra.schemas.error_type import ErrorType


class OperationResult(BaseModel):
    '''
    Structured result of one operation call.

    ok: bool - did the operation complete?
    error_type: Optional[ErrorType] - classification of the failure
    error_message: Optional[str] - human-readable failure message
    error_detail: Optional[Dict[str, Any]] - structured failure data (limits, totals)
    data: dict or list - DTO dump of the result
    side_effect: bool - did the call change persistent state?
    '''
    ok: bool

    error_type: Optional[ErrorType] = None
    error_message: Optional[str] = None
    error_detail: Optional[Dict[str, Any]] = None

    data: Optional[Union[Dict[str, Any], List[Any]]] = None

    side_effect: bool = False
