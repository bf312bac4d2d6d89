"""
Envelope helpers shared by the v1 routers.
"""

from typing import Any, Optional, Type

from fastapi import Response
from pydantic import BaseModel

from teamhub.kernel.cascade.results import CascadeResult
from teamhub.schemas.common import ApiResponse


def envelope(
    response: Response,
    result: CascadeResult,
    schema: Optional[Type[BaseModel]] = None,
) -> ApiResponse:
    """Render a committed cascade as the success envelope."""
    response.status_code = result.status_code
    data: Any = None
    if schema is not None and result.payload is not None:
        data = schema.model_validate(result.payload)
    return ApiResponse(status_code=result.status_code, data=data, message=result.message)


def ok(data: Any, message: str) -> ApiResponse:
    return ApiResponse(status_code=200, data=data, message=message)
