"""
Response envelope and shared OpenAPI response definitions.

Every endpoint answers with ``{success, message, data, pagination?}``;
errors use ``{success: false, message, error, details}``.

Usage:
    from app.api.v1.helpers.responses import RESP_AUTH_404, success_response

    @router.get("/items/{item_id}", responses={**RESP_AUTH_404})
    async def get_item(...):
        return success_response(item, "Item retrieved")
"""

from typing import Any, Dict, Optional

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel

# Atomic response definitions
RESP_400 = {400: {"description": "Bad request"}}
RESP_401 = {401: {"description": "Not authenticated"}}
RESP_403 = {403: {"description": "Not enough permissions"}}
RESP_404 = {404: {"description": "Resource not found"}}
RESP_409 = {409: {"description": "Conflict"}}

# Common composites
RESP_AUTH = {**RESP_401, **RESP_403}
RESP_AUTH_404 = {**RESP_AUTH, **RESP_404}
RESP_AUTH_400 = {**RESP_AUTH, **RESP_400}
RESP_AUTH_400_404 = {**RESP_AUTH, **RESP_400, **RESP_404}
RESP_AUTH_400_404_409 = {**RESP_AUTH_400_404, **RESP_409}


def _encode(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return jsonable_encoder(data.model_dump(by_alias=True))
    if isinstance(data, list):
        return [_encode(item) for item in data]
    return jsonable_encoder(data)


def success_response(
    data: Any = None,
    message: str = "OK",
    pagination: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": True, "message": message, "data": _encode(data)}
    if pagination is not None:
        body["pagination"] = pagination
    return body


def error_response(
    message: str, kind: str, details: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    return {
        "success": False,
        "message": message,
        "error": kind,
        "details": jsonable_encoder(details or {}),
    }
