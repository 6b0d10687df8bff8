from typing import Any, Optional

from fastapi.encoders import jsonable_encoder


def success_response(data: Any = None, message: Optional[str] = None) -> dict:
    """Wrap a payload in the success envelope."""
    body = {"success": True}
    if message:
        body["message"] = message
    body["data"] = jsonable_encoder(data)
    return body
