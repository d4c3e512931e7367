"""Common utilities for AxM operations modules.

This module contains shared helpers used across the operations modules
(devices, MDM servers, activities, AppleCare).
"""

import logging
from typing import Any

from pydantic import BaseModel

from ..client.dispatcher import HttpMethod, Request, RequestDispatcher

logger = logging.getLogger("axm_mcp.operations.common")


def build_request[ResponseT: BaseModel](
    dispatcher: RequestDispatcher,
    method: HttpMethod,
    path: str,
    response_model: type[ResponseT],
    *,
    body: BaseModel | None = None,
    params: dict[str, str | int] | None = None,
) -> Request[ResponseT]:
    """Build a request descriptor bound to the dispatcher's scope."""
    return Request(
        method=method,
        path=path,
        scope=dispatcher.scope,
        response_model=response_model,
        body=body,
        params=params or {},
    )


def serialize_model(obj: object) -> dict[str, Any]:
    """Serialize a Pydantic model to a JSON-compatible dict with API field names, excluding Nones.

    Args:
        obj: A Pydantic model instance with a `model_dump` method.

    Returns:
        JSON-serializable dictionary representation of the model.
        Returns empty dict if serialization fails.

    """
    model_dump = getattr(obj, "model_dump", None)
    if callable(model_dump):
        try:
            return model_dump(mode="json", by_alias=True, exclude_none=True)  # type: ignore[call-arg]
        except (TypeError, ValueError) as exc:
            logger.warning(
                "Failed to serialize model %s: %s",
                type(obj).__name__,
                exc,
            )
            return {}
    return {}


def serialize_models(objs: list[Any]) -> list[dict[str, Any]]:
    """Serialize a list of Pydantic models with ``serialize_model``."""
    return [serialize_model(obj) for obj in objs]


def to_jsonable(result: object) -> object:
    """Convert an operation result (model, list of models or plain value) into JSON-compatible data."""
    if isinstance(result, BaseModel):
        return serialize_model(result)
    if isinstance(result, list):
        return serialize_models(result)
    return result


__all__ = ["build_request", "serialize_model", "serialize_models", "to_jsonable"]
