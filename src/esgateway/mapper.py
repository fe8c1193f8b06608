"""
esgateway Mapper — Document Payload Conversion
==============================================

Documents cross the gateway as plain JSON-compatible dicts. The mapper
turns caller values into ``_source`` dicts on the way in and ``_source``
dicts into the caller's result type on the way out.

Supported value shapes:
    - dict
    - dataclass instances / types
    - model objects exposing ``model_dump()`` / ``model_validate()``
      (pydantic style)
    - any other callable result type, called with ``**source``
"""

import dataclasses
import json
from typing import Any, Callable, Dict, Optional, Type, TypeVar, Union

T = TypeVar("T")

ResultType = Union[Type[T], Callable[..., T]]


def parse_mapping(script: str) -> Dict[str, Any]:
    """Decode a raw JSON mapping description. No validation is done."""
    return json.loads(script)


class DocumentMapper:
    """Converts between caller documents and ``_source`` payloads."""

    def to_source(self, doc: Any) -> Dict[str, Any]:
        """
        Serialize a document into a fresh dict.

        The caller's value is never mutated; dicts are shallow-copied.
        """
        if isinstance(doc, dict):
            return dict(doc)
        if dataclasses.is_dataclass(doc) and not isinstance(doc, type):
            return dataclasses.asdict(doc)
        if hasattr(doc, "model_dump"):
            return doc.model_dump()
        raise TypeError(f"Cannot serialize document of type {type(doc).__name__}")

    def from_source(
        self,
        source: Optional[Dict[str, Any]],
        result_type: Optional[ResultType] = None
    ) -> Any:
        """
        Build a ``result_type`` value from a ``_source`` dict.

        Args:
            source: Raw payload returned by the engine
            result_type: Target type; None or dict keeps the raw dict

        Returns:
            The converted document (None when source is None)
        """
        if source is None or result_type is None or result_type is dict:
            return source
        if dataclasses.is_dataclass(result_type):
            names = {f.name for f in dataclasses.fields(result_type) if f.init}
            return result_type(**{k: v for k, v in source.items() if k in names})
        if hasattr(result_type, "model_validate"):
            return result_type.model_validate(source)
        return result_type(**source)
