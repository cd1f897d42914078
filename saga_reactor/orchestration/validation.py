"""Pydantic-backed input validators.

A validator is any callable ``validate(raw_inputs) -> Result``. On
rejection it returns ``Failure(InputValidationError)`` whose
``field_errors`` maps a field name to a human-readable message; the
executor surfaces that failure unchanged.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional, Type

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..errors import InputValidationError
from ..result import Failure, Result, Success
from ..utils.logger import get_logger

logger = get_logger(__name__)


def format_errors(error: PydanticValidationError, prefix: Optional[str] = None) -> Dict[str, str]:
    """Flatten pydantic errors into ``field -> "message, message"``.

    Nested locations are rendered as ``outer[inner][0]``.
    """
    formatted: Dict[str, list] = {}
    for detail in error.errors():
        parts = [str(part) for part in detail.get("loc", ())]
        if prefix is not None:
            parts.insert(0, prefix)
        if not parts:
            key = "__root__"
        else:
            key = parts[0] + "".join(f"[{part}]" for part in parts[1:])
        formatted.setdefault(key, []).append(detail.get("msg", "is invalid"))
    return {key: ", ".join(messages) for key, messages in formatted.items()}


class SchemaInputValidator:
    """Validates individual inputs against per-input pydantic schemas.

    Args:
        schemas: Input name -> any type pydantic can validate
        optional: Names of inputs that may be absent
    """

    def __init__(self, schemas: Mapping[str, Any], optional: Iterable[str] = ()):
        self.schemas = dict(schemas)
        self.optional = set(optional)
        self._adapters = {name: TypeAdapter(schema) for name, schema in self.schemas.items()}

    def __call__(self, inputs: Mapping[str, Any]) -> Result:
        errors: Dict[str, str] = {}
        validated = dict(inputs)

        for name, adapter in self._adapters.items():
            if name not in inputs:
                if name not in self.optional:
                    errors[name] = "is missing"
                continue
            try:
                validated[name] = adapter.validate_python(inputs[name])
            except PydanticValidationError as e:
                errors.update(format_errors(e, prefix=name))

        if errors:
            logger.debug(f"Input validation errors: {errors}")
            return Failure(InputValidationError(errors))
        return Success(validated)

    def __repr__(self) -> str:
        return f"SchemaInputValidator(inputs={list(self.schemas)})"


class ModelInputValidator:
    """Validates the whole input mapping against one pydantic model.

    Inputs the model does not declare are passed through untouched.
    """

    def __init__(self, model: Type[BaseModel]):
        self.model = model

    def __call__(self, inputs: Mapping[str, Any]) -> Result:
        try:
            instance = self.model.model_validate(dict(inputs))
        except PydanticValidationError as e:
            return Failure(InputValidationError(format_errors(e)))
        validated = dict(inputs)
        validated.update(instance.model_dump())
        return Success(validated)

    def __repr__(self) -> str:
        return f"ModelInputValidator(model={self.model.__name__})"
