"""Shared base for the immutable domain models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from scgep.validation.errors import ConfigurationError


class DomainModel(BaseModel):
    """
    Frozen pydantic model whose validation failures surface as ConfigurationError.

    Field constraints (``ge=0`` and friends) reject negative magnitudes; the
    wrap validator turns pydantic's ValidationError into the engine's error
    type so callers only handle one exception for malformed input.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="wrap")
    @classmethod
    def _raise_configuration_error(cls, data: Any, handler):
        try:
            return handler(data)
        except ValidationError as exc:
            problems = [
                f"{'.'.join(str(part) for part in err['loc']) or cls.__name__}: {err['msg']}"
                for err in exc.errors()
            ]
            raise ConfigurationError(
                f"Invalid {cls.__name__} ({len(problems)} problem(s))",
                {"errors": problems[:10]},
            ) from exc
