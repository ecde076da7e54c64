"""
Base Pydantic models for OCI resource tools.

Call envelopes (tool input) are tagged unions keyed by ``action``; every
domain declares four variants built on the bases below and registers them
in a ``CallSchema``. Response envelopes are the three uniform output shapes
plus the credential guidance payload.
"""
from __future__ import annotations

from typing import Annotated, Any, Literal, Union, get_args

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    model_validator,
)
from pydantic.alias_generators import to_camel

__all__ = [
    # Call envelopes
    "CallInput",
    "ListInputBase",
    "GetInputBase",
    "CreateInputBase",
    "ManageInputBase",
    "PayloadBase",
    "CallSchema",
    "describe_validation_error",
    # Response envelopes
    "Envelope",
    "ListEnvelope",
    "DetailEnvelope",
    "OperationEnvelope",
    "ConfigurationGuidance",
]

DEFAULT_LIST_LIMIT = 50


# =============================================================================
# Call Envelopes
# =============================================================================

class CallInput(BaseModel):
    """Base model for all tool call variants.

    Wire names are camelCase (``resourceType``); Python names are accepted
    too. Unknown top-level keys are ignored.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
        extra='ignore',
        alias_generator=to_camel,
        populate_by_name=True,
    )

    compartment_id: str | None = Field(
        default=None,
        description="Compartment OCID (defaults to the configured compartment)"
    )


class ListInputBase(CallInput):
    """Common filters for list calls."""
    action: Literal["list"]

    limit: int | None = Field(
        default=None,
        description=f"Maximum results to return (default {DEFAULT_LIST_LIMIT})",
        ge=1,
        le=100
    )
    display_name: str | None = Field(default=None, description="Filter by display name")
    lifecycle_state: str | None = Field(default=None, description="Filter by lifecycle state")


class GetInputBase(CallInput):
    action: Literal["get"]

    resource_id: str = Field(..., description="Resource OCID (or name)", min_length=1)


class CreateInputBase(CallInput):
    """Base for create calls.

    The ``data`` payload is resolved by the envelope's ``resourceType``: the
    tag is copied into the payload so the payload union discriminates on it.
    """
    action: Literal["create"]

    @model_validator(mode="before")
    @classmethod
    def tag_payload(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        resource_type = values.get("resourceType", values.get("resource_type"))
        data = values.get("data")
        if isinstance(data, dict) and resource_type is not None:
            data = {k: v for k, v in data.items() if k != "resource_type"}
            values = {**values, "data": {**data, "resourceType": resource_type}}
        return values


class ManageInputBase(CallInput):
    resource_id: str = Field(..., description="OCID of the resource to act on", min_length=1)


class PayloadBase(BaseModel):
    """Base for creation payloads. Unknown keys are rejected."""
    model_config = ConfigDict(
        str_strip_whitespace=True,
        extra='forbid',
        alias_generator=to_camel,
        populate_by_name=True,
    )


def describe_validation_error(exc: ValidationError) -> str:
    """Flatten a ValidationError to ``"field.path: message; ..."``."""
    parts = []
    for error in exc.errors(include_url=False):
        location = ".".join(str(part) for part in error["loc"])
        parts.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(parts)


def _literal_values(model: type[BaseModel], field_name: str) -> tuple[str, ...]:
    return get_args(model.model_fields[field_name].annotation)


class CallSchema:
    """Validation entry point for one tool's call envelope union."""

    def __init__(self, tool_name: str, variants: tuple[type[CallInput], ...]):
        self.tool_name = tool_name
        self.variants = variants
        self._adapter: TypeAdapter[Any] = TypeAdapter(
            Annotated[Union[variants], Field(discriminator="action")]
        )

    def validate(self, arguments: dict[str, Any] | None) -> CallInput:
        """Narrow an argument bag to exactly one variant.

        Raises:
            ValidationError: no variant matches, or a field constraint fails
        """
        return self._adapter.validate_python(arguments or {})

    def actions(self) -> list[str]:
        values: list[str] = []
        for variant in self.variants:
            for value in _literal_values(variant, "action"):
                if value not in values:
                    values.append(value)
        return values

    def resource_types(self) -> list[str]:
        values: list[str] = []
        for variant in self.variants:
            for value in _literal_values(variant, "resource_type"):
                if value not in values:
                    values.append(value)
        return values

    def input_schema(self) -> dict[str, Any]:
        """Flat JSON object schema advertised in the tool listing."""
        properties: dict[str, Any] = {
            "action": {
                "type": "string",
                "enum": self.actions(),
                "description": "Operation to perform",
            },
            "resourceType": {
                "type": "string",
                "enum": self.resource_types(),
                "description": "Resource type; accepted values depend on the action",
            },
        }
        defs: dict[str, Any] = {}
        creatable = False

        for variant in self.variants:
            if issubclass(variant, CreateInputBase):
                creatable = True
                continue
            schema = variant.model_json_schema(by_alias=True)
            defs.update(schema.get("$defs", {}))
            for name, prop in schema.get("properties", {}).items():
                if name not in ("action", "resourceType"):
                    properties.setdefault(name, prop)

        if creatable:
            properties["data"] = {
                "type": "object",
                "description": "Creation payload; required fields depend on resourceType",
            }

        schema: dict[str, Any] = {
            "type": "object",
            "properties": properties,
            "required": ["action", "resourceType"],
        }
        if defs:
            schema["$defs"] = defs
        return schema


# =============================================================================
# Response Envelopes
# =============================================================================

class Envelope(BaseModel):
    """Base response envelope."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True

    def to_payload(self) -> dict[str, Any]:
        """Wire form: camelCase keys, unset optional fields omitted."""
        dumped = self.model_dump(by_alias=True)
        return {key: value for key, value in dumped.items() if value is not None}


class ListEnvelope(Envelope):
    data: list[Any] = Field(default_factory=list)
    count: int = 0
    message: str
    next_page: str | None = None

    @model_validator(mode="after")
    def check_count(self) -> ListEnvelope:
        if self.count != len(self.data):
            raise ValueError(f"count {self.count} does not match {len(self.data)} items")
        return self


class DetailEnvelope(Envelope):
    data: Any
    message: str


class OperationEnvelope(Envelope):
    data: Any | None = None
    message: str
    operation_id: str | None = None


class ConfigurationGuidance(Envelope):
    """Returned instead of calling the backend when credentials are missing."""
    success: bool = False
    message: str
    help: dict[str, Any]
