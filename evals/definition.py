"""Evaluation definition documents and their configuration blocks."""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import (
    BeforeValidator,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    field_serializer,
    field_validator,
    model_serializer,
    model_validator,
)

from assay_core.schemas import BaseSchema


def _number_as_text(value: object) -> object:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


# Free-text fields take a bare `id: 42` as "42"; booleans and lists are still rejected.
Text = Annotated[StrictStr, BeforeValidator(_number_as_text)]


class SingleModel(BaseSchema):
    kind: Literal["single"] = "single"
    model: StrictStr

    @property
    def model_ids(self) -> list[str]:
        return [self.model]


class MultipleModels(BaseSchema):
    kind: Literal["multiple"] = "multiple"
    models: list[StrictStr] = Field(min_length=1)

    @property
    def model_ids(self) -> list[str]:
        return list(self.models)


ModelRef = SingleModel | MultipleModels


def parse_model_ref(raw: object) -> ModelRef:
    """Resolve an untagged model reference.

    A string is a single model; failing that, a non-empty list of strings
    is a model list. Any other shape is rejected.
    """
    if isinstance(raw, (SingleModel, MultipleModels)):
        return raw
    if isinstance(raw, str):
        return SingleModel(model=raw)
    if isinstance(raw, list):
        if not raw:
            raise ValueError("model list must not be empty")
        if all(isinstance(item, str) for item in raw):
            return MultipleModels(models=list(raw))
        raise ValueError("model list must contain only model identifiers")
    raise ValueError(
        f"model must be a model identifier or a list of identifiers, got {type(raw).__name__}"
    )


class DatasetConfig(BaseSchema):
    source: Text
    path: Text
    split: Text | None = None
    limit: StrictInt | None = Field(default=None, ge=0)
    shuffle: StrictBool | None = None
    seed: StrictInt | None = Field(default=None, ge=0)


class SolverConfig(BaseSchema):
    model_config = ConfigDict(populate_by_name=True)

    solver_type: Text = Field(alias="type")
    system_prompt: Text | None = None
    tools: list[Any] | None = None
    max_turns: StrictInt | None = Field(default=None, ge=0)
    sandbox: Any = None


class ScorerConfig(BaseSchema):
    """A scorer entry: the ``type`` discriminant plus every other key, in order."""

    scorer_type: Text = Field(alias="type")
    config: dict[StrictStr, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def collect_extra_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        if "type" not in data and "scorer_type" in data:
            # Built by field name: ScorerConfig(scorer_type=..., config={...})
            return {"type": data["scorer_type"], "config": data.get("config", {})}
        payload: dict[str, Any] = {
            "config": {key: value for key, value in data.items() if key != "type"}
        }
        if "type" in data:
            payload["type"] = data["type"]
        return payload

    @model_serializer(mode="plain")
    def flatten(self) -> dict[str, Any]:
        return {"type": self.scorer_type, **self.config}


class ExecutionConfig(BaseSchema):
    max_concurrent: StrictInt = Field(ge=0)
    timeout_seconds: StrictInt = Field(ge=0)
    retries: StrictInt = Field(ge=0)
    model: ModelRef

    @field_validator("model", mode="before")
    @classmethod
    def resolve_model(cls, value: object) -> ModelRef:
        return parse_model_ref(value)

    @field_serializer("model")
    def untag_model(self, value: ModelRef) -> str | list[str]:
        if isinstance(value, SingleModel):
            return value.model
        return list(value.models)


class EvalDefinition(BaseSchema):
    """A declarative eval: where samples come from, how they are solved and scored.

    Scalar fields are strict; hand-written YAML gets no silent "10" -> 10 coercion.
    """

    id: Text
    name: Text
    description: Text | None = None
    dataset: DatasetConfig
    solver: SolverConfig
    scorer: list[ScorerConfig] = Field(min_length=1)
    execution: ExecutionConfig

    def to_document(self) -> dict[str, object]:
        """Dump in document shape: aliases, untagged model, optional fields omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)


class EvalSummary(BaseSchema):
    id: str
    name: str
    description: str | None = None
    path: str

    @classmethod
    def from_definition(cls, definition: EvalDefinition, path: str) -> "EvalSummary":
        return cls(
            id=definition.id,
            name=definition.name,
            description=definition.description,
            path=path,
        )
