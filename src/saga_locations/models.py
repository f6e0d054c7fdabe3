from typing import Any, Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Position(BaseModel):
    row: int
    column: int


class LocationData(BaseModel):
    file_name: str
    line_number: int
    original_source: str | None = None


class PluginOptions(BaseModel):
    """Options recognised by the annotator, accepted in snake_case or Babel-style camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    use_symbol: bool = True
    base_path: str | None = None


class FileOptions(BaseModel):
    filename: str
    input_source_map: dict[str, Any] | str | bytes | None = None


class Annotation(BaseModel):
    kind: Literal["declaration", "effect"]
    name: str
    location: LocationData


class TransformResult(BaseModel):
    code: str
    language: str
    annotations: list[Annotation] = []
