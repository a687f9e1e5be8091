"""
Data model for the layout analysis.

Wire keys follow the contract of the analysis service (Portuguese), Python
attributes are English. All models are frozen; list fields are tuples.
"""
import json
from dataclasses import dataclass, field
from typing import Any, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field


class _FrozenSection(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Branding(_FrozenSection):
    palette: tuple[str, ...] = Field(default=(), alias="paleta")
    typography: str = Field(default="", alias="tipografia")
    effects: tuple[str, ...] = Field(default=(), alias="efeitos")


class Elements(_FrozenSection):
    central_objects: tuple[str, ...] = Field(default=(), alias="objetosCentrais")
    visual_treatment: str = Field(default="", alias="tratamentoVisual")


class Information(_FrozenSection):
    headline: str = Field(default="", alias="headline")
    subheadline: str = Field(default="", alias="subheadline")
    cta: str = Field(default="", alias="cta")
    other_texts: tuple[str, ...] = Field(default=(), alias="outrosTextos")


class Layout(_FrozenSection):
    grid: str = Field(default="", alias="grid")
    alignment: str = Field(default="", alias="alinhamento")
    positioning: tuple[str, ...] = Field(default=(), alias="posicionamento")


class Materials(_FrozenSection):
    repository_suggestions: tuple[str, ...] = Field(default=(), alias="sugestoesRepositorio")


class AnalysisResult(_FrozenSection):
    """Structured description of branding, layout, copy and assets of an image."""

    branding: Branding = Field(default_factory=Branding, alias="branding")
    elements: Elements = Field(default_factory=Elements, alias="elementos")
    information: Information = Field(default_factory=Information, alias="informacoes")
    layout: Layout = Field(default_factory=Layout, alias="diagramacao")
    materials: Materials = Field(default_factory=Materials, alias="materiais")
    technical_explanation: str = Field(default="", alias="explicacao_tecnica")

    def to_payload(self) -> dict[str, Any]:
        """Wire-keyed plain dict (lists, not tuples)."""
        return json.loads(self.model_dump_json(by_alias=True))

    def to_json(self) -> str:
        """Canonical pretty-printed serialization."""
        return json.dumps(self.to_payload(), indent=2, ensure_ascii=False)


def _is_section(annotation) -> bool:
    return isinstance(annotation, type) and issubclass(annotation, BaseModel)


def _matches(annotation, value) -> bool:
    if annotation is str:
        return isinstance(value, str)
    # tuple[str, ...]
    if get_args(annotation):
        return isinstance(value, list) and all(isinstance(item, str) for item in value)
    return False


def _collect_valid(model_cls: type[BaseModel], data: Any, prefix: str, problems: list[str]) -> dict:
    """Keep only the values whose type matches the model; record the rest."""
    valid = {}
    for info in model_cls.model_fields.values():
        key = info.alias
        path = f"{prefix}{key}"
        if not isinstance(data, dict) or key not in data:
            problems.append(path)
            continue

        value = data[key]
        if _is_section(info.annotation):
            if not isinstance(value, dict):
                problems.append(path)
                continue
            valid[key] = _collect_valid(info.annotation, value, f"{path}.", problems)
        elif _matches(info.annotation, value):
            valid[key] = value
        else:
            problems.append(path)
    return valid


@dataclass(frozen=True)
class AnalysisOutcome:
    """
    Validated view over a decoded service reply.

    `complete` when every declared field was present with the right type;
    `partial` otherwise, with the offending dotted wire paths listed in
    `missing_fields`. Missing values fall back to empty defaults.
    """

    status: Literal["complete", "partial"]
    result: AnalysisResult
    missing_fields: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_complete(self) -> bool:
        return self.status == "complete"

    @classmethod
    def from_payload(cls, payload: dict) -> "AnalysisOutcome":
        problems: list[str] = []
        valid = _collect_valid(AnalysisResult, payload, "", problems)
        result = AnalysisResult.model_validate(valid)
        status = "partial" if problems else "complete"
        return cls(status=status, result=result, missing_fields=tuple(problems))


@dataclass(frozen=True)
class UploadedImage:
    """An image accepted for analysis. Lives only in UI state."""

    base64_data: str
    mime_type: str
    data_url: str
    filename: str = ""
