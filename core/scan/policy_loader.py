"""Scan policy model and YAML loading."""

from __future__ import annotations

from pathlib import Path

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from core.scan.models import VerbKind


def _default_whitespace_stop() -> dict[VerbKind, bool]:
    return {VerbKind.BOOL: True, VerbKind.INT: True, VerbKind.STRING: False}


class ScanPolicy(BaseModel):
    """Tunable scan behavior.

    ``whitespace_stop`` decides, per verb kind, whether a capture ends at the
    first whitespace character. String captures span spaces by default so a
    single ``%s`` can read several words when a segment bounds it.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    whitespace_stop: dict[VerbKind, bool] = Field(default_factory=_default_whitespace_stop)

    @field_validator("whitespace_stop", mode="after")
    @classmethod
    def _merge_defaults(cls, value: dict[VerbKind, bool]) -> dict[VerbKind, bool]:
        # Kinds left out of a partial override keep their default.
        return {**_default_whitespace_stop(), **value}

    def stops_at_whitespace(self, kind: VerbKind) -> bool:
        return self.whitespace_stop.get(kind, _default_whitespace_stop().get(kind, True))


DEFAULT_POLICY = ScanPolicy()


def load_policy(path: Path | None = None) -> ScanPolicy:
    """Load and validate a scan policy from YAML."""

    policy_path = path or Path(__file__).with_name("policy.yaml")

    try:
        raw = yaml.safe_load(policy_path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ValueError(f"Policy file not found: {policy_path}") from exc
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in policy file: {policy_path}") from exc

    if not isinstance(raw, dict):
        raise ValueError(f"Policy file must contain a mapping: {policy_path}")

    try:
        return ScanPolicy.model_validate(_normalize_kind_keys(raw))
    except ValidationError as exc:
        raise ValueError(f"Invalid policy schema: {policy_path}") from exc


def _normalize_kind_keys(raw: dict[object, object]) -> dict[object, object]:
    # Accept kind names ("string") as well as verb characters ("s").
    normalized = dict(raw)
    value = normalized.get("whitespace_stop")
    if not isinstance(value, dict):
        return normalized

    by_name = {kind.name.lower(): kind.value for kind in VerbKind}
    normalized["whitespace_stop"] = {
        by_name.get(str(key).lower(), key): flag for key, flag in value.items()
    }
    return normalized
