"""Typed output slots filled by a scan."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from functools import partial
from typing import Any, ClassVar

from core.scan.models import VerbKind


@dataclass
class Target:
    """Mutable slot holding one converted value."""

    kind: ClassVar[VerbKind]
    value: Any = None

    @property
    def type_name(self) -> str:
        return self.kind.name.lower()


@dataclass
class BoolTarget(Target):
    kind: ClassVar[VerbKind] = VerbKind.BOOL
    value: bool = False

    @property
    def type_name(self) -> str:
        return "bool"


@dataclass
class StrTarget(Target):
    kind: ClassVar[VerbKind] = VerbKind.STRING
    value: str = ""

    @property
    def type_name(self) -> str:
        return "str"


@dataclass
class IntTarget(Target):
    """Integer slot sized to a fixed bit width, signed or unsigned."""

    kind: ClassVar[VerbKind] = VerbKind.INT
    value: int = 0
    bits: int = 64
    signed: bool = True

    def __post_init__(self) -> None:
        if self.bits not in _INT_BITS:
            raise ValueError(f"Unsupported integer width: {self.bits}")

    @property
    def min_value(self) -> int:
        return -(1 << (self.bits - 1)) if self.signed else 0

    @property
    def max_value(self) -> int:
        return (1 << (self.bits - 1)) - 1 if self.signed else (1 << self.bits) - 1

    @property
    def type_name(self) -> str:
        return f"{'' if self.signed else 'u'}int{self.bits}"


TargetFactory = Callable[[], Target]

_INT_BITS = (8, 16, 32, 64)

_TARGET_FACTORIES: dict[str, TargetFactory] = {
    "bool": BoolTarget,
    "str": StrTarget,
    "int": partial(IntTarget, bits=64, signed=True),
    "uint": partial(IntTarget, bits=64, signed=False),
}
for _bits in _INT_BITS:
    _TARGET_FACTORIES[f"int{_bits}"] = partial(IntTarget, bits=_bits, signed=True)
    _TARGET_FACTORIES[f"uint{_bits}"] = partial(IntTarget, bits=_bits, signed=False)


def make_target(name: str) -> Target:
    """Instantiate an empty target by type name, e.g. ``"int32"`` or ``"str"``."""

    try:
        factory = _TARGET_FACTORIES[name.strip().lower()]
    except KeyError as exc:
        raise ValueError(f"Unsupported target type: {name}") from exc
    return factory()


def make_targets(names: list[str]) -> list[Target]:
    return [make_target(name) for name in names]


def list_target_types() -> list[str]:
    """Return supported target type names in stable order."""

    return sorted(_TARGET_FACTORIES)
