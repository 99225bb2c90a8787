"""Verb registry: supported verb characters and their converters.

Each converter receives the slice of captured text offered for one verb and the
caller's target. It writes the converted value into the target and returns how
many characters of the slice it actually consumed, which may be fewer than it
was offered.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from types import MappingProxyType

from core.scan.models import VerbKind
from core.scan.targets import BoolTarget, IntTarget, StrTarget, Target
from core.utils.errors import ConversionError

Converter = Callable[[str, Target], int]

FLAG_CHARS = frozenset("#-. 0123456789")
BOOL_CHARS = frozenset("01truefalseTRUEFALSE")
INT_CHARS = frozenset("+-0123456789")

_BOOL_LITERALS: Mapping[str, bool] = MappingProxyType(
    {
        "1": True,
        "t": True,
        "T": True,
        "true": True,
        "TRUE": True,
        "True": True,
        "0": False,
        "f": False,
        "F": False,
        "false": False,
        "FALSE": False,
        "False": False,
    }
)


def is_flag(char: str) -> bool:
    return char in FLAG_CHARS


def is_supported_verb(char: str) -> bool:
    return char in _CONVERTERS


def verb_kind(char: str) -> VerbKind:
    return VerbKind(char)


def converter_for(kind: VerbKind) -> Converter:
    return _CONVERTERS[kind.value]


def list_supported_verbs() -> list[str]:
    return sorted(_CONVERTERS)


def convert_bool(text: str, target: Target) -> int:
    if not isinstance(target, BoolTarget):
        raise ConversionError(f"expected bool target, got {type(target).__name__}")

    literal = _leading_run(text, BOOL_CHARS)
    if not literal:
        raise ConversionError(f"expected one or more leading boolean characters, got '{text}'")

    try:
        value = _BOOL_LITERALS[literal]
    except KeyError as exc:
        raise ConversionError(f"error converting '{literal}' to bool: invalid syntax") from exc

    target.value = value
    return len(literal)


def convert_string(text: str, target: Target) -> int:
    if not isinstance(target, StrTarget):
        raise ConversionError(f"expected str target, got {type(target).__name__}")

    target.value = text
    return len(text)


def convert_int(text: str, target: Target) -> int:
    if not isinstance(target, IntTarget):
        raise ConversionError(f"expected integer target, got {type(target).__name__}")

    literal = _leading_run(text, INT_CHARS)
    if not literal:
        raise ConversionError(f"expected one or more leading numeric characters, got '{text}'")

    if not target.signed and literal[0] in "+-":
        raise ConversionError(
            f"error converting '{literal}' to {target.type_name}: invalid syntax"
        )

    try:
        value = int(literal, 10)
    except ValueError as exc:
        raise ConversionError(
            f"error converting '{literal}' to {target.type_name}: invalid syntax"
        ) from exc

    if not target.min_value <= value <= target.max_value:
        raise ConversionError(
            f"error converting '{literal}' to {target.type_name}: value out of range"
        )

    target.value = value
    return len(literal)


def _leading_run(text: str, alphabet: frozenset[str]) -> str:
    end = 0
    for char in text:
        if char not in alphabet:
            break
        end += 1
    return text[:end]


_CONVERTERS: Mapping[str, Converter] = MappingProxyType(
    {
        VerbKind.BOOL.value: convert_bool,
        VerbKind.INT.value: convert_int,
        VerbKind.STRING.value: convert_string,
    }
)
