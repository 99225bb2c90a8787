"""Format string compiler.

A format is literal text interspersed with verbs of the form ``%`` + flags +
verb character, where ``%%`` stands for a literal percent sign. Compiling
splits it into the ordered verbs and the literal segments around them, e.g.
``my-%s-format-%s-rocks`` yields the segments ``my-``, ``-format-`` and
``-rocks`` while ``%d + %d = %d`` yields only `` + `` and `` = ``.
"""

from __future__ import annotations

import logging

from core.scan.models import PERCENT, CompiledPattern, Segment, Verb
from core.scan.verbs import is_flag, is_supported_verb, verb_kind
from core.utils.errors import BadArgumentError

logger = logging.getLogger("unprintf.scan")


def compile_format(format: str) -> CompiledPattern:
    """Compile ``format`` into its verbs and literal segments.

    Raises:
        BadArgumentError: for an empty format, an unsupported or unterminated
            verb, or two same-kind verbs with no literal text or width between them.
    """

    if not format:
        raise BadArgumentError("format must not be empty")

    verbs = _parse_verbs(format)
    segments = _parse_segments(format, verbs)
    pattern = CompiledPattern(format=format, verbs=tuple(verbs), segments=tuple(segments))

    logger.debug(
        "compiled format %r: verbs=%s segments=%s",
        format,
        [verb.text for verb in pattern.verbs],
        [segment.text for segment in pattern.segments],
    )
    return pattern


def unescape_format(text: str) -> str:
    return text.replace(PERCENT * 2, PERCENT)


def _parse_verbs(format: str) -> list[Verb]:
    verbs: list[Verb] = []
    seeking_verb = False
    flags: list[str] = []

    for index, char in enumerate(format):
        if not seeking_verb:
            if char == PERCENT:
                seeking_verb = True
            continue

        if char == PERCENT and not flags:
            seeking_verb = False
        elif is_flag(char):
            flags.append(char)
        elif is_supported_verb(char):
            verbs.append(
                Verb(
                    kind=verb_kind(char),
                    start=index - len(PERCENT) - len(flags),
                    flags=tuple(flags),
                )
            )
            seeking_verb = False
            flags = []
        else:
            raise BadArgumentError(f"unsupported verb '{PERCENT}{''.join(flags)}{char}'")

    if seeking_verb:
        raise BadArgumentError(f"unterminated verb '{PERCENT}{''.join(flags)}' at end of format")

    return verbs


def _parse_segments(format: str, verbs: list[Verb]) -> list[Segment]:
    # Segment offsets share the escaped coordinates of verb offsets so the
    # partitioner can compare the two directly.
    segments: list[Segment] = []
    cursor = 0
    previous: Verb | None = None

    for verb in verbs:
        literal = format[cursor : verb.start]
        if literal:
            segments.append(Segment(text=unescape_format(literal), start=cursor))
        elif previous is not None and previous.kind == verb.kind and previous.max_width is None:
            raise BadArgumentError(
                f"found consecutive instances of verb '{PERCENT}{verb.kind.value}' "
                "without a max width or intervening substring"
            )
        cursor = verb.start + len(verb.text)
        previous = verb

    if cursor < len(format):
        segments.append(Segment(text=unescape_format(format[cursor:]), start=cursor))

    return segments
