"""Locate a compiled pattern's literal segments in an input and slice out captures."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from core.scan.models import CaptureGroup, CompiledPattern, Segment, Verb
from core.utils.errors import (
    EmptyCaptureError,
    InternalInconsistencyError,
    MultipleMatchesError,
    NoMatchError,
)

logger = logging.getLogger("unprintf.scan")


def capture(pattern: CompiledPattern, text: str) -> list[CaptureGroup]:
    """Run occurrence search, alignment and partitioning for one input."""

    occurrences = find_occurrences(pattern.segments, text)
    alignment = resolve_alignment(pattern.segments, occurrences)
    return partition_captures(pattern, alignment, text)


def find_occurrences(segments: Sequence[Segment], text: str) -> list[list[int]]:
    """Return every non-overlapping, leftmost-first offset of each segment in ``text``."""

    found: list[list[int]] = []
    for segment in segments:
        starts: list[int] = []
        cursor = 0
        while cursor <= len(text):
            start = text.find(segment.text, cursor)
            if start < 0:
                break
            starts.append(start)
            cursor = start + len(segment.text)

        if not starts:
            raise NoMatchError(
                f"input does not match format: could not find substring '{segment.text}' in '{text}'"
            )
        found.append(starts)

    return found


def resolve_alignment(segments: Sequence[Segment], occurrences: Sequence[Sequence[int]]) -> list[int]:
    """Pick the single in-order set of segment offsets that matches the format.

    Every occurrence of the last segment anchors a candidate chain. Walking the
    earlier segments backward, each one contributes its latest occurrence that
    ends strictly before the chain's current earliest offset, leaving room for
    the verbs between them. Only chains holding one offset per segment count.

    Raises:
        NoMatchError: when no complete chain exists.
        MultipleMatchesError: when more than one complete chain exists.
    """

    if not segments:
        return []

    chains: list[list[int]] = []
    for anchor in occurrences[-1]:
        chain = [anchor]
        for index in range(len(segments) - 2, -1, -1):
            earliest = chain[-1]
            length = len(segments[index].text)
            for start in reversed(occurrences[index]):
                if start + length < earliest:
                    chain.append(start)
                    break
            else:
                break

        if len(chain) == len(segments):
            chains.append(chain)

    if len(chains) > 1:
        raise MultipleMatchesError(
            f"input matches format more than once: found {len(chains)}; need 1"
        )
    if not chains:
        raise NoMatchError()

    alignment = sorted(chains[0])
    logger.debug("resolved alignment %s", alignment)
    return alignment


def partition_captures(
    pattern: CompiledPattern, alignment: Sequence[int], text: str
) -> list[CaptureGroup]:
    """Slice ``text`` into the capture groups bounded by the aligned segments."""

    segments = pattern.segments
    verbs = pattern.verbs
    groups: list[CaptureGroup] = []

    if not alignment:
        groups.append(CaptureGroup(text=text, verbs=list(verbs)))
        return _checked(groups)

    first = segments[0]
    if pattern.begins_with_verb:
        substr = text[: alignment[0]]
        if not substr:
            raise EmptyCaptureError(
                f"expected capture at start of input for leading verb '{verbs[0]}'"
            )
        groups.append(CaptureGroup(text=substr, verbs=_verbs_between(verbs, None, first)))

    for index in range(len(alignment) - 1):
        segment = segments[index]
        next_segment = segments[index + 1]
        substr = text[alignment[index] + len(segment.text) : alignment[index + 1]]
        if not substr:
            raise InternalInconsistencyError(
                f"bug: no string to capture between matching segments '{segment.text}' "
                f"and '{next_segment.text}', so pattern should not have matched"
            )
        groups.append(
            CaptureGroup(text=substr, verbs=_verbs_between(verbs, segment, next_segment))
        )

    last = segments[-1]
    if pattern.ends_with_verb:
        substr = text[alignment[-1] + len(last.text) :]
        if not substr:
            raise EmptyCaptureError(
                f"expected capture at end of input for final verb '{verbs[-1]}'"
            )
        groups.append(CaptureGroup(text=substr, verbs=_verbs_between(verbs, last, None)))

    return _checked(groups)


def _verbs_between(
    verbs: Sequence[Verb], after: Segment | None, before: Segment | None
) -> list[Verb]:
    return [
        verb
        for verb in verbs
        if (after is None or verb.start > after.start)
        and (before is None or verb.start < before.start)
    ]


def _checked(groups: list[CaptureGroup]) -> list[CaptureGroup]:
    for group in groups:
        if not group.verbs:
            raise InternalInconsistencyError(
                f"bug: no verbs assigned to captured substring '{group.text}'"
            )
    return groups
