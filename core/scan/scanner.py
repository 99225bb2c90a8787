"""Public scanning entry points: one-shot ``scan`` and the reusable ``Scanner``."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from functools import lru_cache
from typing import Any

from core.scan.assigner import assign_values
from core.scan.compiler import compile_format
from core.scan.matcher import capture, find_occurrences, partition_captures, resolve_alignment
from core.scan.models import (
    CaptureTrace,
    CompiledPattern,
    ScanTrace,
    SegmentTrace,
    VerbTrace,
)
from core.scan.policy_loader import DEFAULT_POLICY, ScanPolicy
from core.scan.targets import Target, make_targets
from core.utils.errors import BadArgumentError, ScanError

logger = logging.getLogger("unprintf.scan")

_COMPILE_CACHE_SIZE = 128


@lru_cache(maxsize=_COMPILE_CACHE_SIZE)
def compile_cached(format: str) -> CompiledPattern:
    """Compile ``format`` once per process; compiled patterns are immutable."""

    return compile_format(format)


def scan(
    text: str,
    format: str,
    targets: Sequence[Target],
    policy: ScanPolicy = DEFAULT_POLICY,
) -> None:
    """Capture typed values from ``text`` using ``format`` and store them in ``targets``.

    Targets may be partially written when an error is raised.
    """

    if not format:
        raise BadArgumentError("format must not be empty")
    if not text:
        raise BadArgumentError("input must not be empty")
    if not targets:
        raise BadArgumentError("one or more targets required")

    try:
        pattern = compile_cached(format)
    except ScanError as exc:
        raise exc.with_context("parsing format") from exc

    _scan_pattern(pattern, text, targets, policy)


def scan_values(
    text: str,
    format: str,
    target_types: Sequence[str],
    policy: ScanPolicy = DEFAULT_POLICY,
) -> list[Any]:
    """Scan into freshly built targets named by ``target_types`` and return their values."""

    targets = make_targets(list(target_types))
    scan(text, format, targets, policy)
    return [target.value for target in targets]


class Scanner:
    """Compiled format reusable across many inputs.

    The compiled pattern is read-only and every scan keeps its own working
    state, so one instance may be shared between threads.
    """

    def __init__(self, format: str, policy: ScanPolicy = DEFAULT_POLICY) -> None:
        try:
            self._pattern = compile_format(format)
        except ScanError as exc:
            raise exc.with_context("initializing scanner from format") from exc
        self._policy = policy

    @classmethod
    def from_pattern(cls, pattern: CompiledPattern, policy: ScanPolicy = DEFAULT_POLICY) -> Scanner:
        scanner = cls.__new__(cls)
        scanner._pattern = pattern
        scanner._policy = policy
        return scanner

    @property
    def pattern(self) -> CompiledPattern:
        return self._pattern

    @property
    def verb_count(self) -> int:
        return self._pattern.verb_count

    def scan(self, text: str, targets: Sequence[Target]) -> None:
        if not text:
            raise BadArgumentError("input must not be empty")
        _scan_pattern(self._pattern, text, targets, self._policy)

    def scan_values(self, text: str, target_types: Sequence[str]) -> list[Any]:
        targets = make_targets(list(target_types))
        self.scan(text, targets)
        return [target.value for target in targets]

    def explain(self, text: str) -> ScanTrace:
        """Trace how ``text`` is matched, stopping at the first failing step.

        The failure, if any, is recorded on the trace instead of raised.
        """

        pattern = self._pattern
        trace = ScanTrace(
            format=pattern.format,
            input=text,
            verbs=[
                VerbTrace(
                    verb=verb.text,
                    kind=verb.kind,
                    start=verb.start,
                    max_width=verb.max_width,
                )
                for verb in pattern.verbs
            ],
            segments=[
                SegmentTrace(text=segment.text, start=segment.start)
                for segment in pattern.segments
            ],
        )

        try:
            occurrences: list[list[int]] = []
            for segment, segment_trace in zip(pattern.segments, trace.segments):
                (starts,) = find_occurrences([segment], text)
                segment_trace.occurrences = list(starts)
                occurrences.append(starts)
            trace.alignment = resolve_alignment(pattern.segments, occurrences)
            groups = partition_captures(pattern, trace.alignment, text)
        except ScanError as exc:
            trace.error = f"{exc.code}: {exc.message}"
            return trace

        trace.captures = [
            CaptureTrace(text=group.text, verbs=[verb.text for verb in group.verbs])
            for group in groups
        ]
        return trace


def _scan_pattern(
    pattern: CompiledPattern,
    text: str,
    targets: Sequence[Target],
    policy: ScanPolicy,
) -> None:
    if len(targets) != pattern.verb_count:
        raise BadArgumentError(
            f"found {pattern.verb_count} verbs for {len(targets)} targets; count must match"
        )

    try:
        groups = capture(pattern, text)
    except ScanError as exc:
        raise exc.with_context("capturing from input") from exc

    try:
        assign_values(groups, targets, policy)
    except ScanError as exc:
        raise exc.with_context("assigning values") from exc

    logger.debug("scanned %d values with format %r", len(targets), pattern.format)
