"""Convert capture groups into typed values and store them in targets."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from core.scan.models import CaptureGroup
from core.scan.policy_loader import DEFAULT_POLICY, ScanPolicy
from core.scan.targets import Target
from core.scan.verbs import converter_for
from core.utils.errors import BadArgumentError, InternalInconsistencyError, ScanError

logger = logging.getLogger("unprintf.scan")


def assign_values(
    groups: Sequence[CaptureGroup],
    targets: Sequence[Target],
    policy: ScanPolicy = DEFAULT_POLICY,
) -> None:
    """Fill ``targets`` in order from the verbs of each capture group.

    Adjacent verbs in one group share its text: each verb reads from whatever
    the previous verb left unconsumed. Errors carry the index of the target
    being filled and stop the assignment; earlier targets stay written.
    """

    target_index = 0
    for group in groups:
        remaining = group.text
        for verb in group.verbs:
            try:
                if target_index >= len(targets):
                    raise InternalInconsistencyError(
                        f"bug: no target at index {target_index} for next verb '{verb}' "
                        f"and substring '{remaining}'"
                    )
                if not remaining:
                    raise BadArgumentError(
                        f"all of substring '{group.text}' consumed by prior adjacent verb(s), "
                        f"none left for next verb '{verb}'"
                    )

                remaining = remaining.lstrip()
                stop = len(remaining)
                if policy.stops_at_whitespace(verb.kind):
                    stop = _first_space(remaining, default=stop)
                max_width = verb.max_width
                if max_width is not None and max_width < stop:
                    stop = max_width

                consumed = converter_for(verb.kind)(remaining[:stop], targets[target_index])
            except ScanError as exc:
                error = exc.with_context(f"at index {target_index}")
                error.target_index = target_index
                raise error from exc

            logger.debug(
                "assigned %r to target %d from '%s'",
                targets[target_index].value,
                target_index,
                remaining[: min(consumed, stop)],
            )
            remaining = remaining[min(consumed, stop) :]
            target_index += 1


def _first_space(text: str, *, default: int) -> int:
    for index, char in enumerate(text):
        if char.isspace():
            return index
    return default
