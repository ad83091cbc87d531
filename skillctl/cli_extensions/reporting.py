"""Shared rendering of operation results for the CLI commands."""

from skillctl.core import BatchReport, LinkStatus
from skillctl.output import MessageType, VerbosityLevel, message

_LINK_LABELS = {
    LinkStatus.LINKED: ("linked", MessageType.SUCCESS),
    LinkStatus.REMOVED: ("removed", MessageType.SUCCESS),
    LinkStatus.ABSENT: ("no link", MessageType.NORMAL),
    LinkStatus.SKIPPED_NO_DIR: ("skipped, no skills directory", MessageType.WARNING),
    LinkStatus.SKIPPED_NOT_SYMLINK: ("skipped, not a symlink", MessageType.WARNING),
    LinkStatus.ERROR: ("failed", MessageType.ERROR),
}


def short_sha(sha: str) -> str:
    return sha[:7]


def show_link_outcomes(report: BatchReport) -> None:
    """Print one line per link outcome.

    Successful outcomes are only shown with ``-v``; problems always are.
    """
    for outcome in report:
        label, msg_type = _LINK_LABELS.get(outcome.status, (outcome.status, MessageType.NORMAL))
        level = VerbosityLevel.VERBOSE if outcome.ok else VerbosityLevel.ALWAYS
        detail = f" ({outcome.detail})" if outcome.detail and not outcome.ok else ""
        message(f"  {outcome.skill} @ {outcome.agent}: {label}{detail}", msg_type, level)

    if report.failures:
        message(
            f"{len(report.failures)} of {len(report)} link operation(s) did not succeed",
            MessageType.WARNING,
            VerbosityLevel.ALWAYS,
        )
