"""Output mode selection for ServiceResult.

The CLI renders results for humans (Rich), for scripts (``--quiet``), or
for machines (``--json``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from meetgraph.services.result import ServiceResult


@dataclass(frozen=True)
class OutputSettings:
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


def format_result(result: ServiceResult, *, settings: OutputSettings | None = None) -> str:
    """Format a ServiceResult for display.

    Binary payloads (rendered images) are never included in the output.
    """
    opts = settings or OutputSettings()
    if opts.json_output:
        return result.model_dump_json(indent=2, exclude={"data": {"image"}})

    from meetgraph.output.renderers import render_quiet, render_result

    if opts.quiet:
        return render_quiet(result)
    return render_result(result, verbose=opts.verbose)
