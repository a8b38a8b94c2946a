"""Renderer — run Graphviz on a graph description and collect the image.

The child is fed through ``Popen.communicate``, which pumps stdin and
stdout concurrently, so large descriptions cannot deadlock on full pipe
buffers. Extra arguments come from chat users: they are split on
whitespace, passed as discrete argv entries (never through a shell), and
options that touch files or change the output format are refused.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence

logger = logging.getLogger(__name__)

# -o and -O write files, -l embeds a local file in the output, -T
# overrides the configured output format.
_FORBIDDEN_PREFIXES = ("-o", "-O", "-l", "-T")


class RenderError(Exception):
    """Base class for renderer failures."""


class RendererArgumentError(RenderError):
    """A caller-supplied renderer flag was refused."""


class RenderSpawnError(RenderError):
    """The renderer binary could not be started."""


class RenderTimeoutError(RenderError):
    """The renderer did not finish within the configured timeout."""


class RenderFailedError(RenderError):
    """The renderer exited with a non-zero status."""

    def __init__(self, returncode: int, stderr: str) -> None:
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip().splitlines()[0] if stderr.strip() else "no diagnostics"
        super().__init__(f"Renderer exited with status {returncode}: {detail}")


def split_extra_args(extra_args: str | Sequence[str] | None) -> list[str]:
    """Normalize caller-supplied flags into argv tokens.

    Raises:
        RendererArgumentError: A token would redirect output to a file.
    """
    if extra_args is None:
        return []
    tokens = extra_args.split() if isinstance(extra_args, str) else [str(t) for t in extra_args]
    for token in tokens:
        if token.startswith(_FORBIDDEN_PREFIXES):
            raise RendererArgumentError(f"Renderer flag not allowed: {token}")
    return tokens


class Renderer:
    """Invoke an external Graphviz-compatible binary."""

    def __init__(
        self,
        binary: str = "dot",
        *,
        output_format: str = "png",
        timeout: float | None = 30.0,
        strict: bool = True,
    ) -> None:
        self.binary = binary
        self.output_format = output_format
        self.timeout = timeout
        self.strict = strict

    def command(self, extra_args: str | Sequence[str] | None = None) -> list[str]:
        """Full argv for one invocation."""
        return [self.binary, f"-T{self.output_format}", *split_extra_args(extra_args)]

    def render(self, description: str, extra_args: str | Sequence[str] | None = None) -> bytes:
        """Render *description* and return the raw output bytes.

        Raises:
            RendererArgumentError: Refused extra flag.
            RenderSpawnError: Binary missing or not executable.
            RenderTimeoutError: Child killed after ``timeout`` seconds.
            RenderFailedError: Non-zero exit while ``strict`` is set.
        """
        argv = self.command(extra_args)
        logger.debug("Spawning renderer: %s", argv)
        try:
            proc = subprocess.Popen(
                argv,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as exc:
            raise RenderSpawnError(f"Cannot start renderer '{self.binary}': {exc}") from exc

        try:
            stdout, stderr = proc.communicate(description.encode("utf-8"), timeout=self.timeout)
        except subprocess.TimeoutExpired as exc:
            proc.kill()
            proc.communicate()
            raise RenderTimeoutError(
                f"Renderer '{self.binary}' timed out after {self.timeout}s"
            ) from exc

        diagnostics = stderr.decode("utf-8", errors="replace")
        if proc.returncode != 0:
            if self.strict:
                raise RenderFailedError(proc.returncode, diagnostics)
            logger.warning(
                "Renderer exited with status %s: %s", proc.returncode, diagnostics.strip()
            )
        elif diagnostics.strip():
            logger.debug("Renderer diagnostics: %s", diagnostics.strip())
        return stdout
