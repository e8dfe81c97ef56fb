"""External build step that materializes generated companion files."""

from __future__ import annotations

import logging
import subprocess
import threading
from pathlib import Path
from typing import Callable, IO, Iterable, Sequence, cast

from .logging import get_logger


class BuildError(RuntimeError):
    """Raised when the build step fails, times out, or cannot be started."""

    def __init__(self, message: str, returncode: int | None = None) -> None:
        super().__init__(message)
        self.returncode = returncode


LineSink = Callable[[str], None]
Runner = Callable[..., int]


def _pump(stream: IO[str], sink: LineSink) -> None:
    for line in stream:
        text = line.rstrip("\r\n")
        if text:
            sink(text)


class BuildStep:
    """Runs the configured build command and forwards its output line by line."""

    def __init__(
        self,
        command: Sequence[str],
        *,
        timeout: float | None = None,
        runner: Runner | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.command = list(command)
        self.timeout = timeout
        self.logger = logger or get_logger("build")
        self._runner = runner or self._default_runner

    @property
    def enabled(self) -> bool:
        return bool(self.command)

    def run(self, cwd: Path) -> None:
        """Run the build to completion; raise :class:`BuildError` on failure."""
        if not self.enabled:
            self.logger.debug("No build command configured; skipping build step")
            return
        self.logger.debug("Running build command: %s", " ".join(self.command))
        try:
            returncode = self._runner(
                self.command,
                cwd=cwd,
                timeout=self.timeout,
                on_line=self.logger.info,
            )
        except FileNotFoundError as exc:
            raise BuildError(f"Build command not found: {self.command[0]}") from exc
        except subprocess.TimeoutExpired as exc:
            raise BuildError(f"Build command timed out after {exc.timeout:g}s") from exc
        if returncode != 0:
            raise BuildError(f"Build command exited with status {returncode}", returncode)

    @staticmethod
    def _default_runner(
        args: Iterable[str],
        *,
        cwd: Path,
        timeout: float | None,
        on_line: LineSink,
    ) -> int:
        process = subprocess.Popen(
            list(args),
            cwd=str(cwd),
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
        )
        stdout = cast(IO[str], process.stdout)
        reader = threading.Thread(target=_pump, args=(stdout, on_line), daemon=True)
        reader.start()
        try:
            returncode = process.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait()
            raise
        finally:
            reader.join(timeout=5)
            stdout.close()
        return returncode


__all__ = ["BuildError", "BuildStep"]
