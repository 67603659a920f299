"""Async-friendly subprocess helpers.

We prefer `subprocess.run()` executed via `asyncio.to_thread()` instead of
`asyncio.create_subprocess_exec()` since some runtime environments have flaky
child watchers that can cause `.wait()`/`.communicate()` to hang.
"""

from __future__ import annotations

import asyncio
import subprocess
from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True)
class RunResult:
    args: tuple[str, ...]
    returncode: int
    stdout: bytes
    stderr: bytes

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def stderr_text(self, *, limit: int | None = 4000) -> str:
        text = self.stderr.decode(errors="ignore").strip()
        if limit is not None and len(text) > limit:
            return text[-limit:]
        return text


async def run_subprocess(
    args: Sequence[str],
    *,
    capture_output: bool = True,
    timeout_s: float | None = None,
) -> RunResult:
    """Run a command in a worker thread and return its exit status and output.

    Raises:
        FileNotFoundError: If the executable does not exist.
        subprocess.TimeoutExpired: If `timeout_s` elapses.
    """
    argv = tuple(str(a) for a in args)

    def _run() -> subprocess.CompletedProcess[bytes]:
        return subprocess.run(
            list(argv),
            stdout=subprocess.PIPE if capture_output else subprocess.DEVNULL,
            stderr=subprocess.PIPE if capture_output else subprocess.DEVNULL,
            check=False,
            timeout=timeout_s,
        )

    cp = await asyncio.to_thread(_run)
    return RunResult(
        args=argv,
        returncode=int(cp.returncode),
        stdout=cp.stdout or b"",
        stderr=cp.stderr or b"",
    )
