"""
Run the search process and capture its output under a line cap.

stdout is read line by line on the calling task while stderr is drained by a
separate task, so a process blocked on a full stderr pipe cannot stall the
stdout reader. Reaching the line cap kills the process; the lines read so far
are returned as a normal result.
"""

import asyncio
import logging
import subprocess
from typing import List, Optional, Sequence, Tuple

from ..errors import ExecError

logger = logging.getLogger(__name__)

DEFAULT_STREAM_LIMIT = 8 * 1024 * 1024
# Seconds to wait for a killed process to exit while unwinding
REAP_TIMEOUT = 5.0


async def _read_line(stream: asyncio.StreamReader) -> Tuple[bytes, bool]:
    """Next stdout line (b"" at EOF) and whether it overflowed the reader limit.

    An overflowing line is consumed up to and including its terminator so the
    following line starts cleanly.
    """
    overflowed = False
    while True:
        try:
            return await stream.readuntil(b"\n"), overflowed
        except asyncio.IncompleteReadError as e:
            return e.partial, overflowed
        except asyncio.LimitOverrunError as e:
            await stream.readexactly(e.consumed)
            overflowed = True


def _kill(process: asyncio.subprocess.Process) -> None:
    try:
        process.kill()
    except ProcessLookupError:
        # Exited between the last read and the kill
        pass


def resolve_outcome(
    stdout_text: str, stderr_text: str, returncode: Optional[int], killed: bool
) -> str:
    """Decide between success and ExecError once the process has finished.

    ripgrep exits 1 when nothing matched, so a non-zero exit is only a failure
    when it comes with error output, or with no output at all.
    """
    if stderr_text:
        raise ExecError(stderr_text.strip() or stderr_text, returncode=returncode)
    if stdout_text or killed or returncode == 0:
        return stdout_text
    raise ExecError(
        f"search process exited with code {returncode} and produced no output",
        returncode=returncode,
    )


async def run(
    binary_path: str,
    args: Sequence[str],
    max_lines: int,
    stream_limit: int = DEFAULT_STREAM_LIMIT,
) -> str:
    """Spawn binary_path with args and return its stdout text.

    Args:
        binary_path: Executable to run
        args: Argument vector (without the executable)
        max_lines: Lines of stdout read before the process is killed
        stream_limit: Longest single stdout line accepted

    Returns:
        Accumulated stdout, each line keeping its terminator

    Raises:
        ExecError: If the process cannot be spawned or reports an error
    """
    cmd = [str(binary_path), *args]
    logger.debug(f"Running search process: {' '.join(cmd)}")

    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdin=subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            limit=stream_limit,
        )
    except OSError as e:
        raise ExecError(f"failed to start {binary_path}: {e}") from e

    if process.stdout is None or process.stderr is None:
        _kill(process)
        raise ExecError(f"failed to capture output of {binary_path}")
    stderr_task = asyncio.create_task(process.stderr.read())

    output: List[str] = []
    line_count = 0
    killed = False
    try:
        while True:
            line, overflowed = await _read_line(process.stdout)
            if overflowed:
                logger.warning(
                    f"Discarded search output line longer than {stream_limit} bytes"
                )
                if line:
                    continue
            if not line:
                break
            output.append(line.decode("utf-8", errors="replace"))
            line_count += 1
            if line_count >= max_lines:
                logger.info(
                    f"Search output reached {max_lines} lines, stopping process"
                )
                killed = True
                _kill(process)
                # Unread output stays buffered; drain it so the pipe reaches EOF
                while await process.stdout.read(65536):
                    pass
                break

        stderr_bytes = await stderr_task
        returncode = await process.wait()
    except BaseException:
        _kill(process)
        stderr_task.cancel()
        try:
            await asyncio.wait_for(asyncio.shield(process.wait()), REAP_TIMEOUT)
        except (asyncio.TimeoutError, asyncio.CancelledError):
            logger.debug(f"Search process {process.pid} not reaped before unwinding")
        raise

    return resolve_outcome(
        "".join(output),
        stderr_bytes.decode("utf-8", errors="replace"),
        returncode,
        killed,
    )
