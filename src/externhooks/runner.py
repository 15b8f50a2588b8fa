# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Run an external hook program and translate its exit status into a decision.

The child receives one ``<from> <to> <ref>`` line per ref change on stdin,
followed by EOF. Its stdout and stderr are merged and captured up to
:data:`~externhooks.constants.OUTPUT_LIMIT_BYTES`; anything beyond that is
read and discarded so the child never blocks on a full pipe.
"""

from __future__ import annotations

import logging
import os
import signal

# Bandit: subprocess usage is intentional; argv lists are passed without a shell.
import subprocess  # nosec B404
import threading
import time
from collections.abc import Iterable
from contextlib import suppress
from dataclasses import dataclass, field
from typing import IO, Final, cast

from .constants import (
    INTERNAL_ERROR_DETAIL,
    INTERNAL_ERROR_SUMMARY,
    NO_DETAILS_MESSAGE,
    OUTPUT_LIMIT_BYTES,
    READ_CHUNK_SIZE,
    TIMEOUT_DETAIL,
    TRUNCATION_NOTICE,
)
from .models import HookResult, ProcessSpec, RefChange

LOGGER = logging.getLogger(__name__)

_POLL_INTERVAL: Final[float] = 0.05
_KILL_JOIN_TIMEOUT: Final[float] = 5.0


def encode_ref_changes(ref_changes: Iterable[RefChange]) -> bytes:
    """Return the stdin payload for ``ref_changes`` in the given order."""

    return b"".join(change.to_line().encode("utf-8") for change in ref_changes)


@dataclass(slots=True)
class OutputCollector:
    """Accumulate child output up to ``limit`` bytes."""

    limit: int = OUTPUT_LIMIT_BYTES
    _buffer: bytearray = field(default_factory=bytearray)
    _truncated: bool = False

    def feed(self, chunk: bytes) -> None:
        """Keep as much of ``chunk`` as the cap allows."""

        room = self.limit - len(self._buffer)
        if room > 0:
            self._buffer += chunk[:room]
        if len(chunk) > room:
            self._truncated = True

    def drain(self, stream: IO[bytes]) -> None:
        """Read ``stream`` to EOF, feeding every chunk."""

        while chunk := stream.read(READ_CHUNK_SIZE):
            self.feed(chunk)

    @property
    def truncated(self) -> bool:
        return self._truncated

    def text(self) -> str:
        """Return the captured output, with the truncation notice when capped."""

        text = bytes(self._buffer).decode("utf-8", errors="replace")
        if self._truncated:
            text += TRUNCATION_NOTICE
        return text


class _StreamTask(threading.Thread):
    """Daemon thread recording the exception that ended its work."""

    def __init__(self, name: str) -> None:
        super().__init__(name=name, daemon=True)
        self.error: OSError | None = None


class _InputWriter(_StreamTask):
    def __init__(self, stream: IO[bytes], payload: bytes) -> None:
        super().__init__("externhooks-stdin")
        self._stream = stream
        self._payload = payload

    def run(self) -> None:
        view = memoryview(self._payload)
        try:
            while view:
                written = self._stream.write(view)
                view = view[written or 0 :]
        except BrokenPipeError:
            LOGGER.debug("Hook exited before reading all ref changes")
        except OSError as exc:
            self.error = exc
        finally:
            with suppress(BrokenPipeError):
                self._stream.close()


class _OutputDrain(_StreamTask):
    def __init__(self, stream: IO[bytes], collector: OutputCollector) -> None:
        super().__init__("externhooks-stdout")
        self._stream = stream
        self._collector = collector

    def run(self) -> None:
        try:
            self._collector.drain(self._stream)
        except OSError as exc:
            self.error = exc
        finally:
            self._stream.close()


def internal_error() -> HookResult:
    """Return the rejection reported when the hook could not be run."""

    return HookResult.rejected(INTERNAL_ERROR_SUMMARY, INTERNAL_ERROR_DETAIL)


class HookRunner:
    """Execute hook programs following the ref-change stdin protocol."""

    def __init__(self, *, output_limit: int = OUTPUT_LIMIT_BYTES) -> None:
        self._output_limit = output_limit

    def run(
        self,
        spec: ProcessSpec,
        ref_changes: Iterable[RefChange],
        summary: str,
        *,
        cancel: threading.Event | None = None,
    ) -> HookResult:
        """Run ``spec`` and return the accept/reject decision.

        Args:
            spec: Command, working directory, extra environment and optional timeout.
            ref_changes: Ref changes written to stdin in order.
            summary: Headline of the rejection when the program exits nonzero.
            cancel: Optional event; setting it kills the program and rejects.

        Returns:
            HookResult: Accepted on exit status 0; otherwise rejected with
            ``summary`` and the captured output. Spawn and I/O failures,
            cancellation and timeouts are rejections too.

        Raises:
            KeyboardInterrupt: Propagated after the child has been killed.
        """

        env = {**os.environ, **spec.env}
        payload = encode_ref_changes(ref_changes)
        try:
            # Bandit: the command comes from validated hook settings; no shell is involved.
            process = subprocess.Popen(  # nosec B603
                list(spec.command),
                cwd=spec.cwd,
                env=env,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                bufsize=0,
                start_new_session=True,
            )
        except OSError:
            LOGGER.exception("Error running %s in %s", spec.command[0], spec.cwd)
            return internal_error()

        deadline = None if spec.timeout is None else time.monotonic() + spec.timeout
        collector = OutputCollector(limit=self._output_limit)
        writer = _InputWriter(cast(IO[bytes], process.stdin), payload)
        drain = _OutputDrain(cast(IO[bytes], process.stdout), collector)
        writer.start()
        drain.start()

        try:
            returncode = self._wait(process, deadline, cancel)
        except KeyboardInterrupt:
            self._kill(process, writer, drain)
            raise

        if returncode is None:
            self._kill(process, writer, drain)
            if cancel is not None and cancel.is_set():
                LOGGER.error("Hook %s in %s was cancelled", spec.command[0], spec.cwd)
                return internal_error()
            return _timed_out(spec, summary)

        for task in (writer, drain):
            task.join(timeout=_remaining(deadline))
        if writer.is_alive() or drain.is_alive():
            # Exited, but a leftover child still holds the output pipe open.
            self._kill(process, writer, drain)
            return _timed_out(spec, summary)

        for task in (writer, drain):
            if task.error is not None:
                LOGGER.error(
                    "Error running %s in %s: %s",
                    spec.command[0],
                    spec.cwd,
                    task.error,
                    exc_info=task.error,
                )
                return internal_error()

        LOGGER.debug("Hook %s exited with status %d", spec.command[0], returncode)
        if returncode == 0:
            return HookResult.accepted_result()
        detail = collector.text() or NO_DETAILS_MESSAGE
        return HookResult.rejected(summary, detail)

    @staticmethod
    def _wait(
        process: subprocess.Popen[bytes],
        deadline: float | None,
        cancel: threading.Event | None,
    ) -> int | None:
        """Block until ``process`` exits.

        Returns:
            int | None: Exit status, or ``None`` when cancelled or timed out.
        """

        if deadline is None and cancel is None:
            return process.wait()
        while True:
            try:
                return process.wait(timeout=_POLL_INTERVAL)
            except subprocess.TimeoutExpired:
                pass
            if cancel is not None and cancel.is_set():
                return None
            if deadline is not None and time.monotonic() >= deadline:
                return None

    @staticmethod
    def _kill(process: subprocess.Popen[bytes], *tasks: threading.Thread) -> None:
        # The child leads its own session, so this also reaches anything it spawned.
        with suppress(ProcessLookupError, PermissionError):
            os.killpg(process.pid, signal.SIGKILL)
        if process.poll() is None:
            process.kill()
        process.wait()
        for task in tasks:
            task.join(timeout=_KILL_JOIN_TIMEOUT)


def _remaining(deadline: float | None) -> float | None:
    return None if deadline is None else max(_POLL_INTERVAL, deadline - time.monotonic())


def _timed_out(spec: ProcessSpec, summary: str) -> HookResult:
    LOGGER.error("Hook %s in %s timed out after %ss", spec.command[0], spec.cwd, spec.timeout)
    return HookResult.rejected(summary, TIMEOUT_DETAIL.format(timeout=spec.timeout or 0.0))


__all__ = ["HookRunner", "OutputCollector", "encode_ref_changes", "internal_error"]
