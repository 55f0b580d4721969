"""Running external commands and logging what they did."""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from typing import IO, Any, Mapping, Sequence

_FEW = 64


@dataclass
class Command:
    """An external command to run, with its working directory and environment.

    stdin may be bytes or a file object; stdout and stderr may be file objects.
    None means the null device, except that captured streams are captured.
    """

    args: Sequence[str]
    dir: str | None = None
    env: Mapping[str, str] | None = None
    stdin: bytes | IO[Any] | None = None
    stdout: IO[Any] | None = None
    stderr: IO[Any] | None = None

    @property
    def path(self) -> str:
        """The resolved path of the program, or its name if not found."""
        if not self.args:
            return ""
        return shutil.which(self.args[0]) or self.args[0]

    def log_fields(self) -> dict[str, Any]:
        """Return the fields that describe this command in a log record."""
        fields: dict[str, Any] = {}
        if self.path:
            fields["path"] = self.path
        if self.args is not None:
            fields["args"] = list(self.args)
        if self.dir:
            fields["dir"] = self.dir
        if self.env is not None:
            fields["env"] = [f"{key}={value}" for key, value in self.env.items()]
        return fields


def exit_error_fields(err: BaseException | None) -> dict[str, Any]:
    """Return log fields describing a failed process, if err is one."""
    if not isinstance(err, subprocess.CalledProcessError):
        return {}
    fields: dict[str, Any] = {}
    if err.returncode > 0:
        fields["exitCode"] = err.returncode
    elif err.returncode < 0:
        fields["signal"] = -err.returncode
    if err.stderr is not None:
        fields["stderr"] = err.stderr
    return fields


def first_few_bytes(data: bytes) -> bytes:
    """Return the first few bytes of data, marking any truncation with '...'."""
    if len(data) > _FEW:
        return data[:_FEW] + b"..."
    return data


def _execute(cmd: Command, stdout: Any, stderr: Any) -> subprocess.CompletedProcess:
    stdin: Any
    input_data: bytes | None = None
    if isinstance(cmd.stdin, (bytes, bytearray)):
        stdin = None
        input_data = bytes(cmd.stdin)
    elif cmd.stdin is None:
        stdin = subprocess.DEVNULL
    else:
        stdin = cmd.stdin
    kwargs: dict[str, Any] = {
        "cwd": cmd.dir,
        "env": dict(cmd.env) if cmd.env is not None else None,
        "stdout": stdout,
        "stderr": stderr,
    }
    if input_data is not None:
        kwargs["input"] = input_data
    else:
        kwargs["stdin"] = stdin
    result = subprocess.run(list(cmd.args), check=False, **kwargs)
    if result.returncode != 0:
        raise subprocess.CalledProcessError(
            result.returncode, list(cmd.args), result.stdout, result.stderr
        )
    return result


def _log_error(logger: logging.Logger, msg: str, cmd: Command, err: BaseException,
               extra: Mapping[str, Any]) -> None:
    fields = cmd.log_fields()
    fields["error"] = str(err)
    fields.update(exit_error_fields(err))
    fields.update(extra)
    logger.error(msg, extra={"fields": fields})


def log_cmd_combined_output(logger: logging.Logger, cmd: Command) -> bytes:
    """Run cmd, log the result, and return its combined stdout and stderr.

    Raises subprocess.CalledProcessError (carrying the output) on failure.
    """
    try:
        result = _execute(cmd, subprocess.PIPE, subprocess.STDOUT)
    except subprocess.CalledProcessError as err:
        _log_error(logger, "CombinedOutput", cmd, err, {"combinedOutput": err.output})
        raise
    except OSError as err:
        _log_error(logger, "CombinedOutput", cmd, err, {"combinedOutput": b""})
        raise
    fields = cmd.log_fields()
    fields["combinedOutput"] = first_few_bytes(result.stdout)
    logger.debug("CombinedOutput", extra={"fields": fields})
    return result.stdout


def log_cmd_output(logger: logging.Logger, cmd: Command) -> bytes:
    """Run cmd, log the result, and return its stdout.

    Raises subprocess.CalledProcessError (carrying output and stderr) on failure.
    """
    stderr = cmd.stderr if cmd.stderr is not None else subprocess.PIPE
    try:
        result = _execute(cmd, subprocess.PIPE, stderr)
    except subprocess.CalledProcessError as err:
        _log_error(logger, "Output", cmd, err, {"output": err.output})
        raise
    except OSError as err:
        _log_error(logger, "Output", cmd, err, {"output": b""})
        raise
    fields = cmd.log_fields()
    fields["output"] = first_few_bytes(result.stdout)
    logger.debug("Output", extra={"fields": fields})
    return result.stdout


def log_cmd_run(logger: logging.Logger, cmd: Command) -> None:
    """Run cmd and log the result.

    Raises subprocess.CalledProcessError or OSError on failure.
    """
    stdout = cmd.stdout if cmd.stdout is not None else subprocess.DEVNULL
    stderr = cmd.stderr if cmd.stderr is not None else subprocess.DEVNULL
    try:
        _execute(cmd, stdout, stderr)
    except (subprocess.CalledProcessError, OSError) as err:
        _log_error(logger, "Run", cmd, err, {})
        raise
    logger.debug("Run", extra={"fields": cmd.log_fields()})