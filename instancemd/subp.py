# This file is part of instancemd. See LICENSE file for license information.
"""Common utility functions for interacting with subprocess."""

import logging
import os
import subprocess
from collections import namedtuple
from errno import ENOEXEC

LOG = logging.getLogger(__name__)

SubpResult = namedtuple("SubpResult", ["stdout", "stderr"])


class ProcessExecutionError(IOError):
    MESSAGE_TMPL = (
        "%(description)s\n"
        "Command: %(cmd)s\n"
        "Exit code: %(exit_code)s\n"
        "Reason: %(reason)s\n"
        "Stdout: %(stdout)s\n"
        "Stderr: %(stderr)s"
    )
    empty_attr = "-"

    def __init__(
        self,
        stdout=None,
        stderr=None,
        exit_code=None,
        cmd=None,
        description=None,
        reason=None,
        errno=None,
    ):
        self.cmd = cmd or self.empty_attr
        if exit_code is None:
            exit_code = self.empty_attr
        self.exit_code = exit_code
        self.stdout = stdout if stdout else self.empty_attr
        self.stderr = stderr if stderr else self.empty_attr
        self.reason = reason or self.empty_attr
        if errno:
            self.errno = errno

        if not description:
            if not exit_code and errno == ENOEXEC:
                description = "Exec format error. Missing #! in script?"
            else:
                description = "Unexpected error while running command."
        self.description = description

        message = self.MESSAGE_TMPL % {
            "description": self.description,
            "cmd": self.cmd,
            "exit_code": self.exit_code,
            "reason": self.reason,
            "stdout": self.stdout,
            "stderr": self.stderr,
        }
        IOError.__init__(self, message)


def subp(args, *, rcs=None, capture=True, update_env=None, decode="replace"):
    """Run a subprocess.

    :param args: command to run in a list. [cmd, arg1, arg2...]
    :param rcs: a list of allowed return codes. If subprocess exits with a
        value not in this list, a ProcessExecutionError will be raised. By
        default, rcs is [0].
    :param capture: boolean indicating if output should be captured.
    :param update_env: update the environment of the subprocess with the
        given dictionary.
    :param decode: how to decode output: False for bytes, otherwise the
        'errors' argument passed to bytes.decode.

    :return: SubpResult(stdout, stderr)
    """
    if rcs is None:
        rcs = [0]

    env = None
    if update_env:
        env = os.environ.copy()
        env.update(update_env)

    LOG.debug("Running command %s with allowed return codes %s", args, rcs)
    try:
        sp = subprocess.run(
            args,
            stdout=subprocess.PIPE if capture else None,
            stderr=subprocess.PIPE if capture else None,
            stdin=subprocess.DEVNULL,
            env=env,
            check=False,
        )
    except OSError as e:
        raise ProcessExecutionError(
            cmd=args,
            reason=e,
            errno=e.errno,
            stdout="-" if decode else b"-",
            stderr="-" if decode else b"-",
        ) from e

    out, err = sp.stdout, sp.stderr
    if decode:
        if isinstance(out, bytes):
            out = out.decode(errors=decode)
        if isinstance(err, bytes):
            err = err.decode(errors=decode)

    if sp.returncode not in rcs:
        raise ProcessExecutionError(
            stdout=out, stderr=err, exit_code=sp.returncode, cmd=args
        )
    return SubpResult(out, err)
