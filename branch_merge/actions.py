"""GitHub Actions runner I/O: inputs, step outputs and failure signalling.

Outputs go to the file named by GITHUB_OUTPUT using the delimiter form, so
values containing newlines are safe. Outside a runner they are printed as
``name=value`` lines.
"""

import os
import sys
import uuid
from pathlib import Path
from typing import Mapping, TextIO


def _env(env: Mapping[str, str] | None) -> Mapping[str, str]:
    return os.environ if env is None else env


def get_input(name: str, env: Mapping[str, str] | None = None) -> str:
    """Read action input ``name`` from INPUT_<NAME>; empty string if unset."""
    key = "INPUT_" + name.replace(" ", "_").upper()
    return _env(env).get(key, "").strip()


def escape_data(value: str) -> str:
    """Escape a workflow command message (``%``, CR, LF)."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def set_output(
    name: str,
    value: str,
    env: Mapping[str, str] | None = None,
    stream: TextIO | None = None,
) -> None:
    """Publish a step output."""
    output_file = _env(env).get("GITHUB_OUTPUT")
    if not output_file:
        print(f"{name}={value}", file=stream or sys.stdout)
        return
    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    with Path(output_file).open("a", encoding="utf-8") as fh:
        fh.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")


def set_failed(message: str, stream: TextIO | None = None) -> int:
    """Emit an ``::error::`` command and return the failing exit code."""
    print(f"::error::{escape_data(message)}", file=stream or sys.stdout)
    return 1
