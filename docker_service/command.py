from __future__ import annotations

import shlex
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

from docker_service.models import OptionValue
from docker_service.options import serialize_options


def _enabled(options: Optional[Mapping[str, OptionValue]]) -> Dict[str, OptionValue]:
    return {name: value for name, value in (options or {}).items() if value is not None and value is not False}


def build_run_command(
    image: str,
    cidfile: Union[str, Path],
    options: Optional[Mapping[str, OptionValue]] = None,
    command: Optional[str] = None,
    args: Optional[str] = None,
) -> List[str]:
    """Tokens for ``docker run --cidfile <path> --rm [options] <image> [command] [args]``."""
    tokens = ["docker", "run", "--cidfile", str(cidfile), "--rm"]
    tokens += serialize_options(_enabled(options))
    tokens.append(image)
    if command:
        tokens.append(command)
    if args:
        tokens.append(args)
    return tokens


def build_run_args(
    image: str,
    cidfile: Union[str, Path],
    options: Optional[Mapping[str, OptionValue]] = None,
    command: Optional[str] = None,
    args: Optional[str] = None,
) -> List[str]:
    """Argument vector for spawning the same command without a shell.

    Option tokens are split once between flag and value so values keep
    their spaces; ``command`` and ``args`` are split with shell rules.
    """
    argv = ["docker", "run", "--cidfile", str(cidfile), "--rm"]
    for token in serialize_options(_enabled(options)):
        argv += token.split(" ", 1)
    argv.append(image)
    if command:
        argv += shlex.split(command)
    if args:
        argv += shlex.split(args)
    return argv


def format_command(tokens: List[str]) -> str:
    return " ".join(tokens)
