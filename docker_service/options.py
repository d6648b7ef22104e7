"""Translate a declarative option mapping into ``docker run`` argument tokens.

A token is either a bare flag (``-d``) or a flag followed by its value in a
single string (``-p 4444:4444``), mirroring how the options read on a
command line.
"""

from __future__ import annotations

from typing import List, Mapping, Sequence, Union

from docker_service.models import OptionValue


def option_flag(name: str) -> str:
    return f"-{name}" if len(name) == 1 else f"--{name}"


def serialize_option(name: str, value: OptionValue) -> Union[str, List[str]]:
    """Serialize a single option.

    ``True`` yields the flag alone, a string yields ``"<flag> <value>"`` and
    a sequence yields one ``"<flag> <item>"`` token per element, in order.
    ``False`` is not handled here; callers drop such entries first.
    """
    flag = option_flag(name)
    if value is True:
        return flag
    if isinstance(value, str):
        return f"{flag} {value}"
    if isinstance(value, Sequence):
        return [f"{flag} {item}" for item in value]
    raise TypeError(f"Unsupported value for option {name!r}: {value!r}")


def serialize_options(options: Mapping[str, OptionValue]) -> List[str]:
    tokens: List[str] = []
    for name, value in options.items():
        serialized = serialize_option(name, value)
        if isinstance(serialized, list):
            tokens.extend(serialized)
        else:
            tokens.append(serialized)
    return tokens
