from __future__ import annotations

import re
from dataclasses import dataclass, field

from medstock.commands import parameters as P
from medstock.core.errors import InvalidValueSyntaxError, UnrecognizedParameterError

KNOWN_KEYS: tuple[str, ...] = (
    P.ID,
    P.NAME,
    P.PRICE,
    P.QUANTITY,
    P.EXPIRY_DATE,
    P.DESCRIPTION,
    P.MAX_QUANTITY,
    P.CUSTOMER_ID,
    P.STAFF,
    P.DATE,
    P.STOCK_ID,
    P.SORT,
    P.REVERSED_SORT,
)

_KEY_PATTERN = re.compile(
    r"(?:^|(?<=\s))(" + "|".join(sorted(KNOWN_KEYS, key=len, reverse=True)) + r")/",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class ParsedCommand:
    name: str
    parameters: dict[str, str] = field(default_factory=dict)


def parse_command(line: str) -> ParsedCommand:
    raw = line.strip()
    word, _, rest = raw.partition(" ")
    name = word.upper()
    rest = rest.strip()
    if not rest:
        return ParsedCommand(name=name)

    matches = list(_KEY_PATTERN.finditer(rest))
    leading_end = matches[0].start() if matches else len(rest)
    leading = rest[:leading_end].strip()
    if leading:
        token = leading.split()[0]
        raise UnrecognizedParameterError(f"parameter '{token}' is not recognised", field=token, value=leading)

    parameters: dict[str, str] = {}
    for idx, match in enumerate(matches):
        key = match.group(1).lower()
        end = matches[idx + 1].start() if idx + 1 < len(matches) else len(rest)
        value = rest[match.end() : end].strip()
        if key in parameters:
            raise InvalidValueSyntaxError(f"parameter '{key}' given more than once", field=key, value=value)
        parameters[key] = value
    return ParsedCommand(name=name, parameters=parameters)
