"""Mock directive scanning.

A test file declares which of its dependencies must be mocked with a
line-oriented ``@mock <specifier>`` token, usually inside a comment::

    # @mock .math
    from .math import add

The scan is a plain pattern match over the raw text. The source is never
parsed or executed, so directives are found even in files the sandbox could
not evaluate yet.
"""

from __future__ import annotations

import asyncio
import logging
import re

from isotest.domain.errors import DirectiveParseError

from .resolver import IdentifierResolver, is_valid_specifier

logger = logging.getLogger(__name__)

# "@mock" as a whole token, followed by whitespace or end of line
DIRECTIVE_PATTERN = re.compile(r"(?<![\w@.])@mock(?=\s|$)[ \t]*(?P<specifier>\S*)")


def find_mock_specifiers(source_text: str, identifier: str) -> list[str]:
    """Return the distinct directive specifiers in ``source_text``, in order.

    Raises:
        DirectiveParseError: If a directive has no specifier or a malformed one.
    """
    specifiers: dict[str, None] = {}
    for line_number, line in enumerate(source_text.splitlines(), start=1):
        for match in DIRECTIVE_PATTERN.finditer(line):
            specifier = match["specifier"]
            if not is_valid_specifier(specifier):
                raise DirectiveParseError(identifier, line_number, match[0].strip())
            specifiers[specifier] = None
    return list(specifiers)


async def scan_mock_directives(
    source_text: str, self_identifier: str, resolver: IdentifierResolver
) -> frozenset[str]:
    """Return the identifiers that must be mocked for the module ``self_identifier``.

    Args:
        source_text: Raw text of the module.
        self_identifier: Identifier of the module; directive specifiers are
            resolved against it.
        resolver: Resolver used to canonicalize each specifier.

    Returns:
        frozenset[str]: The mock set. Empty when the text has no directives.

    Raises:
        DirectiveParseError: If a directive is malformed.
        ResolutionError: If a directive names a module that cannot be resolved.
    """
    specifiers = find_mock_specifiers(source_text, self_identifier)
    identifiers = await asyncio.gather(
        *(resolver.resolve(specifier, self_identifier) for specifier in specifiers)
    )
    if identifiers:
        logger.debug("Mock set for %s: %s", self_identifier, sorted(identifiers))
    return frozenset(identifiers)
