"""Matches configured service names against listed service ARNs."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from ..exceptions import PatternError, ResolutionError

logger = logging.getLogger(__name__)


def resolve_service(service_arns: Sequence[str], service_name: str) -> str:
    """Return the first ARN in *service_arns* matched by *service_name*.

    *service_name* is compiled as a regular expression and searched
    (unanchored) in each ARN, so both a literal name such as ``"web"``
    and a pattern such as ``"web-(blue|green)$"`` are accepted.

    Raises:
        PatternError: *service_name* is not a valid regular expression.
        ResolutionError: No ARN matches.
    """
    try:
        regex = re.compile(service_name)
    except re.error as e:
        raise PatternError(service_name, str(e)) from e

    for arn in service_arns:
        if regex.search(arn):
            return arn

    logger.error("no service matching %s found", service_name)
    raise ResolutionError(service_name)
