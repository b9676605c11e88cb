"""Logging and denomination catalog configuration.

Environment variables:
    POS_LOG_LEVEL: logging level name (default: INFO)
    POS_DENOMINATIONS_FILE: JSON denomination catalog; the FCFA catalog is
        used when unset
"""

import json
import logging
import os
from typing import Optional

import structlog

from .change import DEFAULT_DENOMINATIONS, Denomination, DenominationKind, validate_catalog
from .errors import InvalidDenominationCatalog

DEFAULT_LOG_LEVEL = "INFO"


def get_log_level() -> int:
    """Resolve POS_LOG_LEVEL to a numeric logging level."""
    name = os.environ.get("POS_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        return logging.INFO
    return level


def configure_logging(level: Optional[int] = None) -> None:
    """Configure structlog with JSON rendering and ISO timestamps."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            get_log_level() if level is None else level
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
    )


def denomination_from_dict(d: dict) -> Denomination:
    try:
        return Denomination(
            face_value=d["face_value"],
            kind=DenominationKind(str(d.get("kind", "COIN")).upper()),
            label=str(d.get("label", d["face_value"])),
        )
    except (KeyError, ValueError) as e:
        raise InvalidDenominationCatalog(f"invalid denomination entry {d!r}: {e}") from e


def load_denominations(path: Optional[str] = None) -> tuple:
    """Load the denomination catalog.

    Reads path, or POS_DENOMINATIONS_FILE when path is None. Falls back to
    the default catalog when neither is set. File format:

        {"denominations": [{"face_value": 500, "kind": "COIN", "label": "500"}]}
    """
    path = path or os.environ.get("POS_DENOMINATIONS_FILE")
    if not path:
        return DEFAULT_DENOMINATIONS

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    catalog = tuple(denomination_from_dict(d) for d in data.get("denominations", []))
    validate_catalog(catalog)
    structlog.get_logger().info("denominations_loaded", path=path, count=len(catalog))
    return catalog
