import re

import structlog

LOGGER = structlog.get_logger(__name__)

SEPARATOR = "/"

_REPEATED = re.compile(f"{re.escape(SEPARATOR)}{{2,}}")


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


def compose_key(name: str, extension: str = "", prefix: str | None = None) -> str:
    """Build the storage key ``{prefix/}{name}{.extension}``.

    Runs of separators inside the prefix collapse to one and the prefix ends
    with exactly one separator. Leading separators on ``name`` are dropped
    when a prefix is present, so the join never doubles. The rest of
    ``name`` is kept as given.
    """
    if _blank(prefix):
        path = ""
    else:
        path = _REPEATED.sub(SEPARATOR, prefix).rstrip(SEPARATOR) + SEPARATOR
        name = name.lstrip(SEPARATOR)
    suffix = "" if _blank(extension) else f".{extension}"
    key = f"{path}{name}{suffix}"
    LOGGER.debug("compose_key", name=name, extension=extension, prefix=prefix, key=key)
    return key


def listing_prefix(name: str = "", prefix: str | None = None) -> str:
    """Prefix to list when enumerating ``name`` as a sub scope of ``prefix``."""
    if _blank(prefix):
        return "" if _blank(name) else name
    base = prefix.rstrip(SEPARATOR) + SEPARATOR
    if _blank(name):
        return base
    return base + name
