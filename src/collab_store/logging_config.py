import logging
import sys

# Structured fields store code passes through `extra=`.
CONTEXT_FIELDS = ("collection", "doc_id", "version")

LOG_FORMAT = (
    "%(asctime)s %(levelname)s %(name)s %(message)s "
    + " ".join(f"{name}=%({name})s" for name in CONTEXT_FIELDS)
)

# Per-request access lines drown out store events at DEBUG.
_QUIET_LOGGERS = ("uvicorn.access",)


class _SafeExtraFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        for name in CONTEXT_FIELDS:
            if not hasattr(record, name):
                setattr(record, name, "-")
        return super().format(record)


def configure_logging(level: str | int = logging.INFO) -> None:
    """Install a stdout handler on the root logger unless one is already set up."""
    root = logging.getLogger()
    if root.handlers:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_SafeExtraFormatter(fmt=LOG_FORMAT))

    root.setLevel(level)
    root.addHandler(handler)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
