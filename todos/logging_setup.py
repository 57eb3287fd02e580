from __future__ import annotations

import logging
import sys
from pathlib import Path

_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


class _OwnHandlerMixin:
    """Marker: handlery instalowane przez setup_logging (żeby nie ruszać cudzych)."""


class _StreamHandler(_OwnHandlerMixin, logging.StreamHandler):
    pass


class _FileHandler(_OwnHandlerMixin, logging.FileHandler):
    pass


def setup_logging(level: str | int = logging.WARNING, log_file: str | Path | None = None) -> None:
    """
    Konfiguracja logowania:
    - konsola (stderr) na poziomie `level`,
    - opcjonalnie plik z pełnymi logami (DEBUG).

    Wołana raz na starcie CLI; ponowne wywołanie podmienia tylko własne handlery.
    """
    root = logging.getLogger()
    for h in list(root.handlers):
        if isinstance(h, _OwnHandlerMixin):
            root.removeHandler(h)
            h.close()

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    fmt = logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT)

    ch = _StreamHandler(sys.stderr)
    ch.setLevel(level)
    ch.setFormatter(fmt)
    root.addHandler(ch)

    lowest = level
    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = _FileHandler(str(log_file), encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(fmt)
        root.addHandler(fh)
        lowest = logging.DEBUG

    root.setLevel(lowest)

    # warnings.warn(...) -> logger 'py.warnings'
    logging.captureWarnings(True)
    # SQLAlchemy loguje sporo na INFO
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
