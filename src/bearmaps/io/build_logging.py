# io/build_logging.py
import json
import logging
import sys

from bearmaps.app.hooks import NoopHooks


def _default_json_logger(name="bearmaps", level="INFO"):
    logger = logging.getLogger(name)
    if not logger.handlers:
        h = logging.StreamHandler(sys.stdout)

        class _JsonFormatter(logging.Formatter):
            def format(self, record: logging.LogRecord) -> str:
                payload = {
                    "level": record.levelname,
                    "msg": record.getMessage(),
                    "logger": record.name,
                }
                extra = getattr(record, "extra", None)
                if isinstance(extra, dict):
                    payload.update(extra)
                return json.dumps(payload, default=str)

        h.setFormatter(_JsonFormatter())
        logger.addHandler(h)
        logger.setLevel(level)
    return logger


class MapLogging(NoopHooks):
    """
    Structured logs for graph builds and queries.
    Per-query lines (route, raster) are DEBUG unless a query fails.
    """

    def __init__(
        self,
        name: str = "bearmaps",
        level: str = "INFO",
        debug: bool = False,
        logger: logging.Logger | None = None,
    ):
        self.name, self.debug = name, debug
        self.log = logger or _default_json_logger(level=level)
        self.skipped = 0

    # --------------- Helpers -----------------------------

    def _emit(self, level: str, msg: str, **extra):
        self.log.log(getattr(logging, level), msg, extra={"extra": {"app": self.name, **extra}})

    # --------------------------------------------------------

    def build_start(self, *, source):
        self.skipped = 0
        self._emit("INFO", "build_start", source=source)

    def build_end(self, *, stats, wall_ms):
        self._emit("INFO", "build_end", **stats, wall_ms=round(wall_ms, 3))

    def route_start(self, *, start, dest):
        if self.debug:
            self._emit("DEBUG", "route_start", start=start, dest=dest)

    def route_end(self, *, found, nodes, length_mi, ms):
        level = "DEBUG" if found else "INFO"
        if found and not self.debug:
            return
        self._emit(level, "route_end", found=found, nodes=nodes, length_mi=length_mi, ms=ms)

    def raster(self, *, depth, rows, cols, success, ms):
        if not success:
            self._emit("WARNING", "raster_failed", depth=depth, rows=rows, cols=cols, ms=ms)
        elif self.debug:
            self._emit("DEBUG", "raster", depth=depth, rows=rows, cols=cols, ms=ms)

    def error(self, *, reason: str, **kw):
        if reason == "unknown_ref":
            # common in clipped extracts; count them, detail only in debug
            self.skipped += 1
            if self.debug:
                self._emit("DEBUG", "skip_ref", **kw)
            return
        self._emit("ERROR", reason, **kw)
