import logging
import os
from datetime import date

LOG_FORMAT = "%(asctime)s %(levelname)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class DailyFileHandler(logging.FileHandler):
    """
    Writes to <log_dir>/<YYYY>/<MM>/orderflow-<YYYY-MM-DD>.log and switches
    to a new file on the first record of each day.
    """

    def __init__(self, log_dir, encoding="utf-8"):
        self.log_dir = log_dir
        self.day = date.today()
        super().__init__(self._path_for(self.day), encoding=encoding, delay=True)

    def _path_for(self, day):
        folder = os.path.join(self.log_dir, day.strftime("%Y"), day.strftime("%m"))
        os.makedirs(folder, exist_ok=True)
        return os.path.join(folder, f"orderflow-{day.isoformat()}.log")

    def emit(self, record):
        today = date.today()
        if today != self.day:
            self.acquire()
            try:
                self.close()
                self.day = today
                self.baseFilename = os.path.abspath(self._path_for(today))
            finally:
                self.release()
        super().emit(record)


Log = logging.getLogger("orderflow")
Log.setLevel(os.environ.get("LOG_LEVEL", "DEBUG").upper())

if not Log.handlers:
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    Log.addHandler(console_handler)


def init_logging(app):
    """Apply LOG_LEVEL and, when LOG_TO_FILE is on, add the daily file handler."""
    Log.setLevel(str(app.config.get("LOG_LEVEL", "DEBUG")).upper())

    if not app.config.get("LOG_TO_FILE"):
        return
    if any(isinstance(handler, DailyFileHandler) for handler in Log.handlers):
        return

    file_handler = DailyFileHandler(app.config["LOG_DIR"])
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    Log.addHandler(file_handler)
    Log.debug(f"[logger.py][init_logging] writing logs under {app.config['LOG_DIR']}")


__all__ = ["Log", "init_logging"]
