"""
Logging for the export service.

Every record goes to stdout and to a per-hour file under LOG_DIR
(app_2025-12-13_14.log holds 14:00-15:00). Request handlers log through a
RequestLoggerAdapter so one export can be followed across modules:

    [2025-12-13 10:30:45] [INFO] [request_id=3f9a0c1b2d4e] Export started: file=paper.pdf, annotations=4
"""

import logging
import os
import sys
import tempfile
import uuid
from datetime import datetime, timedelta
from logging.handlers import TimedRotatingFileHandler

LOG_FORMAT = '[%(asctime)s] [%(levelname)s] %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
KEEP_HOURS = 24 * 7


def _resolve_log_dir() -> str:
    """LOG_DIR from the environment, else ./logs, else a temp directory."""
    candidates = [os.environ.get('LOG_DIR'),
                  os.path.join(os.path.dirname(os.path.abspath(__file__)), 'logs'),
                  os.path.join(tempfile.gettempdir(), 'pdf-annotation-export-logs')]
    for path in filter(None, candidates):
        try:
            os.makedirs(path, exist_ok=True)
        except OSError:
            continue
        return path
    raise OSError("No writable log directory")


LOG_DIR = _resolve_log_dir()


def _next_hour() -> int:
    """Epoch seconds of the next local top of the hour."""
    top = datetime.now().replace(minute=0, second=0, microsecond=0)
    return int((top + timedelta(hours=1)).timestamp())


class HourlyFileHandler(TimedRotatingFileHandler):
    """
    Writes to <prefix>_YYYY-MM-DD_HH.log, switching files on the hour and
    keeping the newest `keep_hours` files.
    """

    def __init__(self, log_dir: str, prefix: str = 'app', keep_hours: int = KEEP_HOURS):
        self.log_dir = log_dir
        self.prefix = prefix
        super().__init__(self.current_path(), when='H', interval=1,
                         backupCount=keep_hours, encoding='utf-8')
        self.rolloverAt = _next_hour()

    def current_path(self) -> str:
        name = f"{self.prefix}_{datetime.now():%Y-%m-%d_%H}.log"
        return os.path.join(self.log_dir, name)

    def doRollover(self):
        if self.stream:
            self.stream.close()
            self.stream = None

        self.baseFilename = self.current_path()
        self.stream = self._open()
        self.rolloverAt = _next_hour()
        self.prune()

    def prune(self):
        """Delete this handler's oldest hourly files beyond backupCount."""
        try:
            names = sorted(name for name in os.listdir(self.log_dir)
                           if name.startswith(self.prefix + '_') and name.endswith('.log'))
        except OSError:
            return

        for name in names[:-self.backupCount]:
            try:
                os.remove(os.path.join(self.log_dir, name))
            except OSError:
                pass


class RequestLoggerAdapter(logging.LoggerAdapter):
    """Prefixes each message with the request id it belongs to."""

    def process(self, msg, kwargs):
        return f"[request_id={self.extra.get('request_id', 'unknown')}] {msg}", kwargs


def setup_logging(log_dir: str = LOG_DIR) -> logging.Logger:
    """Replace the root logger's handlers with stdout and the hourly file."""
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(formatter)
    root_logger.addHandler(stdout_handler)

    try:
        file_handler = HourlyFileHandler(log_dir)
    except OSError as e:
        root_logger.warning("File logging disabled: %s", e)
    else:
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
        root_logger.info("Logging to directory: %s", log_dir)

    return root_logger


def new_request_id() -> str:
    return uuid.uuid4().hex[:12]


def get_request_logger(request_id: str, name: str = 'export') -> RequestLoggerAdapter:
    """
    Logger for one HTTP request.

    Example:
        log = get_request_logger(new_request_id())
        log.info("Export started")
    """
    return RequestLoggerAdapter(logging.getLogger(name), {'request_id': request_id})


def get_logger(name: str = 'app') -> logging.Logger:
    """Logger without request context, for startup and health checks."""
    return logging.getLogger(name)


setup_logging()
