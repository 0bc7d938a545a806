import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional


class Colors:
    """ANSI коды для цветного вывода в консоли."""

    RESET = "\033[0m"
    BOLD = "\033[1m"

    BRIGHT_RED = "\033[91m"
    BRIGHT_GREEN = "\033[92m"
    BRIGHT_YELLOW = "\033[93m"
    BRIGHT_CYAN = "\033[96m"


class ColoredFormatter(logging.Formatter):
    LEVEL_COLORS = {
        logging.DEBUG: Colors.BRIGHT_CYAN,
        logging.INFO: Colors.BRIGHT_GREEN,
        logging.WARNING: Colors.BRIGHT_YELLOW,
        logging.ERROR: Colors.BRIGHT_RED,
        logging.CRITICAL: Colors.BOLD + Colors.BRIGHT_RED,
    }

    def __init__(self, fmt: str, use_color: bool = True):
        super().__init__(fmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_color:
            return super().format(record)

        levelname_original = record.levelname
        color = self.LEVEL_COLORS.get(record.levelno, "")
        record.levelname = f"{color}{record.levelname}{Colors.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname_original


class CMSLogger:
    def __init__(
        self,
        name: str,
        level: int = logging.INFO,
        log_dir: str | Path = "logs",
        log_file: Optional[str] = None,
        max_bytes: int = 10 * 1024 * 1024,  # 10 MB
        backup_count: int = 5,
        console_output: bool = True,
        file_output: bool = True,
    ):
        self.name = name
        self.level = level
        self.log_dir = Path(log_dir)
        self.log_file = log_file or "cms.log"
        self.max_bytes = max_bytes
        self.backup_count = backup_count
        self.console_output = console_output
        self.file_output = file_output

        self._logger = logging.getLogger(name)
        self._logger.setLevel(level)

        self._logger.handlers.clear()

        self._setup_handlers()

    def _setup_handlers(self) -> None:
        console_format = (
            "%(levelname)s\t"
            "%(asctime)s - "
            "%(name)s - "
            "%(message)s"
        )

        file_format = (
            "%(levelname)-8s "
            "%(asctime)s - "
            "%(name)s - "
            "%(funcName)s:%(lineno)d - "
            "%(message)s"
        )

        date_format = "%Y-%m-%d %H:%M:%S"

        if self.console_output:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(self.level)
            console_formatter = ColoredFormatter(console_format, use_color=True)
            console_formatter.datefmt = date_format
            console_handler.setFormatter(console_formatter)
            self._logger.addHandler(console_handler)

        if self.file_output:
            self.log_dir.mkdir(parents=True, exist_ok=True)

            file_handler = RotatingFileHandler(
                self.log_dir / self.log_file,
                maxBytes=self.max_bytes,
                backupCount=self.backup_count,
                encoding="utf-8",
            )
            file_handler.setLevel(self.level)
            file_formatter = ColoredFormatter(file_format, use_color=False)
            file_formatter.datefmt = date_format
            file_handler.setFormatter(file_formatter)
            self._logger.addHandler(file_handler)

    def debug(self, message: str, *args, **kwargs) -> None:
        self._logger.debug(message, *args, **kwargs)

    def info(self, message: str, *args, **kwargs) -> None:
        self._logger.info(message, *args, **kwargs)

    def warning(self, message: str, *args, **kwargs) -> None:
        self._logger.warning(message, *args, **kwargs)

    def error(self, message: str, *args, **kwargs) -> None:
        self._logger.error(message, *args, **kwargs)


_loggers: dict[str, CMSLogger] = {}


def _level_from_settings() -> int:
    from src.cms.core.config import config

    return getattr(logging, config.server_log_level.upper(), logging.INFO)


def get_logger(
    name: str,
    level: Optional[int | str] = None,
    **kwargs,
) -> CMSLogger:
    if name in _loggers:
        return _loggers[name]

    if level is None:
        level = _level_from_settings()

    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    if "log_dir" not in kwargs:
        from src.cms.core.config import config

        kwargs["log_dir"] = config.log_dir

    logger = CMSLogger(name, level=level, **kwargs)
    _loggers[name] = logger

    return logger


def configure_root_logger(
    level: Optional[int | str] = None,
    log_file: str = "cms.log",
) -> None:
    if level is None:
        level = _level_from_settings()

    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    get_logger("cms", level=level, log_file=log_file)

    logging.root.setLevel(level)
