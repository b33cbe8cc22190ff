import logging
import re
import sys
from datetime import datetime
from pathlib import Path

from colorama import Fore, Style, init

ROOT_LOGGER_NAME = "nftgate"

format_string_console = (
    f"{Style.BRIGHT}%(levelname)-10s "
    + f"{Style.DIM}%(name)-28s "
    + "%(module)s.%(funcName)-24s "
    + f"{Style.RESET_ALL}%(message)s"
)
format_string_file = re.sub(
    r"\x1b\[[0-9;]*m", "", "%(asctime)s - " + format_string_console
)


class ColorFormatter(logging.Formatter):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.color_map = {
            logging.DEBUG: Fore.CYAN,
            logging.INFO: Fore.GREEN,
            logging.WARNING: Fore.YELLOW,
            logging.ERROR: Fore.RED,
            logging.CRITICAL: Fore.MAGENTA,
        }

    def format(self, record):
        color = self.color_map.get(record.levelno, Fore.WHITE)
        message = super().format(record)
        return f"{color}{message}{Style.RESET_ALL}"


class Logger:
    """Colored console logger for the ``nftgate`` package.

    Handlers live on the package root logger so every module logger shares
    them through propagation. The daily log file is attached once at startup
    with :meth:`attach_file`, after the configuration is known.
    """

    _console_attached = False

    def __init__(self, name, level=None):
        root = logging.getLogger(ROOT_LOGGER_NAME)

        if not Logger._console_attached:
            # Initialize colorama
            init()
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(ColorFormatter(format_string_console))
            root.addHandler(console_handler)
            root.setLevel(logging.INFO)
            Logger._console_attached = True

        self.logger = logging.getLogger(name)
        if level is not None:
            self.logger.setLevel(level)

    def get_logger(self):
        return self.logger

    @staticmethod
    def attach_file(log_dir, level=logging.INFO):
        Path(log_dir).mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(
            Path(log_dir) / f"{datetime.now().strftime('%Y-%m-%d')}.log"
        )
        file_handler.setFormatter(logging.Formatter(format_string_file))

        root = logging.getLogger(ROOT_LOGGER_NAME)
        root.addHandler(file_handler)
        root.setLevel(level)
        return file_handler
