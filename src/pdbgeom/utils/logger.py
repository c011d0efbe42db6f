#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Geometry Logger Utility

Provides leveled, colored logging for the parser and the geometry engines.
"""

from typing import Dict, Iterable, List, Optional, Sequence
from datetime import datetime
import os
import sys

from tqdm import tqdm


LEVEL_ORDER: Dict[str, int] = {
    "DEBUG": 10,
    "INFO": 20,
    "WARNING": 30,
    "ERROR": 40,
}

LEVEL_COLORS: Dict[str, str] = {
    "INFO": "\033[94m",    # Blue
    "DEBUG": "\033[90m",   # Gray
    "WARNING": "\033[93m", # Yellow
    "ERROR": "\033[91m",   # Red
}

LEVEL_LABELS: Dict[str, str] = {
    "INFO": "INFO ",
    "DEBUG": "DEBUG",
    "WARNING": "WARN ",
    "ERROR": "ERROR",
}

RESET_COLOR = "\033[0m"


class Logger:
    """
    Logger class for handling debug information logging with colored output.

    Console lines are written through ``tqdm.write`` so they interleave cleanly
    with any progress bar that is running.

    Attributes:
        is_debug (bool): Whether debug mode is enabled
        log_file (Optional[str]): Path to log file (written without colors)
        module_name (str): Name of the component using this logger
        use_colors (bool): Whether console output is colored
        records (List[str]): Messages captured when ``capture`` is enabled
    """
    def __init__(self, debug: bool = False, log_file: Optional[str] = None, module_name: str = "",
                 use_colors: bool = True, capture: bool = False):
        self.is_debug = debug
        self.log_file = log_file
        self.module_name = module_name
        self.use_colors = use_colors and sys.stderr.isatty()
        self.capture = capture
        self.records: List[str] = []
        self.threshold = LEVEL_ORDER["DEBUG"] if debug else LEVEL_ORDER["INFO"]

        if self.log_file:
            log_dir = os.path.dirname(self.log_file)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)

    def child(self, module_name: str) -> "Logger":
        """
        Create a logger for a sub-component that shares this logger's settings.

        Args:
            module_name (str): Name shown in brackets before every message

        Returns:
            Logger: New logger writing to the same destinations
        """
        name = f"{self.module_name}.{module_name}" if self.module_name else module_name
        child = Logger(self.is_debug, self.log_file, name, use_colors=False, capture=self.capture)
        child.use_colors = self.use_colors
        # Children append to the parent's capture buffer
        child.records = self.records
        return child

    def is_enabled(self, level: str) -> bool:
        return LEVEL_ORDER.get(level, LEVEL_ORDER["INFO"]) >= self.threshold

    def log(self, message: str, level: str = "INFO", indent: int = 0) -> None:
        """
        Log a message with proper formatting and color.

        Args:
            message (str): The message to log
            level (str): Log level (INFO, DEBUG, WARNING, ERROR)
            indent (int): Number of spaces to indent the message
        """
        if not self.is_enabled(level):
            return

        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        module_part = f"[{self.module_name}] " if self.module_name else ""
        log_message = f"[{timestamp}] [{LEVEL_LABELS.get(level, level)}] {module_part}{' ' * indent}{message}"

        if self.capture:
            self.records.append(f"{level}: {message}")

        if self.use_colors:
            console_line = f"{LEVEL_COLORS.get(level, RESET_COLOR)}{log_message}{RESET_COLOR}"
        else:
            console_line = log_message
        tqdm.write(console_line, file=sys.stderr)

        if self.log_file:
            with open(self.log_file, "a", encoding="utf-8") as f:
                f.write(log_message + "\n")

    def info(self, message: str, indent: int = 0) -> None:
        self.log(message, "INFO", indent)

    def debug(self, message: str, indent: int = 0) -> None:
        self.log(message, "DEBUG", indent)

    def warning(self, message: str, indent: int = 0) -> None:
        self.log(message, "WARNING", indent)

    def error(self, message: str, indent: int = 0) -> None:
        self.log(message, "ERROR", indent)

    def section(self, title: str) -> None:
        """
        Log a section title.

        Args:
            title (str): The section title
        """
        self.info(f"=== {title} ===")

    def table(self, headers: Sequence[str], rows: Iterable[Sequence], indent: int = 0) -> None:
        """
        Log tabular data with left-aligned columns.

        Args:
            headers (Sequence[str]): Table headers
            rows (Iterable[Sequence]): Table rows
            indent (int): Number of spaces to indent the table
        """
        rows = [[str(col) for col in row] for row in rows]
        if not headers or not rows:
            return

        widths = [len(h) for h in headers]
        for row in rows:
            for i, col in enumerate(row[:len(widths)]):
                widths[i] = max(widths[i], len(col))

        header_line = " | ".join(h.ljust(w) for h, w in zip(headers, widths))
        self.info(header_line, indent)
        self.info("-" * (len(header_line) + 2), indent)
        for row in rows:
            self.info(" | ".join(col.ljust(w) for col, w in zip(row, widths)), indent)

    def log_dict(self, data: dict, title: str = "Parameters", indent: int = 0) -> None:
        """
        Log dictionary data in a structured format.

        Args:
            data (dict): Dictionary to log
            title (str): Title for the dictionary section
            indent (int): Number of spaces to indent
        """
        if not data:
            return

        self.section(title)
        for key, value in data.items():
            if isinstance(value, (list, tuple)):
                value_str = ", ".join(str(v) for v in value)
            else:
                value_str = str(value)
            self.info(f"{key}: {value_str}", indent + 2)
