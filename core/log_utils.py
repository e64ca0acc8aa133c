#!/usr/bin/env python3
"""
core/log_utils.py: Logging setup shared by the server and the maintenance CLI.
This module contains:
- setup_logging: Installs console/file handlers and per-topic DEBUG switches.
- RichLogFormatter: Level/topic prefixed output, optionally colored or
  timestamped.
- ContextFilter / log_context: Tag the records of one unit of work (a spell
  being hydrated, a CSV file being synced) with a short label.
"""

import contextlib
import logging

# Loggers are named "<project>.<topic>"; `-d TOPICS` switches topics to DEBUG.
PROJECT_TOPICS = {
    "elder": {
        "api",
        "app",
        "auth",
        "config",
        "hydrate",
        "icon",
        "llm",
        "parse",
        "reference",
        "storage",
        "web",
    },
    "elder_admin": {"sync", "encoding", "seed"},
}
QUIET_LIBRARIES = ("werkzeug", "waitress", "urllib3")


def _resolve_debug_topics(debug_topics: str, projects: list[str]) -> list[str]:
    """Expands `all` and topic prefixes (e.g. `ref`) into full logger names."""
    requested = [t.strip() for t in debug_topics.split(",") if t.strip()]
    loggers = []
    for project in projects:
        known = PROJECT_TOPICS.get(project, set())
        for topic in sorted(known):
            if "all" in requested or any(topic.startswith(r) for r in requested):
                loggers.append(f"{project}.{topic}")
    return loggers


def setup_logging(
    project_name: str,
    level=logging.INFO,
    color_logs=False,
    debug_topics=None,
    include_projects: list[str] = None,
    log_file: str = None,
):
    """
    Configures the root logger for one run of the server or CLI.
    Args:
        project_name (str): Logger namespace of the entry point.
        level (int): Base level for every logger.
        color_logs (bool): ANSI colors on the console handler.
        debug_topics (str): Comma separated topics (or `all`) set to DEBUG.
        include_projects (list[str]): Other namespaces the topics apply to.
        log_file (str): Optional file receiving timestamped, uncolored logs.
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(RichLogFormatter(use_color=color_logs))
    root_logger.addHandler(console_handler)
    root_logger.setLevel(level)

    log = logging.getLogger(project_name)
    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
            file_handler.setFormatter(RichLogFormatter(timestamps=True))
            root_logger.addHandler(file_handler)
            log.info("Logging to file: %s", log_file)
        except OSError as e:
            log.error("Could not open log file %s: %s", log_file, e)

    for name in QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)

    if debug_topics:
        loggers = _resolve_debug_topics(debug_topics, [project_name] + (include_projects or []))
        if not loggers:
            log.warning("No debug topics match '%s'.", debug_topics)
        for name in loggers:
            logging.getLogger(name).setLevel(logging.DEBUG)


class ContextFilter(logging.Filter):
    """Injects a fixed `context` label into every record it sees."""

    def __init__(self, context_str=""):
        super().__init__()
        self.context_str = context_str

    def filter(self, record):
        record.context = self.context_str
        return True


@contextlib.contextmanager
def log_context(logger: logging.Logger, context_str: str):
    """Tags the records of `logger` with `context_str` inside the block."""
    context_filter = ContextFilter(context_str)
    logger.addFilter(context_filter)
    try:
        yield logger
    finally:
        logger.removeFilter(context_filter)


# --- CUSTOM LOGGING FORMATTER ---
class RichLogFormatter(logging.Formatter):
    """Prefixes each message line with its level, topic and context.
    The topic is the logger name segment after the project name, so
    `elder.parse` prints as `parse`.
    Args:
        use_color (bool): If True, ANSI color codes are used. Defaults to False.
        timestamps (bool): If True, lines start with the record time.
    """

    COLORS = {
        logging.DEBUG: "\033[38;5;252m",  # Light Grey
        logging.INFO: "\033[38;5;111m",  # Pastel Blue
        logging.WARNING: "\033[38;5;229m",  # Pale Yellow
        logging.ERROR: "\033[38;5;210m",  # Soft Red
        logging.CRITICAL: "\033[38;5;217m",  # Light Magenta
    }

    def __init__(self, use_color=False, timestamps=False):
        super().__init__(datefmt="%Y-%m-%d %H:%M:%S")
        self.use_color = use_color
        self.timestamps = timestamps
        self.bold = "\033[1m" if use_color else ""
        self.reset = "\033[0m" if use_color else ""

    def format(self, record):
        color = self.COLORS.get(record.levelno, "") if self.use_color else ""
        name_parts = record.name.split(".")
        topic = name_parts[1][:6] if len(name_parts) > 1 else record.name[:6]
        context = getattr(record, "context", "")
        context_str = f"[{context}]" if context else ""
        stamp = f"{self.formatTime(record, self.datefmt)} " if self.timestamps else ""

        prefix = (
            f"{stamp}{color}{record.levelname[:5]:<5}{self.reset}:"
            f"{self.bold}{topic:<6}{self.reset}{context_str}: "
        )
        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return "\n".join(f"{prefix}{line}" for line in message.split("\n"))
