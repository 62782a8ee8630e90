"""
Logging Setup for the gamepad hotkey agent.

Every logger writes into a queue on the root logger; a dedicated LoggingThread
drains it into a rotating file and the console, so the HID listener thread
never blocks on disk I/O.
"""

import logging
import os
import threading
from logging.handlers import RotatingFileHandler, QueueHandler, QueueListener
from queue import Queue
from typing import Callable, Optional, Tuple

# Centralized logging format with thread, module, function, and line number
LOG_FORMAT = '%(asctime)s [%(levelname)s] %(threadName)s %(module)s:%(funcName)s:%(lineno)d - %(message)s'

LOG_LEVELS = ("DEBUG", "INFO", "NONE")

# --log_level -> (root, file handler, console handler). "NONE" keeps only CRITICAL.
LEVELS = {
    "DEBUG": (logging.DEBUG, logging.DEBUG, logging.INFO),
    "INFO": (logging.INFO, logging.DEBUG, logging.INFO),
    "NONE": (logging.INFO, logging.CRITICAL, logging.CRITICAL),
}


def build_handlers(log_level: str, log_file_path: str,
                   max_bytes: int = 4*1024*1024,
                   backup_count: int = 5) -> Tuple[logging.Handler, logging.Handler]:
    """Create the (file, console) handler pair for a --log_level value."""
    _, file_level, console_level = LEVELS[log_level]
    formatter = logging.Formatter(LOG_FORMAT)

    file_handler = RotatingFileHandler(log_file_path, maxBytes=max_bytes, backupCount=backup_count)
    file_handler.setLevel(file_level)
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    return file_handler, console_handler


def setup_logging(
    log_level: str,
    log_file_name: str,
    script_dir: str,
    version: str = "",
    script_name: str = "pad2hotkey",
    max_bytes: int = 4*1024*1024,
    backup_count: int = 5,
    set_thread_priority_func: Optional[Callable] = None,
    thread_priority_idle: int = 0
) -> tuple:
    """
    Route all logging through a queue into a rotating file and the console.

    Args:
        log_level: One of LOG_LEVELS
        log_file_name: Name of the log file, created in script_dir
        script_dir: Directory for the log file
        version: Version string for the startup line
        script_name: Logger name and startup line label
        set_thread_priority_func: Called on the LoggingThread with thread_priority_idle

    Returns:
        Tuple of (logger, stop_logging_func). stop_logging flushes the queue
        and waits for the LoggingThread to exit.
    """
    handlers = build_handlers(log_level, os.path.join(script_dir, log_file_name), max_bytes, backup_count)
    log_queue = Queue()

    root_logger = logging.getLogger()
    root_logger.handlers = []  # Clear all handlers
    root_logger.setLevel(LEVELS[log_level][0])
    root_logger.addHandler(QueueHandler(log_queue))

    logger = logging.getLogger(script_name)
    version_str = f" v{version}" if version else ""
    logger.info(f">----- Starting {script_name}{version_str}. Initializing...")

    stop_event = threading.Event()

    def log_listener_thread():
        listener = QueueListener(log_queue, *handlers, respect_handler_level=True)
        listener.start()
        if set_thread_priority_func:
            set_thread_priority_func(thread_priority_idle)
        stop_event.wait()
        listener.stop()  # Drains what is still queued
        for handler in handlers:
            handler.close()

    logging_thread = threading.Thread(target=log_listener_thread, name="LoggingThread", daemon=False)
    logging_thread.start()

    def stop_logging():
        stop_event.set()
        logging_thread.join(timeout=2.0)

    return logger, stop_logging
