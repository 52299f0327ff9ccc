import os
import logging
from datetime import datetime

from .config import ClientConfig, client_config


def setup_logging(
    config: ClientConfig = client_config,
    add_timestamp_to_log_file: bool = True,
    force_reconfig: bool = False,
) -> logging.Logger:
    """
    Set up the client logger with a file handler and a stderr handler.

    The file handler records everything down to DEBUG, including each line
    sent and received. The console handler only shows records at or above
    `config.console_log_level` so it does not interleave with chat output.

    Args:
        config: Client settings providing logger name, levels and log directory.
        add_timestamp_to_log_file: Whether to add a timestamp to the log file name.
        force_reconfig: If True, remove existing handlers and reconfigure.

    Returns:
        Configured logger instance.
    """
    logger = logging.getLogger(config.logger_name)
    logger.setLevel(getattr(logging, config.log_level.upper(), logging.INFO))

    if force_reconfig and logger.hasHandlers():
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
            handler.close()

    if logger.handlers:
        return logger

    os.makedirs(config.log_dir, exist_ok=True)
    log_file_name = f"{config.logger_name}.log"
    if add_timestamp_to_log_file:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file_name = f"{config.logger_name}_{timestamp}.log"

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    file_handler = logging.FileHandler(
        os.path.join(config.log_dir, log_file_name), mode="a", encoding="utf-8"
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(
        getattr(logging, config.console_log_level.upper(), logging.ERROR)
    )
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    return logger
