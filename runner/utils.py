import logging


LOGGER_NAME = "knn_loo"


def setup_logging(log_level: str = "INFO") -> logging.Logger:
    """
    Configure logging for the leave-one-out runner.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level.upper()))

    # Create console handler with formatting
    handler = logging.StreamHandler()
    handler.setLevel(getattr(logging, log_level.upper()))

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    handler.setFormatter(formatter)

    # Avoid duplicate handlers
    if not logger.handlers:
        logger.addHandler(handler)
    else:
        for existing in logger.handlers:
            existing.setLevel(getattr(logging, log_level.upper()))

    return logger


def format_duration(seconds: float) -> str:
    """Render a duration as seconds, or minutes and seconds past one minute."""
    if seconds < 60:
        return f"{seconds:.3f} s"
    minutes, remainder = divmod(seconds, 60)
    return f"{int(minutes)} min {remainder:.1f} s"
