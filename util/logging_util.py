import logging
import sys
from typing import Optional

# Configure logging format
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

def setup_logger(name: str, level=logging.INFO) -> logging.Logger:
    """
    Sets up a logger with consistent formatting.

    Args:
        name: Name of the logger (typically __name__ from the calling module)
        level: Logging level (default: INFO)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Avoid adding handlers multiple times
    if not logger.handlers:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)

        formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)
        console_handler.setFormatter(formatter)

        logger.addHandler(console_handler)

    return logger

def _preview(value, limit: int = 200) -> str:
    text = str(value)
    return f"{text[:limit]}{'...' if len(text) > limit else ''}"

def log_llm_interaction(logger: logging.Logger, label: str, params: dict,
                        response, model_name: str, duration_ms: Optional[float] = None):
    """
    Logs an LLM interaction with all relevant details.

    Args:
        logger: Logger instance to use
        label: What the call was for (provider name, prompt name, ...)
        params: The request sent to the provider
        response: Normalised response from the provider adapter
        model_name: Name of the model used
        duration_ms: Optional duration of the call in milliseconds
    """
    duration_str = f" ({duration_ms:.2f}ms)" if duration_ms else ""
    logger.info(f"LLM Request{duration_str} - Model: {model_name}")
    logger.debug(f"  Label: {label}")
    logger.debug(f"  Params: {params}")
    logger.info(f"  Response: {_preview(response)}")

def log_pipeline_step(logger: logging.Logger, step: str, count: int, total: Optional[int] = None):
    """
    Logs the outcome of one ingestion or digest step.

    Args:
        logger: Logger instance to use
        step: Name of the step (fetch, extract, score, ...)
        count: Number of items that came out of the step
        total: Optional number of items that went into the step
    """
    if total is None:
        logger.info(f"[{step}] {count} item(s)")
    else:
        logger.info(f"[{step}] {count}/{total} item(s)")
