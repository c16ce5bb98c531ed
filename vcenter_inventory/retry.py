import logging
import time

from vcenter_inventory.errors import ConfigurationError, ConnectivityError

logger = logging.getLogger(__name__)


def execute(operation, max_attempts, delay_seconds, description="operation", sleep=time.sleep):
    """Run ``operation`` up to ``max_attempts + 1`` times with a fixed pause in between.

    Returns the first successful result. When every attempt fails, raises
    ConnectivityError chained to the last failure.
    """
    if max_attempts < 0:
        raise ConfigurationError(f"Retry count must not be negative, got {max_attempts}")

    total = max_attempts + 1
    last_error = None
    for attempt in range(1, total + 1):
        try:
            return operation()
        except Exception as e:
            last_error = e
            logger.warning(f"{description} failed (attempt {attempt}/{total}): {e}")
            if attempt < total:
                sleep(delay_seconds)

    logger.error(f"{description} failed after {total} attempts: {last_error}")
    raise ConnectivityError(f"{description} failed after {total} attempts: {last_error}",
                            attempts=total) from last_error
