import logging
import os

from user_context import get_current_user_id

class UserContextFilter(logging.Filter):
    """Stamp every record with the id of the user making the current request."""

    def filter(self, record):
        record.user_id = get_current_user_id() or "-"
        return True

class DuplicateFilter(logging.Filter):
    """Drop repeated messages below ERROR."""

    def __init__(self):
        super().__init__()
        self.msgs = set()

    def filter(self, record):
        # Allow ERROR and CRITICAL messages through always
        if record.levelno >= logging.ERROR:
            return True

        msg = record.getMessage()
        if msg in self.msgs:
            return False
        self.msgs.add(msg)

        # Clear the set periodically to avoid memory issues
        if len(self.msgs) > 1000:
            self.msgs.clear()

        return True

def setup_logging(log_level: str = "WARNING") -> None:
    """
    Configure logging to reduce verbosity and focus on important messages.

    Args:
        log_level: The minimum log level to display (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    # Get log level from environment or use provided default
    log_level = os.getenv("LOG_LEVEL", log_level).upper()

    # Convert string to logging level
    numeric_level = getattr(logging, log_level, logging.WARNING)

    logging.basicConfig(
        level=numeric_level,
        format='%(asctime)s - %(name)s - %(levelname)s - [user=%(user_id)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # If the level is DEBUG, we let everything through for detailed debugging.
    if numeric_level > logging.DEBUG:
        noisy_libraries = [
            'httpx', 'httpcore', 'openai', 'urllib3', 'passlib',
            'uvicorn', 'uvicorn.access', 'fastapi', 'sqlalchemy.engine'
        ]
        for logger_name in noisy_libraries:
            logging.getLogger(logger_name).setLevel(logging.WARNING)

    # Handler level filters see records propagated from every module logger
    user_filter = UserContextFilter()
    duplicate_filter = DuplicateFilter()
    for handler in logging.getLogger().handlers:
        handler.addFilter(user_filter)
        handler.addFilter(duplicate_filter)

    print(f"Logging configured with level: {log_level}")
