from .logging_utils import LoggerLike, StructuredLogger, ensure_structured_logger, get_module_logger
from .logging_config import configure_logging, LOG_LEVELS
from .asyncio_utils import add_task_exception_logger, create_logged_task
from .config_loader import ConfigLoader

__all__ = [
    "LoggerLike",
    "StructuredLogger",
    "ensure_structured_logger",
    "get_module_logger",
    "configure_logging",
    "LOG_LEVELS",
    "add_task_exception_logger",
    "create_logged_task",
    "ConfigLoader",
]
