import os
import sys
from pathlib import Path
from loguru import logger

LOG_DIR = Path(os.getenv("SINGGEN_LOG_DIR", str(Path.home() / ".singgen" / "logs")))

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan> - <level>{message}</level>"
)

_logging_configured = False


def _truthy(name: str) -> bool:
    return os.getenv(name, "").lower() in ("1", "true", "yes")


def setup_logging(level="INFO", suppress_console=None, enable_file_logging=None, force=False):
    """
    Configure the global loguru logger.

    The console sink writes to stderr so that rendered documents on stdout
    stay clean. File logging is opt-in.

    Args:
        level: Console level name (case-insensitive).
        suppress_console: Drop the console sink. None reads SINGGEN_MACHINE_MODE.
        enable_file_logging: Add a rotating file sink under LOG_DIR.
            None reads SINGGEN_FILE_LOGGING.
        force: Reconfigure even if logging was already set up (the CLI
            does this for --log and --machine).
    """
    global _logging_configured

    if _logging_configured and not force:
        return
    _logging_configured = True

    logger.remove()

    if suppress_console is None:
        suppress_console = _truthy("SINGGEN_MACHINE_MODE")
    if enable_file_logging is None:
        enable_file_logging = _truthy("SINGGEN_FILE_LOGGING")

    if not suppress_console:
        logger.add(
            sys.stderr,
            level=level.upper() if isinstance(level, str) else level,
            format=CONSOLE_FORMAT,
            colorize=True,
        )

    if enable_file_logging:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        logger.add(
            LOG_DIR / "singgen.log",
            level="DEBUG" if _truthy("SINGGEN_FILE_DEBUG") else "INFO",
            rotation="10 MB",
            retention="3 days",
            compression="gz",
            catch=True,
        )


# Configured on import; SINGGEN_MACHINE_MODE silences the console
setup_logging(level=os.getenv("SINGGEN_LOG_LEVEL", "WARNING"))
