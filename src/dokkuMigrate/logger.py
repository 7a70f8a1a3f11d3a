import sys
import logging

LINE_CHARS = 80

logger = logging.getLogger("dokkuMigrate")
fmt    = logging.Formatter('[%(asctime)s][%(levelname)s][%(name)s] %(message)s')

def setupLogging(verbosity: int = 0) -> None:
    """Log to stderr so that stdout only carries command output"""
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    ch = logging.StreamHandler(sys.stderr)
    ch.setFormatter(fmt)
    logger.addHandler(ch)
    logger.setLevel(logging.DEBUG if verbosity > 0 else logging.INFO)

    logging.getLogger("paramiko").setLevel(logging.DEBUG if verbosity > 1 else logging.WARNING)

def printLine():
    logger.info("-"*LINE_CHARS)

def printHeader():
    logger.info("#"*LINE_CHARS)
