import logging
from rich.logging import RichHandler
from caption_fetcher.config import settings

def setup_logger(name: str = "caption_fetcher", level: str = settings.LOG_LEVEL) -> logging.Logger:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)]
    )
    # urllib3 logs every connection at DEBUG; keep it out of our output
    logging.getLogger("urllib3").setLevel(max(logging.getLogger().level, logging.INFO))
    log = logging.getLogger(name)
    log.setLevel(level)
    return log

logger = setup_logger()
