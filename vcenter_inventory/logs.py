import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


class EventFormatter(logging.Formatter):
    """One line per event: newlines are folded and tracebacks stay on the console."""

    def format(self, record):
        record.message = record.getMessage()
        if self.usesTime():
            record.asctime = self.formatTime(record, self.datefmt)
        return self.formatMessage(record).replace("\r", " ").replace("\n", " | ")


def configure_logging(log_path=None, level=logging.INFO):
    """Attach console and (optionally) append-mode file handlers to the root logger."""
    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter(LOG_FORMAT))
    handlers = [console]
    if log_path is not None:
        file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
        file_handler.setFormatter(EventFormatter(LOG_FORMAT))
        handlers.append(file_handler)

    root = logging.getLogger()
    root.setLevel(level)
    for handler in handlers:
        handler.setLevel(level)
        root.addHandler(handler)
    return handlers


def release_logging(handlers):
    root = logging.getLogger()
    for handler in handlers:
        root.removeHandler(handler)
        handler.close()
