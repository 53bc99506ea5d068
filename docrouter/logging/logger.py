import logging
import sys

_FORMAT = "%(asctime)s [%(levelname)s] (%(threadName)s) %(message)s"

# Client libraries that log every HTTP round trip
_NOISY_LOGGERS = ("google", "google.auth", "google.api_core", "urllib3")


class ContextFormatter(logging.Formatter):
    """Formatter that appends the keyword context of a ``Log`` call as ``key=value`` pairs."""

    def formatMessage(self, record: logging.LogRecord) -> str:
        line = super().formatMessage(record)
        context = getattr(record, "context", None)
        if context:
            line += " " + " ".join(f"{key}={value}" for key, value in context.items())
        return line


class Log:
    """Centralized logging for the service.

    Keyword arguments of every call are kept on the record as ``context`` and
    rendered after the message, e.g. ``Log.info("Batch done", batch_id="b-1")``.
    """

    _logger: logging.Logger = logging.getLogger("docrouter")

    @classmethod
    def configure(cls, log_level: str) -> None:
        """Set the level, attach one stdout handler and quiet the GCP client loggers."""
        level = log_level.upper()
        cls._logger.setLevel(level)
        if not cls._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(ContextFormatter(_FORMAT))
            cls._logger.addHandler(handler)
        library_level = logging.DEBUG if level == "DEBUG" else logging.WARNING
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(library_level)

    @classmethod
    def info(cls, message: str, **context: object) -> None:
        cls._logger.info(message, extra={"context": context})

    @classmethod
    def error(cls, message: str, **context: object) -> None:
        cls._logger.error(message, extra={"context": context})

    @classmethod
    def exception(cls, message: str, **context: object) -> None:
        """Log an error with the traceback of the exception being handled."""
        cls._logger.exception(message, extra={"context": context})

    @classmethod
    def warning(cls, message: str, **context: object) -> None:
        cls._logger.warning(message, extra={"context": context})

    @classmethod
    def debug(cls, message: str, **context: object) -> None:
        cls._logger.debug(message, extra={"context": context})
