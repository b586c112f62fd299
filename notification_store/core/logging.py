import logging
import sys

from loguru import logger

# Store events are logged as a short name plus keyword fields
# (``notification.opened notification_id=3``); the fields live in ``extra``.
LOG_FORMAT = (
    '<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | '
    '<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>{extra[fields]}'
)

QUIET_LOGGERS = ('sqlalchemy.engine', 'uvicorn.access')


def _render_fields(record) -> None:
    fields = {key: value for key, value in record['extra'].items() if key != 'fields'}
    record['extra']['fields'] = ''.join(f' {key}={value}' for key, value in fields.items())


class _InterceptHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1
        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def configure_logging(level: str) -> None:
    logger.remove()
    logger.configure(patcher=_render_fields)
    logger.add(
        sys.stdout,
        level=level,
        format=LOG_FORMAT,
        enqueue=True,
        backtrace=True,
        diagnose=False,
    )
    logging.root.handlers = [_InterceptHandler()]
    logging.root.setLevel(level)
    if logging.getLevelName(level) != logging.DEBUG:
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
