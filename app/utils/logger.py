import logging
from typing import Optional

from app.config import settings

LOGGER_NAME = "permission_letters"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class SecretMaskFilter(logging.Filter):
    """Replaces the configured HMAC secret with *** in every record."""

    def __init__(self, secret: Optional[str] = None):
        super().__init__()
        self._secret = secret

    @property
    def secret(self) -> str:
        return self._secret if self._secret is not None else settings.hmac_secret

    def filter(self, record: logging.LogRecord) -> bool:
        secret = self.secret
        if secret:
            message = record.getMessage()
            if secret in message:
                record.msg = message.replace(secret, "***")
                record.args = None
        return True


def setup_logger(name: str = LOGGER_NAME, level: Optional[str] = None) -> logging.Logger:
    """Console logger for the service. Safe to call more than once."""
    level_value = getattr(logging, (level or settings.log_level).upper(), logging.INFO)

    logger = logging.getLogger(name)
    logger.setLevel(level_value)

    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level_value)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    console_handler.addFilter(SecretMaskFilter())

    logger.addHandler(console_handler)
    return logger


logger = setup_logger()
