# app/core/logger.py
import logging
import os
import sys
from logging.handlers import RotatingFileHandler

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE = os.getenv("LOG_FILE", "logs/app.log")

# Formatters
formatter = logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")

# Configure sys.stdout to use UTF-8
if hasattr(sys.stdout, 'reconfigure'):
    sys.stdout.reconfigure(encoding='utf-8')

# Console handler
console_handler = logging.StreamHandler(sys.stdout)
console_handler.setLevel(LOG_LEVEL)
console_handler.setFormatter(formatter)

handlers = [console_handler]

# File handler with rotation, disabled with LOG_FILE=""
file_handler = None
if LOG_FILE:
    log_dir = os.path.dirname(LOG_FILE)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    file_handler = RotatingFileHandler(
        filename=LOG_FILE,
        maxBytes=5 * 1024 * 1024,  # 5MB
        backupCount=3
    )
    file_handler.setLevel(LOG_LEVEL)
    file_handler.setFormatter(formatter)
    handlers.append(file_handler)

# Base logger configuration
logger = logging.getLogger("telecare")
logger.setLevel(LOG_LEVEL)
for handler in handlers:
    logger.addHandler(handler)
logger.propagate = False
