import os
import sys
import threading

import logfire
from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


class SingletonLogger:
    """Configures loguru once per process.

    Records go to stderr and to Logfire. Logfire only ships them when
    ``LOGFIRE_TOKEN`` is set, so local runs and tests stay offline.
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls, service_name="medinote-backend", service_version="1.0.0"):
        if not cls._instance:
            with cls._lock:
                if not cls._instance:
                    cls._instance = super(SingletonLogger, cls).__new__(cls)
                    cls._instance._init_logger(service_name, service_version)
        return cls._instance

    def _init_logger(self, service_name, service_version):
        environment = os.getenv("ENVIRONMENT", "development")
        logfire.configure(
            token=os.getenv("LOGFIRE_TOKEN"),
            send_to_logfire="if-token-present",
            service_name=service_name,
            service_version=service_version,
            environment=environment,
            console=False,
        )
        logger.remove()
        logger.configure(
            handlers=[
                logfire.loguru_handler(),
                {
                    "sink": sys.stderr,
                    "level": os.getenv("LOG_LEVEL", "INFO").upper(),
                    "format": CONSOLE_FORMAT,
                    "backtrace": environment != "production",
                    # variable values in tracebacks may hold patient data
                    "diagnose": environment == "development",
                },
            ],
        )
        self.logger = logger

    def get_logger(self):
        return self.logger
