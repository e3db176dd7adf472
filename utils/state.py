from core.logger import SingletonLogger


class SingletonMeta(type):
    """A metaclass for creating singleton classes."""

    _instances = {}

    def __call__(cls, *args, **kwargs):
        if cls not in cls._instances:
            cls._instances[cls] = super().__call__(*args, **kwargs)
        return cls._instances[cls]


class State(metaclass=SingletonMeta):
    """Process-wide handles shared by routes, controllers and stores."""

    logger = SingletonLogger().get_logger()

    @classmethod
    def bind(cls, **context):
        """Logger carrying extra fields, e.g. ``State.bind(session_id=sid)``."""
        return cls.logger.bind(**context)
