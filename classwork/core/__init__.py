__all__ = [
    "BootConfiguration",
    "di",
    "ClassworkContainer",
    "LoggingProvider",
    "Settings",
    "Secrets",
    "TimestampProvider",
]


from . import di
from .config import Secrets, Settings
from .container import BootConfiguration, ClassworkContainer
from .provider import LoggingProvider, TimestampProvider
