__all__ = [
    "AuthSettings",
    "ClassworkWebSettings",
    "LedgerSettings",
    "LoggingSettings",
    "Secrets",
    "Settings",
    "StorageSettings",
    "WebSettings",
]


from .ledger import LedgerSettings
from .logging import LoggingSettings
from .secrets import Secrets
from .settings import Settings
from .storage import StorageSettings
from .web import AuthSettings, ClassworkWebSettings, WebSettings
