__all__ = ["BootConfiguration", "ClassworkContainer", "StorageContainer"]

from .classwork import BootConfiguration, ClassworkContainer
from .storage import StorageContainer
