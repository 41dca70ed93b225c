from .extra import ExtraFormatter

__all__ = ["ExtraFormatter"]
