from .resolve_source import resolve_source, USAGE

__all__ = ["resolve_source", "USAGE"]
