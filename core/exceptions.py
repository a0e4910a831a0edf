"""Error types raised by the synchronisation engine."""


class AutodocsError(Exception):
    """Base exception for all autodocs errors."""


class ConfigError(AutodocsError):
    """Invalid configuration file or value."""


class ParseError(AutodocsError):
    """A source file could not be parsed; fatal for that file only."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"Failed to parse {path}: {message}")


class GenerationError(AutodocsError):
    """The generation service could not produce a docstring for one comment."""


class MissingCodeSpanError(AutodocsError):
    """A managed comment has no code after it, so it cannot be fingerprinted."""


class WriteError(AutodocsError):
    """Persisting a regenerated file failed."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"Failed to write {path}: {message}")
