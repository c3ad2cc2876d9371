"""
Error types raised by the bitmap-font build.

Every fatal condition derives from `AtlasBuildError` so the CLI can map the
whole family to a single exit status. Messages always carry the offending
path (or the missing resource) so a failed run can be fixed and re-run.
"""

from __future__ import annotations

__all__ = [
    "AtlasBuildError",
    "ConfigError",
    "ConfigMissingError",
    "ConfigInvalidError",
    "FontUnreadableError",
    "NoFontsConfiguredError",
    "AtlasCapacityError",
    "OutputWriteError",
]


class AtlasBuildError(RuntimeError):
    """Base class for fatal build errors."""


class ConfigError(AtlasBuildError):
    pass


class ConfigMissingError(ConfigError):
    pass


class ConfigInvalidError(ConfigError):
    pass


class FontUnreadableError(AtlasBuildError):
    pass


class NoFontsConfiguredError(AtlasBuildError):
    pass


class AtlasCapacityError(AtlasBuildError):
    """A single glyph cell does not fit into an empty atlas page."""


class OutputWriteError(AtlasBuildError):
    def __init__(self, path, cause: OSError):
        super().__init__(f"Failed to write {path}: {cause}")
        self.path = path
        self.cause = cause
