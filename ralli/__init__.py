"""ralli - version range tooling for mods built against many game versions."""

__version__ = "0.1.0"
