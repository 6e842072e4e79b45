"""Building blocks for Protobuf tooling: input references, annotations, byte pools and a plugin runner."""

__version__ = "0.1.0"

__all__ = [
    "analysis",
    "bytepool",
    "cli",
    "configoverride",
    "diff",
    "encodingutil",
    "errs",
    "inputref",
    "logutil",
    "osutil",
    "plugin",
]