"""fretscale: scale-to-fretboard mapping engine for extended-range guitars."""

__version__ = "0.1.0"
