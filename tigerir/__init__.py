"""IR construction for a Tiger compiler: symbols, temps, types, trees, x86-64 frames, translation and a runtime library."""

__version__ = "0.1.0"