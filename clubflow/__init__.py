# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Clubflow — membership, course workflow and announcement fan-out."""

__version__ = "1.0.0"
