"""PharmaTrace: batch custody tracking from manufacturer to pharmacy shelf."""

__version__ = "0.1.0"
