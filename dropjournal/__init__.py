"""Drop journal service: daily questions, companion chat and periodic analyses."""

__version__ = "0.1.0"
