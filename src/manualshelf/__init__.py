"""ManualShelf - index and browse a personal library of PDF manuals."""

__version__ = "0.1.0"
