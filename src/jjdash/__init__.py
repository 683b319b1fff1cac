"""jjdash - a terminal dashboard for jujutsu repositories."""

__version__ = "0.3.0"
