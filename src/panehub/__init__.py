"""panehub - terminal pane/tab layout engine"""

__version__ = "0.1.0"
