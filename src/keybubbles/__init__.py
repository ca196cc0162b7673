"""KeyBubbles — terminal keyboard visualizer."""

__version__ = "0.1.0"
