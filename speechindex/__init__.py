"""speechindex -- token-bounded speech segmentation and vector-store loading."""

__version__ = "0.3.0"
