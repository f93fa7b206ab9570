"""Price-drop alerting pipeline for favorited stock symbols."""

__version__ = "0.1.0"
