"""Save Reddit posts into user-chosen Notion databases."""

__version__ = "0.1.0"
