"""Natural-language to SQL generation over hosted chat-completion providers."""

__version__ = "0.1.0"
