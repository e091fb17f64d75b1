"""assistctl: async client and CLI for assistants, vector stores and files."""

__version__ = "0.4.0"
