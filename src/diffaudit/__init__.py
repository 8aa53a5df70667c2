"""diffaudit — stream an AI security review onto a unified diff."""

__version__ = "0.1.0"
