"""AWS Knowledge Hub: answers AWS questions from official documentation."""

__version__ = "0.1.0"
