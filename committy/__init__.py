"""AI-generated Conventional Commit messages for staged git changes."""

__version__ = "0.1.0"
