"""chartfile: read, validate, migrate and write .ownchart project files."""

__version__ = "0.1.0"
