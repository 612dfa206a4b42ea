"""stepforge: compile Given/When/Then step sentences into step definitions."""

__version__ = "0.1.0"
