"""Comment Guard - classify and remediate policy-violating video comments."""

__version__ = "0.1.0"
