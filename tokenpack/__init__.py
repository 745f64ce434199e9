"""Token-budgeted source file selection and packing."""

__version__ = "0.3.0"
