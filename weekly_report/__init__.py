"""Weekly status reports generated from structured GitHub issue comments."""

__version__ = "0.1.0"
