"""a42z Judge Gateway - request proxy and judge dispatch for the a42z judging UI."""

__version__ = "1.0.0"
