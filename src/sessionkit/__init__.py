"""Client-side session and authenticated-request layer for bearer-token APIs."""

__version__ = "0.1.0"
