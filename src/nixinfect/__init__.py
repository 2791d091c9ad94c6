"""nixinfect: turn a running Linux host into NixOS configuration."""

__version__ = "0.1.0"
