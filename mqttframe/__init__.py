"""Encoder and decoder for MQTT v3.1 and v3.1.1 control packets."""

__version__ = "0.2.0"

__all__ = ["errors", "poll", "types", "utils", "v3"]