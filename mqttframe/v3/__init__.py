"""Packet codec for MQTT v3.1 and v3.1.1 publish, subscribe, acknowledgement and ping packets."""

__all__ = ["header", "packet", "poll", "publish", "subscribe"]