# Error taxonomy for the relay
from typing import Optional


class RelayError(Exception):
    pass


class ConfigError(RelayError):
    """Invalid bridge definition or administrative request."""


class BridgeNotFound(ConfigError):
    def __init__(self, bridge_id: str):
        super().__init__("Bridge not found!")
        self.bridge_id = bridge_id


class InvalidChannel(ConfigError):
    def __init__(self, channel_id, reason: str = "Channel must be a text channel!"):
        super().__init__(reason)
        self.channel_id = channel_id


class InvariantViolation(ConfigError):
    pass


class ProvisionError(RelayError):
    def __init__(self, channel_id: int, reason: str):
        super().__init__(f"Could not provision webhook for channel {channel_id}: {reason}")
        self.channel_id = channel_id


class DeliveryError(RelayError):
    def __init__(self, channel_id: int, action: str, reason: Optional[str] = None):
        message = f"Failed to {action} message in channel {channel_id}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.channel_id = channel_id
        self.action = action
