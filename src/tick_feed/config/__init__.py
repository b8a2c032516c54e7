from tick_feed.config.schema import (
    EndpointConfig,
    OperationalLimits,
    OutputConfig,
    RetryPolicy,
    TickFeedConfig,
    validate_config,
)

__all__ = [
    "EndpointConfig",
    "OperationalLimits",
    "OutputConfig",
    "RetryPolicy",
    "TickFeedConfig",
    "validate_config",
]
