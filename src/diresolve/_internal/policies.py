from enum import Enum


class AmbiguityPolicy(str, Enum):
    """Policy for parameters that match several registered services."""

    ERROR = "error"
    """Raise an error listing every candidate service."""

    PREFER_PARAMETER_NAME = "prefer_parameter_name"
    """Bind the candidate whose service name equals the parameter name, if any."""
