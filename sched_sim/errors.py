class ConfigurationError(ValueError):
    """Raised when a workload or policy parameter violates an engine precondition."""
