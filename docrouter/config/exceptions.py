class ConfigurationError(Exception):
    """Raised when a setting required by the selected operation is missing."""
