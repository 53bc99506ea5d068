class DecodingError(Exception):
    """Raised when a structured-output object is not a valid Document."""
