"""Exception types raised by the recommendation core"""


class RecommendationError(Exception):
    """Base class for recommendation errors"""


class ValidationError(RecommendationError):
    """Invalid caller input, raised before any store or cache access"""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class UpstreamUnavailable(RecommendationError):
    """The LLM provider timed out, failed, or returned unusable output"""

    def __init__(self, cause: str, message: str = ""):
        self.cause = cause
        super().__init__(message or cause)
