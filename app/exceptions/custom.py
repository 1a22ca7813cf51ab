class LiteApiError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class RateLimitError(Exception):
    def __init__(self, service: str):
        self.service = service
        super().__init__(f"Rate limit exceeded for {service}")


class GenerationError(Exception):
    """The generation capability failed or returned an unusable payload."""

    def __init__(self, message: str, reason: str = "api_error"):
        self.message = message
        self.reason = reason  # "api_error" | "unparseable" | "invalid_schema"
        super().__init__(message)


class InvalidInsightsRequest(Exception):
    def __init__(self, error: str, message: str):
        self.error = error
        self.message = message
        super().__init__(f"{error}: {message}")


class InsightsPipelineError(Exception):
    def __init__(self, message: str, performance: dict | None = None):
        self.message = message
        self.performance = performance or {}
        super().__init__(message)
