"""Remote sleep advice client and error classification.

The advice service turns an AdviceDigest into a three-paragraph sleep report.
It is optional: every failure is classified here and the caller falls back
to the local narrative composer.

Error Classification:

    NOT_CONFIGURED: No advice URL set, or the service is disabled
    TIMEOUT: Request exceeded the configured timeout
    UNAVAILABLE: Connection or transport failure
    HTTP_ERROR: Service answered with a non-2xx status
    INVALID_RESPONSE: Body is not JSON, reports failure, or mismatches the schema
    INTERNAL_ERROR: Anything unexpected

The request is made once per analysis cycle. Nothing here retries.
"""

from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from sleep_insights_server.core.config import Settings
from sleep_insights_server.schemas.sleep import (
    AdviceDigest,
    AdviceErrorType,
    AnalysisSource,
    SleepAnalysis,
)

logger = structlog.get_logger()


class AdviceRequestError(Exception):
    """Advice request failed for a reason that is not a transport error."""

    def __init__(self, error_type: AdviceErrorType, message: str) -> None:
        super().__init__(message)
        self.error_type = error_type
        self.message = message


@dataclass
class AdviceError:
    """Classified advice failure.

    Attributes:
        error_type: Failure category
        message: Human-readable error message
        details: Additional error context as dict
        original_exception: The exception that caused this error
    """

    error_type: AdviceErrorType
    message: str
    details: dict[str, Any]
    original_exception: Exception | None = None

    def to_log_dict(self) -> dict[str, Any]:
        """Convert to dict for structured logging."""
        return {
            "error_type": self.error_type.value,
            "message": self.message,
            **self.details,
        }


class AdviceErrorHandler:
    """Classify advice request exceptions into AdviceError categories.

    Usage:
        handler = AdviceErrorHandler()

        try:
            analysis = await client.request_analysis(digest)
        except Exception as e:
            error = handler.classify(e, context={"window": "week"})
            analysis = composer.compose(insights, day_count)
    """

    def __init__(self) -> None:
        """Initialize error handler."""
        self.logger = logger.bind(component="advice_error_handler")

    def classify(
        self,
        exception: Exception,
        context: dict[str, Any] | None = None,
    ) -> AdviceError:
        """Classify an exception into an AdviceError.

        Args:
            exception: The exception to classify
            context: Additional context (window, data points, etc.)

        Returns:
            AdviceError with category and details
        """
        context = context or {}

        if isinstance(exception, AdviceRequestError):
            return self._build(exception.error_type, exception.message, exception, context)

        # HTTP client exceptions
        if isinstance(exception, httpx.TimeoutException):
            return self._build(
                AdviceErrorType.TIMEOUT,
                "Advice service request timed out",
                exception,
                context,
            )
        if isinstance(exception, httpx.HTTPStatusError):
            status_code = exception.response.status_code
            return self._build(
                AdviceErrorType.HTTP_ERROR,
                f"Advice service returned HTTP {status_code}",
                exception,
                {"status_code": status_code, **context},
            )
        if isinstance(exception, httpx.TransportError):
            return self._build(
                AdviceErrorType.UNAVAILABLE,
                f"Advice service unreachable: {exception}",
                exception,
                context,
            )

        # JSON decode and schema validation errors are both ValueErrors
        if isinstance(exception, ValueError):
            return self._build(
                AdviceErrorType.INVALID_RESPONSE,
                f"Invalid advice response: {exception}",
                exception,
                context,
            )

        return self._build(
            AdviceErrorType.INTERNAL_ERROR,
            f"Unexpected advice error: {type(exception).__name__}: {exception}",
            exception,
            context,
        )

    def _build(
        self,
        error_type: AdviceErrorType,
        message: str,
        exception: Exception,
        details: dict[str, Any],
    ) -> AdviceError:
        error = AdviceError(
            error_type=error_type,
            message=message,
            details=details,
            original_exception=exception,
        )
        if error_type == AdviceErrorType.NOT_CONFIGURED:
            # Expected on every request when no advice URL is set
            self.logger.debug("Advice service skipped", **error.to_log_dict())
        else:
            self.logger.warning("Advice request failed", **error.to_log_dict())
        return error


class AdviceClient:
    """HTTP client for the remote sleep advice service.

    The service receives the digest as JSON and answers with:

        {"success": true,
         "analysis": {"summary": "...", "qualityCategory": "good",
                      "sleepScore": 78, "dayCount": 7}}
    """

    def __init__(
        self,
        url: str,
        api_key: str | None = None,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize advice client.

        Args:
            url: Advice endpoint URL
            api_key: Optional bearer token
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.url = url
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport
        self.logger = logger.bind(service="advice")

    @classmethod
    def from_settings(cls, settings: Settings) -> "AdviceClient | None":
        """Create a client from settings, or None if advice is not configured."""
        if not settings.is_advice_configured() or settings.advice_url is None:
            return None
        return cls(
            url=settings.advice_url,
            api_key=settings.advice_api_key,
            timeout=settings.advice_timeout_seconds,
        )

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def request_analysis(self, digest: AdviceDigest) -> SleepAnalysis:
        """Request a narrative analysis for a digest.

        Args:
            digest: Window digest

        Returns:
            Remotely sourced SleepAnalysis

        Raises:
            httpx.HTTPError: On transport failure or non-2xx status
            AdviceRequestError: If the service reports failure
            ValueError: If the body is not valid JSON or mismatches the schema
        """
        self.logger.info(
            "Requesting sleep advice",
            url=self.url,
            data_points=digest.data_points,
        )

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.post(
                self.url,
                json=digest.model_dump(mode="json", by_alias=True),
                headers=self._headers(),
            )
            response.raise_for_status()
            body = response.json()

        if not isinstance(body, dict) or not body.get("success") or not body.get("analysis"):
            raise AdviceRequestError(
                AdviceErrorType.INVALID_RESPONSE,
                "Advice service did not return a successful analysis",
            )

        analysis = SleepAnalysis.model_validate(
            {**body["analysis"], "source": AnalysisSource.REMOTE}
        )
        self.logger.info(
            "Received sleep advice",
            quality_category=analysis.quality_category.value,
            sleep_score=analysis.sleep_score,
        )
        return analysis
