class VpaMetricsError(Exception):
    """Base exception for vpa_metrics."""

    pass


class InvalidQuantityError(VpaMetricsError, ValueError):
    """Raised when a resource quantity string cannot be parsed."""

    pass


class InvalidVpaObjectError(VpaMetricsError, ValueError):
    """Raised when a VerticalPodAutoscaler manifest cannot be turned into a Vpa."""

    pass


class MetricsRegistrationError(VpaMetricsError):
    """Raised when the recommender metrics cannot be registered."""

    pass
