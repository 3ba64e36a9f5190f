from .error_classifier import Classification, ErrorCategory, ErrorClassifier
from .retry_strategy import BackoffPolicy

__all__ = [
    "Classification",
    "ErrorCategory",
    "ErrorClassifier",
    "BackoffPolicy",
]
