from .errors import (
    CatalogError,
    ClassifierDimensionError,
    IntentRouterError,
    MethodTimeoutError,
    PermanentError,
    ProviderError,
    TransientError,
    ValidationError,
)

__all__ = [
    'IntentRouterError',
    'TransientError',
    'PermanentError',
    'ValidationError',
    'ProviderError',
    'MethodTimeoutError',
    'ClassifierDimensionError',
    'CatalogError',
]
