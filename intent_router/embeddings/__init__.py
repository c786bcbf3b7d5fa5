from .embedding_service import EmbeddingService
from .local_embedding import local_embedding
from .provider import EmbeddingProvider, OpenAIEmbeddingProvider
from .vector_ops import cosine_similarity, l2_normalize

__all__ = [
    "EmbeddingService",
    "EmbeddingProvider",
    "OpenAIEmbeddingProvider",
    "cosine_similarity",
    "l2_normalize",
    "local_embedding",
]
