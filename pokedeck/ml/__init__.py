from pokedeck.ml.completion import AnthropicCompletionClient, CompletionGenerator
from pokedeck.ml.embeddings import (
    EmbeddingGenerator,
    HttpEmbeddingClient,
    get_embedding_client,
    reset_embedding_client,
)

__all__ = [
    "AnthropicCompletionClient",
    "CompletionGenerator",
    "EmbeddingGenerator",
    "HttpEmbeddingClient",
    "get_embedding_client",
    "reset_embedding_client",
]
