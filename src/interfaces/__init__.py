"""Public interface definitions for all external service providers.

Every external API or storage backend used by gameScout is accessed
through the abstract base classes defined in this package.  Concrete
adapters implement these interfaces and are wired together in
``src/main.py``; unit tests inject mocks instead.

CONCRETE PROVIDER MAP:
    Interface              →  Concrete implementations (in src/providers/)
    ─────────────────────────────────────────────────────────────────
    ILLMProvider           →  OpenAILLMProvider, AnthropicLLMProvider,
                              OllamaLLMProvider
    ICatalogProvider       →  RawgCatalogProvider
    IRecommendationStore   →  SQLiteRecommendationStore
    ILibraryProvider       →  SQLiteLibraryProvider
"""

from src.interfaces.catalog_provider import ICatalogProvider
from src.interfaces.library_provider import ILibraryProvider
from src.interfaces.llm_provider import ILLMProvider
from src.interfaces.recommendation_store import IRecommendationStore

__all__ = [
    "ICatalogProvider",
    "ILLMProvider",
    "ILibraryProvider",
    "IRecommendationStore",
]
