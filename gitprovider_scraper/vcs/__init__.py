"""
Query provider layer for gitprovider-scraper.

Each git-hosting platform is a provider that executes single paged queries.
One scraper instance uses exactly one provider.
"""

from gitprovider_scraper.vcs.base import BaseQueryProvider
from gitprovider_scraper.vcs.github import GitHubProvider

__all__ = [
    "BaseQueryProvider",
    "GitHubProvider",
    "get_query_provider",
    "register_query_provider",
    "list_supported_platforms",
]

# Registry of supported query providers
_PROVIDERS: dict[str, type[BaseQueryProvider]] = {
    "github": GitHubProvider,
}


def get_query_provider(platform: str = "github", **kwargs) -> BaseQueryProvider:
    """
    Factory function to get a query provider instance.

    Args:
        platform: Platform name ('github', ...). Default: 'github'
        **kwargs: Provider-specific configuration (e.g., token, endpoint)

    Returns:
        Initialized provider instance

    Raises:
        ValueError: If platform is not supported

    Example:
        >>> provider = get_query_provider("github", token="ghp_xxx")
    """
    platform_lower = platform.lower()

    if platform_lower not in _PROVIDERS:
        supported = ", ".join(sorted(_PROVIDERS.keys()))
        raise ValueError(
            f"Unsupported platform: {platform}. Supported platforms: {supported}"
        )

    provider_class = _PROVIDERS[platform_lower]
    return provider_class(**kwargs)


def register_query_provider(
    platform: str, provider_class: type[BaseQueryProvider]
) -> None:
    """
    Register a custom query provider.

    Raises:
        TypeError: If provider_class doesn't inherit from BaseQueryProvider
    """
    if not issubclass(provider_class, BaseQueryProvider):
        raise TypeError(
            f"Provider class must inherit from BaseQueryProvider, "
            f"got {type(provider_class)}"
        )

    _PROVIDERS[platform.lower()] = provider_class


def list_supported_platforms() -> list[str]:
    """List all supported platforms, sorted."""
    return sorted(_PROVIDERS.keys())
