"""Provider configuration passed explicitly through the core library."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ProviderConfig:
    """Configuration for the oEmbed provider core library.

    Built once at process start and handed to the authorizer, response
    builder and request handler. Nothing in the core reads the process
    environment.

    Args:
        provider_name: Value emitted as ``provider_name`` on every response
        provider_url: Value emitted as ``provider_url`` on every response
        provider_domain: Domain content URLs must belong to. Subdomains are
            accepted. When unset every request fails with
            ``MISSING_PROVIDER_DOMAIN``.
    """

    provider_name: str = "oEmbed Provider"
    provider_url: str = "https://example.com"
    provider_domain: str | None = None
