"""Example: Produce oEmbed responses using the oembed_provider library."""

import asyncio

from oembed_provider import PatternMetadataBackend, ProviderConfig, handle_oembed_request


async def main():
    """Request a JSON video embed and an XML photo embed."""
    # Configure the provider
    config = ProviderConfig(
        provider_name="My Business",
        provider_url="https://mybusiness.com",
        provider_domain="mybusiness.com",
    )
    backend = PatternMetadataBackend()

    video = await handle_oembed_request(
        {"url": "https://mybusiness.com/video/123", "maxwidth": "800", "maxheight": "600"},
        config,
        backend,
    )
    print(f"Video ({video.status_code}, {video.media_type}):\n{video.body}\n")

    photo = await handle_oembed_request(
        {"url": "https://mybusiness.com/photo/sunset", "format": "xml"},
        config,
        backend,
    )
    print(f"Photo ({photo.status_code}, {photo.media_type}):\n{photo.body}\n")

    # Content outside the provider domain is rejected
    rejected = await handle_oembed_request({"url": "https://other-domain.com/video/1"}, config, backend)
    print(f"Rejected ({rejected.status_code}):\n{rejected.body}")


if __name__ == "__main__":
    asyncio.run(main())
