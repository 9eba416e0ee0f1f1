"""Image Client — FAL text-to-image with a Pollinations URL fallback.

Invariants:
    - create_image never raises: any FAL failure (missing key, HTTP error,
      empty image list, transport error) degrades to a Pollinations URL
    - Pollinations URLs are 1024x1024, unbranded, seeded with the current epoch ms
"""

import logging
from urllib.parse import quote

import httpx

from artiquity.core.timestamps import epoch_ms

logger = logging.getLogger(__name__)

PROVIDER = "fal"


class ImageClient:
    def __init__(
        self,
        fal_api_key: str = "",
        fal_model: str = "fal-ai/nano-banana",
        fal_base_url: str = "https://fal.run",
        pollinations_base_url: str = "https://image.pollinations.ai/prompt",
        timeout_seconds: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.fal_api_key = fal_api_key
        self.fal_url = f"{fal_base_url.rstrip('/')}/{fal_model}"
        self.pollinations_base_url = pollinations_base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    def preview_url(self, prompt: str) -> str:
        return (
            f"{self.pollinations_base_url}/{quote(prompt, safe='')}"
            f"?width=1024&height=1024&nologo=true&seed={epoch_ms()}"
        )

    async def create_image(self, prompt: str) -> str:
        if not self.fal_api_key:
            logger.info("FAL key not configured, using Pollinations", extra={"provider": PROVIDER})
            return self.preview_url(prompt)
        try:
            url = await self._fal_image(prompt)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"FAL request failed, using Pollinations: {e}", extra={"provider": PROVIDER})
            return self.preview_url(prompt)
        if url is None:
            logger.warning("FAL returned no image, using Pollinations", extra={"provider": PROVIDER})
            return self.preview_url(prompt)
        return url

    async def _fal_image(self, prompt: str) -> str | None:
        async with httpx.AsyncClient(
            timeout=self.timeout_seconds, transport=self.transport,
        ) as client:
            response = await client.post(
                self.fal_url,
                headers={"Authorization": f"Key {self.fal_api_key}"},
                json={
                    "prompt": prompt,
                    "image_size": "square",
                    "num_inference_steps": 4,
                    "num_images": 1,
                    "enable_safety_checker": True,
                },
            )
        if response.status_code >= 400:
            logger.warning(
                f"FAL API error: {response.status_code}",
                extra={"provider": PROVIDER, "status_code": response.status_code},
            )
            return None
        images = response.json().get("images") or []
        if not images:
            return None
        return images[0].get("url")
