from __future__ import annotations

from typing import Optional

from docker_service.docker_client import DockerClient
from docker_service.errors import CommandError, ImagePullFailure
from docker_service.logger import EventLogger


class ImageResolver:
    def __init__(self, image: str, client: DockerClient, logger: Optional[EventLogger] = None):
        self.image = image
        self.client = client
        self.logger = logger

    async def is_present(self) -> bool:
        # Any inspect failure counts as "absent", transient errors included.
        try:
            await self.client.inspect_image(self.image)
        except CommandError:
            return False
        return True

    async def pull(self) -> None:
        if self.logger:
            self.logger.info("pulling image", stage="image", data={"image": self.image})
        try:
            await self.client.pull_image(self.image)
        except CommandError as exc:
            if self.logger:
                self.logger.error("image pull failed", stage="image", data={"image": self.image, "error": str(exc)})
            raise ImagePullFailure(self.image, exc.result) from exc

    async def ensure_present(self) -> bool:
        """Pull the image unless it is already local; return True if a pull happened."""
        if await self.is_present():
            return False
        await self.pull()
        return True
