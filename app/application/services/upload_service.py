import logging
import mimetypes
import os
import random
import string
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Dict

from starlette.concurrency import run_in_threadpool

from ..dto import CompressedImage, UploadableFile, UploadResult
from ..ports.image_store import ImageStore
from ..ports.upload_cache import CacheEntry, UploadCache
from ..results import Failure, Outcome, Success
from .image_validator import ImageValidator
from ...config import Settings
from ...exceptions import NotFound, StoreUnavailable, TooLarge, UploadError
from ...image_encoding import is_data_url, parse_data_url, to_data_url
from ...media_utils import compress_image, select_compression_profile

logger = logging.getLogger(__name__)


def new_image_id() -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"img_{int(time.time()*1000)}_{suffix}"


@dataclass
class UploadService:
    """
    Single entry point used by the dashboard for image uploads.

    An upload runs validate -> compress -> encode -> persist -> cache. The first
    failing stage aborts the whole sequence and its error reaches the caller
    unchanged; the cache is only written once persistence has succeeded.
    """
    cache: UploadCache
    store: ImageStore
    validator: ImageValidator
    settings: Settings

    async def upload_image(self, file: UploadableFile) -> UploadResult:
        self.validator.validate(file)

        if self.validator.needs_compression(file):
            max_dimension, quality = select_compression_profile(file.size, self.settings)
            logger.info(f"Compressing {file.filename} ({file.size // 1024}KB) to {max_dimension}px at quality {quality}")
        else:
            max_dimension, quality = self.settings.COMPRESSION_MAX_DIMENSION, self.settings.COMPRESSION_QUALITY
        compressed = await run_in_threadpool(
            compress_image,
            file,
            quality,
            max_dimension,
            self.settings.COMPRESSION_TARGET_BYTES,
            self.settings.MAX_COMPRESSION_ATTEMPTS,
        )

        ref, inline = await self._persist(compressed, file.filename)

        result = UploadResult(
            ref=ref,
            id=new_image_id(),
            inline=inline,
            content_type=compressed.content_type,
            size=compressed.size,
            width=compressed.width,
            height=compressed.height,
        )
        self.cache.put(ref, CacheEntry(
            ref=ref,
            id=result.id,
            size=result.size,
            created_at=datetime.utcnow(),
            source_ref=file.filename,
            content_type=result.content_type,
            inline=inline,
            original_size=file.size,
            width=result.width,
            height=result.height,
        ))
        logger.info(
            f"Image {result.id} uploaded ({file.size // 1024}KB -> {result.size // 1024}KB, "
            f"{'inline' if inline else 'remote'})"
        )
        return result

    async def upload_base64(self, image: str, filename: str = "upload") -> UploadResult:
        content_type, data = parse_data_url(image)
        return await self.upload_image(UploadableFile.from_bytes(data, content_type, filename))

    async def delete_image(self, ref: str) -> bool:
        try:
            entry = self.cache.get(ref)
        except NotFound:
            if is_data_url(ref):
                raise
            # evicted or cleared; the store still knows remote refs
            await self._call_store(self.store.delete, ref)
            logger.info("Untracked image deleted from store")
            return True
        if not entry.inline:
            await self._call_store(self.store.delete, ref)
        self.cache.remove(ref)
        logger.info(f"Image {entry.id} deleted")
        return True

    async def create_image_preview(self, file: UploadableFile) -> str:
        self.validator.validate(file)
        preview = await run_in_threadpool(
            compress_image,
            file,
            self.settings.PREVIEW_QUALITY,
            self.settings.PREVIEW_MAX_DIMENSION,
        )
        return to_data_url(preview.data, preview.content_type)

    def get_uploaded_images_metadata(self) -> Dict[str, CacheEntry]:
        return self.cache.snapshot()

    def clear_image_cache(self) -> None:
        self.cache.clear()
        logger.info("Image cache cleared")

    async def try_upload_image(self, file: UploadableFile) -> Outcome[UploadResult]:
        try:
            return Success(await self.upload_image(file))
        except UploadError as e:
            logger.warning(f"Upload of {file.filename} failed: {e.kind.value}: {e.message}")
            return Failure.from_error(e)

    async def try_delete_image(self, ref: str) -> Outcome[bool]:
        try:
            return Success(await self.delete_image(ref))
        except UploadError as e:
            logger.warning(f"Delete failed: {e.kind.value}: {e.message}")
            return Failure.from_error(e)

    async def _persist(self, compressed: CompressedImage, filename: str):
        mode = self.settings.PERSISTENCE_MODE
        limit = self.settings.INLINE_MAX_BASE64_SIZE
        if mode != "remote":
            data_url = to_data_url(compressed.data, compressed.content_type)
            if len(data_url) <= limit:
                return data_url, True
            if mode == "inline":
                raise TooLarge(
                    f"Image too large after compression ({len(data_url) // 1024}KB). Limit: {limit // 1024}KB"
                )
            logger.info(f"Encoded image is {len(data_url) // 1024}KB, storing remotely")

        ext = mimetypes.guess_extension(compressed.content_type) or ""
        name = os.path.splitext(os.path.basename(filename))[0] or "upload"
        url = await self._call_store(self.store.store, compressed.data, f"{name}{ext}", compressed.content_type)
        return url, False

    async def _call_store(self, fn, *args):
        try:
            return await run_in_threadpool(fn, *args)
        except UploadError:
            raise
        except Exception as e:
            raise StoreUnavailable(f"Image store unavailable: {e}") from e
