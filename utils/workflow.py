"""
Submission workflow: validate -> parse links -> upload images -> persist -> notify.

Single pass, no retries and no compensation. Uploaded assets stay in place if a
later step fails, and a notification failure is reported even though the row
has already been stored.
"""
import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence

from starlette.concurrency import run_in_threadpool

from core.config import UPLOAD_CONCURRENCY, MAX_IMAGES, logger
from core.errors import UploadError, ValidationError
from utils.validation import parse_product_links, validate_image_count, validate_required


class Uploader(Protocol):
    async def upload(self, buffer: bytes, filename: Optional[str] = None) -> str: ...


@dataclass
class ImageFile:
    filename: Optional[str]
    content: bytes


@dataclass
class SubmissionForm:
    name: Optional[str] = None
    contact: Optional[str] = None
    email: Optional[str] = None
    links: Optional[str] = None
    images: List[ImageFile] = field(default_factory=list)


class SubmissionWorkflow:
    def __init__(
        self,
        store,
        uploader: Uploader,
        notifier,
        upload_concurrency: int = UPLOAD_CONCURRENCY,
        max_images: int = MAX_IMAGES,
    ):
        self.store = store
        self.uploader = uploader
        self.notifier = notifier
        self.upload_concurrency = max(1, int(upload_concurrency or 1))
        self.max_images = max_images

    async def submit(self, form: SubmissionForm) -> Dict[str, Any]:
        started = time.monotonic()

        ok, err = validate_required(form.name, form.contact)
        if not ok:
            raise ValidationError(err)
        ok, err = validate_image_count(len(form.images), self.max_images)
        if not ok:
            raise ValidationError(err)

        name = form.name.strip()
        contact = form.contact.strip()
        email = (form.email or "").strip()
        links = parse_product_links(form.links)

        image_urls = await self._upload_all(form.images)

        submission_id = await run_in_threadpool(
            self.store.insert, name, contact, email, links, image_urls
        )

        submission = {
            "id": submission_id,
            "name": name,
            "contact": contact,
            "email": email,
            "product_links": links,
            "image_urls": image_urls,
        }
        if self.notifier.enabled:
            await self.notifier.notify_internal(submission)
            if email:
                await self.notifier.notify_customer(submission)
        else:
            logger.info("[submit] mail relay not configured; skipping notifications")

        logger.info(
            f"[submit] done id={submission_id} links={len(links)} images={len(image_urls)} "
            f"elapsed={time.monotonic() - started:.2f}s"
        )
        return {"success": True}

    async def _upload_all(self, images: Sequence[ImageFile]) -> List[str]:
        if not images:
            return []
        if self.upload_concurrency == 1:
            urls: List[str] = []
            for idx, img in enumerate(images):
                urls.append(await self._upload_one(idx, img))
            return urls

        sem = asyncio.Semaphore(self.upload_concurrency)

        async def _bounded(idx: int, img: ImageFile) -> str:
            async with sem:
                return await self._upload_one(idx, img)

        tasks = [asyncio.ensure_future(_bounded(i, img)) for i, img in enumerate(images)]
        try:
            # gather keeps results in attachment order
            return list(await asyncio.gather(*tasks))
        except BaseException:
            # first failure aborts: stop running uploads and never start queued ones
            for t in tasks:
                if not t.done():
                    t.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _upload_one(self, idx: int, img: ImageFile) -> str:
        try:
            return await self.uploader.upload(img.content, img.filename)
        except UploadError:
            logger.warning(f"[submit] upload failed at index={idx} filename={img.filename}")
            raise
        except Exception as ex:
            logger.warning(f"[submit] upload failed at index={idx} filename={img.filename}: {ex!r}")
            raise UploadError(f"Image upload failed: {ex}", ex) from ex
