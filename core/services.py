"""
Process-wide collaborators, created once in the app lifespan and injected into
routes through FastAPI dependencies.
"""
from dataclasses import dataclass
from typing import Optional

from fastapi import Request
from throttled import Throttled

from core.config import (
    ADMIN_ALLOWLIST_IPS,
    ADMIN_SECRET,
    CLOUDINARY_FOLDER,
    MAX_IMAGES,
    UPLOAD_CONCURRENCY,
    logger,
)
from utils.cloudinary import CloudinaryUploader
from utils.emailing import Notifier
from utils.rate_limit import build_submit_throttle
from utils.store import SubmissionStore
from utils.workflow import SubmissionWorkflow


@dataclass
class Services:
    store: SubmissionStore
    uploader: CloudinaryUploader
    notifier: Notifier
    workflow: SubmissionWorkflow
    submit_throttle: Optional[Throttled] = None
    admin_secret: str = ""
    admin_allowlist_ips: Optional[list] = None


def build_services() -> Services:
    store = SubmissionStore()
    store.initialize()
    uploader = CloudinaryUploader()
    notifier = Notifier()
    if not uploader.configured:
        logger.warning("Cloudinary not configured; submissions with images will fail")
    else:
        logger.info(f"Cloudinary uploads enabled (folder={CLOUDINARY_FOLDER})")
    if not notifier.enabled:
        logger.warning("SMTP_HOST not set; email notifications disabled")
    if not ADMIN_SECRET:
        logger.warning("ADMIN_SECRET not set; admin listing is disabled")
    workflow = SubmissionWorkflow(
        store, uploader, notifier, upload_concurrency=UPLOAD_CONCURRENCY, max_images=MAX_IMAGES
    )
    return Services(
        store=store,
        uploader=uploader,
        notifier=notifier,
        workflow=workflow,
        submit_throttle=build_submit_throttle(),
        admin_secret=ADMIN_SECRET,
        admin_allowlist_ips=ADMIN_ALLOWLIST_IPS,
    )


async def close_services(services: Services) -> None:
    try:
        await services.uploader.close()
    finally:
        services.store.dispose()


def get_services(request: Request) -> Services:
    return request.app.state.services
