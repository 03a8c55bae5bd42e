from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse

from core.auth import client_ip
from core.config import logger
from core.errors import SubmissionError, ValidationError
from core.services import Services, get_services
from utils.rate_limit import check_submit_rate_limit
from utils.workflow import ImageFile, SubmissionForm

router = APIRouter(prefix="/api", tags=["submit"])


def _server_error(details: str) -> JSONResponse:
    return JSONResponse({"error": "Server error", "details": details}, status_code=500)


@router.post("/submit")
async def submit(
    request: Request,
    name: Optional[str] = Form(None),
    contact: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    links: Optional[str] = Form(None),
    images: Optional[List[UploadFile]] = File(None),
    services: Services = Depends(get_services),
):
    ip = client_ip(request)
    allowed, msg = check_submit_rate_limit(services.submit_throttle, ip)
    if not allowed:
        logger.warning(f"[submit] rate limited ip={ip}")
        return JSONResponse({"error": msg}, status_code=429)

    try:
        files: List[ImageFile] = []
        for up in images or []:
            # Browsers send an empty part when no file was chosen
            if not up.filename and not up.size:
                continue
            files.append(ImageFile(filename=up.filename, content=await up.read()))

        form = SubmissionForm(name=name, contact=contact, email=email, links=links, images=files)
        logger.info(f"[submit] received images={len(files)} ip={ip}")
        result = await services.workflow.submit(form)
        return result
    except ValidationError as ex:
        return JSONResponse({"error": ex.message}, status_code=400)
    except SubmissionError as ex:
        logger.exception(f"[submit] failed: {ex}")
        return _server_error(ex.message)
    except Exception as ex:
        logger.exception(f"[submit] unexpected error: {ex}")
        return _server_error(str(ex))
