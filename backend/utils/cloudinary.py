import logging
import os

import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import BadRequest, Error as CloudinaryError
from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool

from config.constants import ALLOWED_IMAGE_FORMATS, ALLOWED_IMAGE_CONTENT_TYPES
from utils.errors import UploadRejected, InternalError

logger = logging.getLogger(__name__)


class UploadRelay:
    """
    Forwards image uploads to Cloudinary and hands back the hosted URL.
    Nothing is written to the database here.
    """

    def __init__(
        self,
        cloud_name: str | None,
        api_key: str | None,
        api_secret: str | None,
        folder: str = "shops",
        allowed_formats=ALLOWED_IMAGE_FORMATS,
    ):
        self.folder = folder
        self.allowed_formats = tuple(allowed_formats)

        cloudinary.config(
            cloud_name=cloud_name,
            api_key=api_key,
            api_secret=api_secret,
            secure=True,
        )

    def _check_format(self, file: UploadFile) -> None:
        ext = os.path.splitext(file.filename or "")[1].lstrip(".").lower()
        content_type = (file.content_type or "").lower()

        if ext and ext not in self.allowed_formats:
            raise UploadRejected(
                f"Only {', '.join(self.allowed_formats)} images are allowed"
            )
        if content_type not in ALLOWED_IMAGE_CONTENT_TYPES:
            raise UploadRejected(
                f"Only {', '.join(self.allowed_formats)} images are allowed"
            )

    def _upload(self, fileobj) -> dict:
        return cloudinary.uploader.upload(
            fileobj,
            folder=self.folder,
            resource_type="image",
            allowed_formats=list(self.allowed_formats),
        )

    async def store(self, file: UploadFile) -> str:
        self._check_format(file)

        try:
            result = await run_in_threadpool(self._upload, file.file)
        except BadRequest as e:
            logger.info("IMAGE_UPLOAD_REJECTED file=%s reason=%s", file.filename, e)
            raise UploadRejected("Invalid image file")
        except CloudinaryError:
            logger.exception("IMAGE_UPLOAD_ERROR file=%s", file.filename)
            raise InternalError()

        url = result.get("secure_url")
        if not url:
            logger.error("IMAGE_UPLOAD_ERROR no url returned file=%s", file.filename)
            raise InternalError()

        return url
