"""스토리지 서비스 — S3 또는 로컬 파일 저장.

Storage Service — Attachment storage on S3 or the local disk.
AWS 키가 비어있으면 자동으로 로컬 모드로 전환됩니다.
로컬 파일은 /uploads/<key> 경로로 반환되고, S3 파일은 객체 URL로 반환됩니다.
메서드는 동기(blocking) 호출이므로 라우터에서는 run_in_threadpool로 실행합니다.
"""

import logging
import mimetypes
import uuid
from datetime import datetime, timezone
from pathlib import Path

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from app.config import Settings
from app.utils.exceptions import NotFoundError, StorageError

logger = logging.getLogger(__name__)

# 로컬 업로드 디렉토리 기본값 — <project>/uploads/
_PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent.parent
LOCAL_URL_PREFIX = "/uploads/"


class StorageService:
    """파일 업로드 서비스 — S3 또는 로컬 모드 자동 선택."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.uploads_dir: Path = (
            Path(settings.LOCAL_UPLOADS_DIR) if settings.LOCAL_UPLOADS_DIR else _PROJECT_ROOT / "uploads"
        ).resolve()
        self._client = None

    @property
    def is_local(self) -> bool:
        return not self.settings.AWS_ACCESS_KEY_ID or not self.settings.AWS_S3_BUCKET

    @property
    def client(self):
        if self.is_local:
            return None
        if self._client is None:
            self._client = boto3.client(
                "s3",
                region_name=self.settings.AWS_S3_REGION,
                aws_access_key_id=self.settings.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=self.settings.AWS_SECRET_ACCESS_KEY,
                config=BotoConfig(signature_version="s3v4"),
            )
        return self._client

    @property
    def s3_prefix(self) -> str:
        return f"https://{self.settings.AWS_S3_BUCKET}.s3.{self.settings.AWS_S3_REGION}.amazonaws.com/"

    def _generate_key(self, filename: str, folder: str) -> str:
        ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else "bin"
        date_prefix = datetime.now(timezone.utc).strftime("%Y/%m/%d")
        return f"{folder}/{date_prefix}/{uuid.uuid4().hex}.{ext}"

    def save(self, data: bytes, filename: str, content_type: str, folder: str = "errors") -> str:
        """파일을 저장하고 참조 경로를 반환합니다.

        Store the bytes under a fresh key. Returns "/uploads/<key>" in local
        mode or the S3 object URL otherwise.

        Raises:
            StorageError: S3 업로드 실패 (S3 upload failed)
        """
        key = self._generate_key(filename, folder)

        if self.is_local:
            path = self.uploads_dir / key
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
            logger.info("attachment stored locally key=%s size=%d", key, len(data))
            return f"{LOCAL_URL_PREFIX}{key}"

        try:
            self.client.put_object(
                Bucket=self.settings.AWS_S3_BUCKET,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as exc:
            logger.exception("s3 upload failed key=%s", key)
            raise StorageError("Attachment storage unavailable") from exc
        logger.info("attachment stored on s3 key=%s size=%d", key, len(data))
        return f"{self.s3_prefix}{key}"

    def resolve_local(self, key: str) -> Path:
        """로컬 키를 실제 파일 경로로 변환합니다. 업로드 폴더 밖은 거부합니다.

        Raises:
            NotFoundError: 파일이 없거나 업로드 폴더 밖의 경로 (Missing or outside the uploads dir)
        """
        path = (self.uploads_dir / key).resolve()
        if not path.is_relative_to(self.uploads_dir) or not path.is_file():
            raise NotFoundError("첨부파일을 찾을 수 없습니다 (Attachment not found)")
        return path

    def read(self, file_path: str) -> tuple[bytes, str]:
        """저장된 파일을 (내용, content type)으로 읽습니다.

        Load a stored attachment back from its reference path.

        Raises:
            NotFoundError: 알 수 없는 경로 또는 없는 파일 (Unknown or missing file)
            StorageError: S3 읽기 실패 (S3 read failed)
        """
        if file_path.startswith(LOCAL_URL_PREFIX):
            path = self.resolve_local(file_path[len(LOCAL_URL_PREFIX):])
            content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
            return path.read_bytes(), content_type

        if not self.is_local and file_path.startswith(self.s3_prefix):
            key = file_path[len(self.s3_prefix):]
            try:
                obj = self.client.get_object(Bucket=self.settings.AWS_S3_BUCKET, Key=key)
            except ClientError as exc:
                if exc.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                    raise NotFoundError("첨부파일을 찾을 수 없습니다 (Attachment not found)") from exc
                logger.exception("s3 read failed key=%s", key)
                raise StorageError("Attachment storage unavailable") from exc
            except BotoCoreError as exc:
                logger.exception("s3 read failed key=%s", key)
                raise StorageError("Attachment storage unavailable") from exc
            return obj["Body"].read(), obj.get("ContentType") or "application/octet-stream"

        raise NotFoundError("첨부파일을 찾을 수 없습니다 (Attachment not found)")

    def delete(self, file_path: str) -> None:
        """저장된 파일을 삭제합니다. 없는 파일은 무시합니다.

        Remove a stored attachment by its reference path; used to clean up
        uploads whose report was never persisted.
        """
        if file_path.startswith(LOCAL_URL_PREFIX):
            try:
                path = self.resolve_local(file_path[len(LOCAL_URL_PREFIX):])
            except NotFoundError:
                return
            path.unlink(missing_ok=True)
            logger.info("attachment removed locally path=%s", file_path)
            return

        if not self.is_local and file_path.startswith(self.s3_prefix):
            key = file_path[len(self.s3_prefix):]
            try:
                self.client.delete_object(Bucket=self.settings.AWS_S3_BUCKET, Key=key)
            except (BotoCoreError, ClientError) as exc:
                logger.exception("s3 delete failed key=%s", key)
                raise StorageError("Attachment storage unavailable") from exc
            logger.info("attachment removed from s3 key=%s", key)
