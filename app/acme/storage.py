"""
Where customer photos live.

Photos are addressed by bare filename. Every backend files them under the `customers/` key
prefix, which is also the public URL prefix, so `/customers/amy-burns.png` is both the URL
handed back to the form and the key the photo is stored at.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from app.acme.constants import CUSTOMER_IMAGE_PREFIX


class StorageError(RuntimeError):
    pass


class PhotoStore:
    prefix = CUSTOMER_IMAGE_PREFIX

    def key_for(self, filename: str) -> str:
        name = (filename or "").replace("\\", "/").strip("/")
        if not name or ".." in name.split("/"):
            raise StorageError(f"Invalid photo filename: {filename!r}")
        return f"{self.prefix}/{name}"

    def public_url(self, filename: str) -> str:
        return "/" + self.key_for(filename)

    def save(self, filename: str, data: bytes, *, content_type: str) -> str:
        """Write (or overwrite) a photo and return its public URL."""
        key = self.key_for(filename)
        self._write(key, data, content_type)
        return "/" + key

    def open(self, filename: str) -> BinaryIO:
        return self._read(self.key_for(filename))

    def exists(self, filename: str) -> bool:
        return self._has(self.key_for(filename))

    def _write(self, key: str, data: bytes, content_type: str) -> None:
        raise NotImplementedError

    def _read(self, key: str) -> BinaryIO:
        raise NotImplementedError

    def _has(self, key: str) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class LocalPhotoStore(PhotoStore):
    """Photos as files under the public directory; `customers/` is created on first write."""

    public_dir: Path

    def _path(self, key: str) -> Path:
        root = self.public_dir.resolve()
        p = (root / key).resolve()
        if root not in p.parents:
            raise StorageError(f"Key escapes public directory: {key!r}")
        return p

    def _write(self, key: str, data: bytes, content_type: str) -> None:
        p = self._path(key)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(data)

    def _read(self, key: str) -> BinaryIO:
        return self._path(key).open("rb")

    def _has(self, key: str) -> bool:
        return self._path(key).is_file()


@dataclass(frozen=True)
class S3PhotoStore(PhotoStore):
    """Photos in an S3-compatible bucket (DigitalOcean Spaces, MinIO, AWS)."""

    endpoint: str
    region: str
    bucket: str
    access_key_id: str
    secret_access_key: str

    def _client(self):
        import boto3

        return boto3.client(
            "s3",
            endpoint_url=f"https://{self.endpoint}" if self.endpoint else None,
            region_name=self.region or None,
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
        )

    def _write(self, key: str, data: bytes, content_type: str) -> None:
        self._client().put_object(Bucket=self.bucket, Key=key, Body=data, ContentType=content_type)

    def _read(self, key: str) -> BinaryIO:
        from botocore.exceptions import ClientError

        try:
            return self._client().get_object(Bucket=self.bucket, Key=key)["Body"]  # type: ignore[return-value]
        except ClientError as e:
            raise StorageError(f"Photo not readable: {key}") from e

    def _has(self, key: str) -> bool:
        from botocore.exceptions import ClientError

        try:
            self._client().head_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("404", "NoSuchKey", "NotFound"):
                return False
            raise StorageError(f"Photo lookup failed: {key}") from e
        return True


def photo_store_from_config(config) -> PhotoStore:
    if (config.get("STORAGE_BACKEND") or "local").strip().lower() == "s3":
        return S3PhotoStore(
            endpoint=config.get("S3_ENDPOINT") or "",
            region=config.get("S3_REGION") or "",
            bucket=config.get("S3_BUCKET") or "",
            access_key_id=config.get("S3_ACCESS_KEY_ID") or "",
            secret_access_key=config.get("S3_SECRET_ACCESS_KEY") or "",
        )
    return LocalPhotoStore(public_dir=Path(config.get("PUBLIC_DIR") or os.path.join(os.getcwd(), "public")))
