"""
Customer photo upload and serving.

Uploaded images are stored under `customers/<filename>` in the configured storage and served
back at `/customers/<filename>`.
"""
from __future__ import annotations

import mimetypes
import re
import time

from flask import Blueprint, abort, current_app, jsonify, request, send_file

from app.acme.constants import CUSTOMER_IMAGE_PREFIX, MAX_IMAGE_BYTES
from app.acme.storage import StorageError, photo_store_from_config

bp = Blueprint("uploads", __name__)

_NAME_DISALLOWED = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")
_ORIGINAL_DISALLOWED = re.compile(r"[^a-zA-Z0-9.-]")
_EXT_DISALLOWED = re.compile(r"[^A-Za-z0-9]")


def slugify_customer_name(name: str) -> str:
    """'Amy Burns' -> 'amy-burns'. May return '' when nothing usable is left."""
    s = (name or "").lower().strip()
    s = _NAME_DISALLOWED.sub("", s)
    s = _WHITESPACE.sub("-", s)
    s = _HYPHENS.sub("-", s)
    return s.strip("-")


def file_extension(original_name: str, default: str = "png") -> str:
    if "." not in (original_name or ""):
        return default
    ext = _EXT_DISALLOWED.sub("", original_name.rsplit(".", 1)[1])
    return ext or default


def timestamped_filename(original_name: str, now_ms: int | None = None) -> str:
    ts = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{ts}-{_ORIGINAL_DISALLOWED.sub('_', original_name or '')}"


def derive_image_filename(customer_name: str | None, original_name: str, now_ms: int | None = None) -> str:
    """
    Deterministic per customer: the same name always maps to the same file, so a second
    upload for that customer replaces the first.
    """
    if customer_name and customer_name.strip():
        slug = slugify_customer_name(customer_name)
        if slug:
            return f"{slug}.{file_extension(original_name)}"
    return timestamped_filename(original_name, now_ms)


@bp.post("/api/upload")
def upload_image():
    f = request.files.get("file")
    if f is None or not f.filename:
        return jsonify({"error": "No file provided"}), 400

    content_type = (f.mimetype or "").strip().lower()
    if not content_type.startswith("image/"):
        return jsonify({"error": "File must be an image"}), 400

    try:
        data = f.read()
        if len(data) > MAX_IMAGE_BYTES:
            return jsonify({"error": "File size must be less than 5MB"}), 400

        filename = derive_image_filename(request.form.get("customerName"), f.filename)
        url = photo_store_from_config(current_app.config).save(filename, data, content_type=content_type)
    except Exception as e:
        current_app.logger.exception("Error uploading file: %s", e)
        return jsonify({"error": "Failed to upload file"}), 500

    current_app.logger.info("Stored customer image filename=%s bytes=%s", filename, len(data))
    return jsonify({"url": url, "filename": filename})


@bp.get(f"/{CUSTOMER_IMAGE_PREFIX}/<path:filename>")
def customer_image(filename: str):
    store = photo_store_from_config(current_app.config)
    try:
        if not store.exists(filename):
            abort(404)
        fh = store.open(filename)
    except StorageError:
        abort(404)
    mimetype = mimetypes.guess_type(filename)[0] or "application/octet-stream"
    return send_file(fh, mimetype=mimetype, download_name=filename.rsplit("/", 1)[-1])
