import logging
import os
import secrets

import magic
from flask import current_app
from werkzeug.exceptions import BadRequest

logger = logging.getLogger(__name__)


def _file_size(file_storage):
    file_storage.seek(0, os.SEEK_END)
    size = file_storage.tell()
    file_storage.seek(0)
    return size


def _sniff_mime_type(file_storage):
    file_header = file_storage.read(2048)
    file_storage.seek(0)
    return magic.from_buffer(file_header, mime=True)


def save_image(file_storage):
    """
    Stores an uploaded image under a random name in UPLOAD_FOLDER.

    Returns:
        The public path of the stored file, e.g. "/uploads/3f9c...e1.png".

    Raises:
        BadRequest: when no file was sent, the declared or sniffed MIME type
            is not image/*, or the payload is empty or larger than UPLOAD_MAX_BYTES.
    """
    if file_storage is None or not file_storage.filename:
        raise BadRequest('업로드할 파일이 없습니다.')
    if not (file_storage.mimetype or '').startswith('image/'):
        raise BadRequest('이미지 파일만 업로드할 수 있습니다.')

    max_bytes = current_app.config['UPLOAD_MAX_BYTES']
    size = _file_size(file_storage)
    if size == 0 or size > max_bytes:
        raise BadRequest(f'파일 크기는 {max_bytes // (1024 * 1024)}MB 이하여야 합니다.')
    mime_type = _sniff_mime_type(file_storage)
    if not mime_type.startswith('image/'):
        logger.warning(f"Rejected upload {file_storage.filename!r} sniffed as {mime_type}")
        raise BadRequest('이미지 파일만 업로드할 수 있습니다.')

    _, ext = os.path.splitext(file_storage.filename)
    # Only an ASCII alphanumeric extension survives from the client's filename
    ext = ext.lower() if ext[1:].isalnum() and ext[1:].isascii() else ''
    filename = secrets.token_hex(16) + ext
    upload_folder = current_app.config['UPLOAD_FOLDER']
    os.makedirs(upload_folder, exist_ok=True)
    file_storage.save(os.path.join(upload_folder, filename))
    logger.info(f"Stored upload {filename} ({size} bytes)")
    return f"{current_app.config['UPLOAD_URL_PREFIX']}/{filename}"

