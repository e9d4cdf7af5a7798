# lotbook/services/storage.py

import hashlib
import os
from datetime import datetime

from werkzeug.utils import secure_filename

from lotbook.errors import ValidationError
from lotbook.utils.logging import get_logger

logger = get_logger("storage")

ALLOWED_EXTENSIONS = (".xlsx", ".xlsm")


def sha256_file(path: str, chunk_size: int = 1024 * 1024) -> str:
    h = hashlib.sha256()
    with open(path, "rb") as f:
        while True:
            chunk = f.read(chunk_size)
            if not chunk:
                break
            h.update(chunk)
    return h.hexdigest()


def save_upload(file_storage, base_upload_folder: str, folder: str) -> dict:
    """
    Stores an uploaded workbook as uploads/<folder>/<timestamp>_<name>.xlsx
    and returns {original_name, stored_path, file_hash}.
    """
    if not file_storage or not file_storage.filename:
        raise ValidationError("no file uploaded")

    original_name = file_storage.filename
    safe_name = secure_filename(original_name) or "upload.xlsx"
    if not safe_name.lower().endswith(ALLOWED_EXTENSIONS):
        raise ValidationError(f"'{original_name}' is not an .xlsx workbook")

    target_dir = os.path.join(base_upload_folder, folder)
    os.makedirs(target_dir, exist_ok=True)

    stored_path = os.path.join(target_dir, f"{datetime.utcnow():%Y%m%d%H%M%S%f}_{safe_name}")
    file_storage.save(stored_path)
    file_hash = sha256_file(stored_path)

    logger.info(f"Saved upload folder={folder} name={original_name} hash={file_hash}")
    return {"original_name": original_name, "stored_path": stored_path, "file_hash": file_hash}
