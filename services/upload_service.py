import logging
import os
import random
import time
from datetime import timedelta
from pathlib import Path
from typing import BinaryIO, List, Set
from urllib.parse import urlparse
from sqlalchemy.orm import Session
from werkzeug.utils import secure_filename
from database.models import Registration
from utils.timezone import get_utc_now, from_timestamp

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


class UploadError(Exception):
    """Ошибка сохранения загруженного файла"""


class UploadTooLargeError(UploadError):
    def __init__(self, max_size: int):
        self.max_size = max_size
        super().__init__(f"File exceeds the {max_size} byte limit")


def ensure_upload_dir(upload_dir: Path) -> Path:
    """Создать каталог загрузок при первом запуске"""
    upload_dir.mkdir(parents=True, exist_ok=True)
    return upload_dir


def generate_stored_name(original_name: str) -> str:
    """
    Имя файла на диске: "<мс с эпохи>-<случайное число>-<исходное имя>".

    Проверка уникальности не выполняется: время + случайный суффикс
    исключают перезапись при одинаковых исходных именах.
    """
    safe_name = secure_filename(original_name or "") or "upload"
    unique_suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
    return f"{unique_suffix}-{safe_name}"


def save_upload(source: BinaryIO, original_name: str, upload_dir: Path, max_size: int) -> str:
    """
    Потоково записать файл в каталог загрузок.

    Returns:
        Имя сохраненного файла

    Raises:
        UploadTooLargeError: файл больше max_size (частичный файл удаляется)
        UploadError: ошибка файловой системы (частичный файл удаляется)
    """
    stored_name = generate_stored_name(original_name)
    target = ensure_upload_dir(upload_dir) / stored_name

    written = 0
    try:
        with open(target, "xb") as out:
            while True:
                chunk = source.read(CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > max_size:
                    raise UploadTooLargeError(max_size)
                out.write(chunk)
    except UploadTooLargeError:
        _remove_partial(target)
        logger.warning(f"Upload {original_name!r} rejected: larger than {max_size} bytes")
        raise
    except OSError as e:
        _remove_partial(target)
        raise UploadError(str(e)) from e

    logger.info(f"Upload stored as {stored_name} ({written} bytes)")
    return stored_name


def _remove_partial(target: Path):
    try:
        target.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.error(f"Failed to remove partial upload {target}: {e}")


def referenced_upload_names(db: Session) -> Set[str]:
    """Имена файлов, на которые ссылаются регистрации"""
    names = set()
    for (url,) in db.query(Registration.payment_proof_url).all():
        name = os.path.basename(urlparse(url).path)
        if name:
            names.add(name)
    return names


def sweep_orphan_uploads(db: Session, upload_dir: Path, retention: timedelta) -> List[str]:
    """
    Удалить файлы старше retention, на которые не ссылается ни одна регистрация.

    Файлы моложе retention не трогаем: форма загружает файл до отправки регистрации.
    """
    if not upload_dir.is_dir():
        return []

    cutoff = get_utc_now() - retention
    referenced = referenced_upload_names(db)
    removed = []

    for path in upload_dir.iterdir():
        if not path.is_file() or path.name in referenced:
            continue
        try:
            if from_timestamp(path.stat().st_mtime) > cutoff:
                continue
            path.unlink()
            removed.append(path.name)
        except OSError as e:
            logger.error(f"Failed to remove orphan upload {path.name}: {e}")

    if removed:
        logger.info(f"Removed {len(removed)} orphan uploads")
    return removed
