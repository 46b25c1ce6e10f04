import hashlib
from pathlib import Path

CACHE_FILE_NAME = ".cargo-check-i18n-cache.sqlite3"


def compute_fingerprint(text: str, target_language: str, model: str) -> str:
    h = hashlib.sha256()
    for part in (text, target_language, model):
        encoded = part.encode("utf-8")
        h.update(str(len(encoded)).encode("ascii") + b"|" + encoded)
    return h.hexdigest()


def default_cache_path(project_dir: Path) -> Path:
    return project_dir / CACHE_FILE_NAME
