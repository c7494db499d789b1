import hashlib


def sha256_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def stored_filename(file_hash: str, original_filename: str) -> str:
    """Content-addressed name that keeps the original extension."""
    suffix = ""
    if "." in original_filename:
        suffix = "." + original_filename.rsplit(".", 1)[1].lower()
    return f"{file_hash[:32]}{suffix}"
