"""Fernet key management and JSON encryption for local records."""

import json
import logging
from pathlib import Path
from typing import Any

from cryptography.fernet import Fernet

logger = logging.getLogger(__name__)


def load_or_create_key(key: str | None, key_file: str | Path) -> bytes:
    """Return the configured Fernet key, or load/create one in ``key_file``.

    Args:
        key: Explicit key (e.g. from ENCRYPTION_KEY); wins when set
        key_file: Path of the key file used when no explicit key is given

    Returns:
        URL-safe base64 Fernet key
    """
    if key:
        return key.encode() if isinstance(key, str) else key

    path = Path(key_file)
    if path.exists():
        return path.read_bytes().strip()

    new_key = Fernet.generate_key()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(new_key)
    try:
        path.chmod(0o600)
    except OSError:
        logger.warning("Could not restrict permissions on key file", extra={"path": str(path)})
    logger.info("Created new encryption key file", extra={"path": str(path)})
    return new_key


class RecordCipher:
    """Encrypts JSON-serializable values into Fernet tokens and back."""

    def __init__(self, key: bytes):
        self._fernet = Fernet(key)

    def encrypt(self, value: Any) -> bytes:
        payload = json.dumps(value, default=str, ensure_ascii=False)
        return self._fernet.encrypt(payload.encode("utf-8"))

    def decrypt(self, token: bytes) -> Any:
        """Decrypt a token.

        Raises:
            cryptography.fernet.InvalidToken: Tampered or foreign-key token
            json.JSONDecodeError: Token decrypted but is not JSON
        """
        return json.loads(self._fernet.decrypt(token).decode("utf-8"))
