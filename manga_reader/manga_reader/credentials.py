"""
Credential storage: one access-token string per external service.

Tokens set through configuration (e.g. TORBOX_API_KEY in .env) take
precedence over the file. Any failure to read is treated as
"no credential configured".
"""
import json
import os
from pathlib import Path
from typing import Dict, Optional, Union

from .logging import StorageError, get_logger

logger = get_logger(__name__)


class CredentialStore:
    def __init__(self, path: Union[str, Path], overrides: Optional[Dict[str, Optional[str]]] = None):
        self.path = Path(path).expanduser()
        self.overrides = {k: v for k, v in (overrides or {}).items() if v}

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Could not read credentials from {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Credentials file {self.path} is malformed; ignoring it")
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write(self, data: Dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.chmod(self.path, 0o600)
        except OSError as e:
            raise StorageError(f"Failed to write credentials to {self.path}: {e}") from e

    def get(self, service: str) -> Optional[str]:
        if service in self.overrides:
            return self.overrides[service]
        return self._read().get(service) or None

    def save(self, service: str, token: str) -> None:
        data = self._read()
        data[service] = token
        self._write(data)
        logger.info(f"Stored credential for {service}")

    def delete(self, service: str) -> bool:
        data = self._read()
        if service not in data:
            return False
        del data[service]
        self._write(data)
        logger.info(f"Removed credential for {service}")
        return True

    def has(self, service: str) -> bool:
        return self.get(service) is not None

    def is_overridden(self, service: str) -> bool:
        """True when configuration supplies the token, shadowing the file."""
        return service in self.overrides
