import logging
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional

from passlib.context import CryptContext

from monitor_server.models.errors import ConfigError

logger = logging.getLogger(__name__)

# Hash formats written by Apache's htpasswd tool; plaintext entries never verify
HTPASSWD_CONTEXT = CryptContext(
    schemes=["bcrypt", "apr_md5_crypt", "md5_crypt", "ldap_sha1", "des_crypt"],
)


class CredentialStore(Mapping[str, str]):
    """
    Read-only username -> password hash mapping.

    Built once at startup and shared by all requests. There is no mutation
    API, which is what makes concurrent reads safe without a lock.
    """

    def __init__(self, entries: Mapping[str, str]) -> None:
        self._entries: Mapping[str, str] = MappingProxyType(dict(entries))

    def __getitem__(self, username: str) -> str:
        return self._entries[username]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def lookup(self, username: str) -> Optional[str]:
        return self._entries.get(username)

    def verify(self, username: str, password: str) -> bool:
        """Check `password` against the stored hash of `username`."""
        password_hash = self.lookup(username)
        if password_hash is None:
            return False
        try:
            return HTPASSWD_CONTEXT.verify(password, password_hash)
        except (ValueError, TypeError) as exc:
            # unsupported or corrupt hash in the credential file
            logger.warning("Cannot verify password for user %s: %s", username, exc)
            return False


def parse_htpasswd(content: str) -> Dict[str, str]:
    entries: Dict[str, str] = {}
    for line_number, line in enumerate(content.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        parts = line.split(":")
        if len(parts) != 2:
            logger.warning("Invalid line format in htpasswd file (line %d), skipping", line_number)
            continue
        username, password_hash = parts
        if username in entries:
            logger.warning("Duplicate htpasswd entry for user %s, last one wins", username)
        logger.debug("Parsed entry for user: %s", username)
        entries[username] = password_hash
    return entries


def load_htpasswd(path: str) -> CredentialStore:
    """
    Load the credential file at `path`.

    Malformed lines are skipped with a warning. An unreadable file raises
    ConfigError: the server must not start without credentials.
    """
    logger.debug("Loading htpasswd file from: %s", path)
    try:
        content = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("Failed to read htpasswd file %s: %s", path, exc)
        raise ConfigError(f"Unable to read htpasswd file {path}: {exc}") from exc

    logger.info("Successfully read htpasswd file")
    store = CredentialStore(parse_htpasswd(content))
    logger.debug("Loaded %d entries from htpasswd file", len(store))
    return store
