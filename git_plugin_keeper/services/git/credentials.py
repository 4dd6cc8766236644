"""Credential resolution through an external git credential helper.

The helper speaks git's line protocol: we write ``protocol=``, ``host=`` and
``path=`` lines followed by a blank line, and read back ``key=value`` lines.
Any failure degrades to anonymous credentials so that the network operation
itself reports the transport error.
"""

import os
import subprocess
from typing import Dict, List, Optional
from urllib.parse import urlsplit

from git_plugin_keeper.constants import CREDENTIAL_SCHEMES, DEFAULT_CREDENTIAL_HELPER
from git_plugin_keeper.exceptions import CredentialResolutionError
from git_plugin_keeper.logging_config import get_logger
from git_plugin_keeper.models.credentials import Credentials

logger = get_logger(__name__)


def build_helper_request(remote_url: str) -> Optional[str]:
    """Build the helper input for a URL, or None if helpers do not apply."""
    parts = urlsplit(remote_url)
    if parts.scheme.lower() not in CREDENTIAL_SCHEMES or not parts.hostname:
        return None

    host = parts.hostname
    if parts.port:
        host = f"{host}:{parts.port}"

    lines = [f"protocol={parts.scheme.lower()}", f"host={host}"]
    path = parts.path.lstrip("/")
    if path:
        lines.append(f"path={path}")
    return "\n".join(lines) + "\n\n"


def parse_helper_output(output: str) -> Dict[str, str]:
    values = {}
    for line in output.splitlines():
        key, sep, value = line.partition("=")
        if sep:
            values[key.strip()] = value
    return values


class CredentialResolver:
    """Resolves transport credentials for remote URLs, one helper process per call."""

    def __init__(self, command: Optional[List[str]] = None, timeout: float = 10.0):
        self.command = list(command or DEFAULT_CREDENTIAL_HELPER)
        self.timeout = timeout

    def resolve(self, remote_url: str) -> Credentials:
        """Return credentials for ``remote_url``; never raises."""
        request = build_helper_request(remote_url)
        if request is None:
            logger.debug("No credential helper lookup for non-HTTP remote")
            return Credentials.default()

        try:
            values = self._run_helper(request)
            username = values.get("username")
            password = values.get("password")
            if not username or not password:
                raise CredentialResolutionError("helper returned no username/password")
            return Credentials(username=username, password=password)
        except CredentialResolutionError as e:
            logger.warning(f"Using default credentials for {_redact(remote_url)}: {e}")
            return Credentials.default()

    def _run_helper(self, request: str) -> Dict[str, str]:
        env = dict(os.environ, GIT_TERMINAL_PROMPT="0")
        try:
            completed = subprocess.run(
                self.command,
                input=request,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                env=env,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise CredentialResolutionError(f"credential helper timed out after {self.timeout}s") from e
        except OSError as e:
            raise CredentialResolutionError(f"cannot start credential helper: {e}") from e

        if completed.returncode != 0:
            raise CredentialResolutionError(f"credential helper exited with status {completed.returncode}")
        return parse_helper_output(completed.stdout)


def _redact(url: str) -> str:
    """Drop any userinfo from a URL before it is logged."""
    parts = urlsplit(url)
    if parts.username or parts.password:
        netloc = parts.hostname or ""
        if parts.port:
            netloc = f"{netloc}:{parts.port}"
        return parts._replace(netloc=netloc).geturl()
    return url
