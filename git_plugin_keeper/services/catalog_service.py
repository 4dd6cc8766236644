"""GitHub-backed catalog of installable plugins"""
from typing import Iterable, List, Optional

from github import Auth, Github, GithubException

from git_plugin_keeper.exceptions import CatalogError
from git_plugin_keeper.logging_config import get_logger
from git_plugin_keeper.models.catalog import CatalogEntry

logger = get_logger(__name__)


class CatalogService:
    """Lists the repositories of a GitHub organization as installable plugins."""

    def __init__(self, github_token: Optional[str] = None):
        self.github_token = github_token
        self._github: Optional[Github] = None

    @property
    def github(self) -> Github:
        if self._github is None:
            if self.github_token:
                self._github = Github(auth=Auth.Token(self.github_token))
            else:
                # Anonymous access works for public organizations, with a lower rate limit
                self._github = Github()
        return self._github

    def list_available(self, org: str, installed: Iterable[str] = ()) -> List[CatalogEntry]:
        """Return the organization's repositories sorted by name.

        Args:
            org: GitHub organization login
            installed: names of checkouts already present, matched case-insensitively

        Raises:
            CatalogError: if the organization cannot be listed
        """
        installed_names = {name.lower() for name in installed}
        try:
            repos = list(self.github.get_organization(org).get_repos())
        except GithubException as e:
            message = e.data.get("message") if isinstance(e.data, dict) else None
            raise CatalogError(f"Failed to load repositories for {org}: {message or e.status}") from e

        logger.debug(f"[GitHub] Loaded {len(repos)} repositories for {org}")
        entries = [
            CatalogEntry(
                name=repo.name,
                clone_url=repo.clone_url,
                description=repo.description,
                installed=repo.name.lower() in installed_names,
            )
            for repo in repos
            if not repo.archived
        ]
        return sorted(entries, key=lambda entry: entry.name.lower())

    def close(self) -> None:
        if self._github is not None:
            self._github.close()
            self._github = None
