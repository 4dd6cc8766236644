"""Plugin catalog entry model."""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CatalogEntry:
    """A repository offered by the plugin catalog."""
    name: str
    clone_url: str
    description: Optional[str] = None
    installed: bool = False
