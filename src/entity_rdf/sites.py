"""
Site registry for sitelinks.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional
from urllib.parse import quote

# Characters left as-is in page titles, the rest are percent-encoded
TITLE_SAFE_CHARS = ";@$!*(),/:~"


@dataclass
class Site:
    """
    A site that entities link pages on.

    ``page_url_template`` contains ``$1`` where the page name goes, e.g.
    ``https://en.wikipedia.org/wiki/$1``.
    """
    global_id: str
    language_code: str
    page_url_template: str
    group: str = ""

    def page_url(self, page_name: str) -> str:
        title = quote(page_name.replace(" ", "_"), safe=TITLE_SAFE_CHARS)
        return self.page_url_template.replace("$1", title)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "global_id": self.global_id,
            "language_code": self.language_code,
            "page_url_template": self.page_url_template,
            "group": self.group,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Site":
        return cls(
            global_id=data["global_id"],
            language_code=data["language_code"],
            page_url_template=data["page_url_template"],
            group=data.get("group", ""),
        )


class SiteList:
    def __init__(self, sites: Optional[Iterable[Site]] = None):
        self._sites: Dict[str, Site] = {}
        for site in sites or []:
            self.add_site(site)

    def add_site(self, site: Site) -> None:
        self._sites[site.global_id] = site

    def get_site(self, global_id: str) -> Optional[Site]:
        return self._sites.get(global_id)

    def has_site(self, global_id: str) -> bool:
        return global_id in self._sites

    def to_list(self) -> List[Dict[str, Any]]:
        return [site.to_dict() for site in self._sites.values()]

    @classmethod
    def from_list(cls, data: List[Dict[str, Any]]) -> "SiteList":
        return cls(Site.from_dict(item) for item in data)

    def __iter__(self) -> Iterator[Site]:
        return iter(self._sites.values())

    def __len__(self) -> int:
        return len(self._sites)
