# console/markdown/postprocessors/modify_external_links.py

from urllib.parse import urlparse

from ..config import get_render_settings
from .utils import add_class, get_shared_soup, soup_to_html

EXTERNAL_LINK_CLASS = "external-link"


def modify_external_links(html, context):
    """
    Open external links in a new tab with rel="noopener noreferrer".
    Links to hosts listed in MARKDOWN_RENDERER["INTERNAL_HOSTS"] are left alone.
    Runs after sanitization.
    """
    internal_hosts = {host.lower() for host in get_render_settings()["INTERNAL_HOSTS"]}
    soup = get_shared_soup(html, context)

    for link in soup.find_all("a", href=True):
        href = link["href"]
        if not href.startswith(("http://", "https://")):
            continue
        if (urlparse(href).hostname or "").lower() in internal_hosts:
            continue

        link["target"] = "_blank"
        link["rel"] = "noopener noreferrer"
        add_class(link, EXTERNAL_LINK_CLASS)

    return soup_to_html(context, soup)
