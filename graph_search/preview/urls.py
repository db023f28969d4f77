"""
Preview - URL Helpers

Path lookup, container detection and SharePoint / Graph URL builders used by
the preview strategies.
"""

from typing import Any, Iterable, Mapping, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit


FOLDER_CONTENT_TYPE_PREFIX = "0x0120"

OFFICE_EXTENSIONS = frozenset({
    "doc", "docm", "docx", "dot", "dotm", "dotx",
    "xls", "xlsb", "xlsm", "xlsx",
    "pot", "potm", "potx", "pps", "ppsm", "ppsx", "ppt", "pptm", "pptx",
    "vsd", "vsdm", "vsdx", "one", "odt", "ods", "odp", "rtf",
})

THUMBNAIL_RESOLUTION = "6"

# Stripped by browsers before a URL is resolved
UNSAFE_URL_CHARS = ("\t", "\n", "\r")


def by_path(obj: Any, path: Optional[str]) -> Any:
    """
    Look up a value by key or dotted path, e.g. `resource.listItem.id`.

    A key that literally contains dots wins over traversal. Any missing or
    non-mapping step yields None.
    """
    if not path or not isinstance(obj, Mapping):
        return None

    if path in obj:
        return obj[path]

    current = obj
    for part in path.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return None
        current = current[part]
    return current


def is_container_content_type(content_type_id: Any) -> bool:
    """Folders and document sets share the 0x0120 content type prefix."""
    return isinstance(content_type_id, str) and content_type_id.upper().startswith(
        FOLDER_CONTENT_TYPE_PREFIX.upper()
    )


def is_container_type(value: Any) -> bool:
    """True for an is-folder flag or a folder content type id."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() == "true" or is_container_content_type(value)
    return False


def _strip_braces(identifier: str) -> str:
    return str(identifier).strip().strip("{}")


def generate_preview_url(
    web_url: Optional[str],
    unique_id: Optional[str],
    file_type: Optional[str],
    path: Optional[str],
    is_container: bool,
) -> Optional[str]:
    """
    Build a SharePoint preview URL for an item.

    Containers and items without web URL or unique id keep their path.
    Office documents open in the interactive preview; other files keep
    their path, or the generic viewer when no path is known.
    """
    if is_container or not web_url or not unique_id:
        return path

    web_url = web_url.rstrip("/")
    unique_id = _strip_braces(unique_id)

    if file_type and file_type.lower() in OFFICE_EXTENSIONS:
        return (
            f"{web_url}/_layouts/15/Doc.aspx"
            f"?sourcedoc={{{unique_id}}}&action=interactivepreview"
        )

    if path:
        return path

    return f"{web_url}/_layouts/15/viewer.aspx?sourcedoc={{{unique_id}}}"


def enhance_thumbnail_url(url: Any) -> Optional[str]:
    """
    Normalize a stored thumbnail URL.

    Blank values become None. `getpreview.ashx` thumbnails are requested
    at a higher resolution than the indexed default.
    """
    if not isinstance(url, str) or not url.strip():
        return None

    url = url.strip()
    parts = urlsplit(url)
    if not parts.path.lower().endswith("getpreview.ashx"):
        return url

    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True)
             if k.lower() != "resolution"]
    query.append(("resolution", THUMBNAIL_RESOLUTION))
    return urlunsplit(parts._replace(query=urlencode(query, safe="{}")))


def generate_sharepoint_thumbnail_url(
    base_url: str,
    site_id: str,
    web_id: Optional[str],
    list_id: str,
    item_id: str,
    size: str = "c400x999",
) -> str:
    """Thumbnail of a list item's drive item through the v2.1 REST API."""
    site = _strip_braces(site_id)
    if web_id:
        site = f"{site},{_strip_braces(web_id)}"
    return (
        f"{base_url.rstrip('/')}/_api/v2.1/sites/{site}"
        f"/lists/{_strip_braces(list_id)}/items/{_strip_braces(item_id)}"
        f"/driveItem/thumbnails/0/{size}/content?prefer=noredirect,closestavailablesize"
    )


def generate_graph_thumbnail_url(
    base_url: str,
    site_id: str,
    drive_id: str,
    item_id: str,
    size: str = "c400x999",
) -> str:
    """Thumbnail of a drive item addressed by drive id."""
    return (
        f"{base_url.rstrip('/')}/_api/v2.1/sites/{_strip_braces(site_id)}"
        f"/drives/{drive_id}/items/{item_id}"
        f"/thumbnails/0/{size}/content?prefer=noredirect,closestavailablesize"
    )


def tenant_url_from_web_url(web_url: Any) -> Optional[str]:
    """Truncate an item URL at its /sites/ or /teams/ segment."""
    if not isinstance(web_url, str) or not web_url:
        return None
    for segment in ("/sites/", "/teams/"):
        if segment in web_url:
            return web_url.split(segment)[0]
    parts = urlsplit(web_url)
    if parts.scheme and parts.netloc:
        return f"{parts.scheme}://{parts.netloc}"
    return None


def validate_preview_image_url(url: Any, trusted_domains: Iterable[str]) -> Optional[str]:
    """
    Keep a preview image URL only if it points at a trusted host.

    Site-relative URLs are kept; absolute URLs must use https and their
    host must equal or end with one of the trusted domain suffixes.
    Browsers read a backslash as a slash and drop tabs and newlines, so
    both are normalized before deciding whether a URL is site-relative, and
    the normalized form is what gets returned.
    """
    if not isinstance(url, str) or not url.strip():
        return None

    url = url.strip()
    normalized = url.replace("\\", "/")
    for char in UNSAFE_URL_CHARS:
        normalized = normalized.replace(char, "")

    if normalized.startswith("/") and not normalized.startswith("//"):
        return normalized

    parts = urlsplit(normalized)
    if parts.scheme.lower() != "https" or not parts.hostname:
        return None

    host = parts.hostname.lower()
    for domain in trusted_domains:
        domain = domain.lower().lstrip(".")
        if host == domain or host.endswith(f".{domain}"):
            return normalized
    return None
