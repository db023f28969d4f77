"""
Schemas - Template Slots

Logical display slots and the sentinel fields the normalizer computes itself.
"""

from typing import Dict


AUTO_PREVIEW_URL = "AutoPreviewUrl"
AUTO_PREVIEW_IMAGE_URL = "AutoPreviewImageUrl"
AUTHOR_ALIAS_FIELD = "AuthorOWSUSER"
FILE_TYPE_ALIAS_FIELD = "FileType"


class TemplateSlot:
    """Slot names used as keys of a slot mapping."""
    TITLE = "Title"
    SUMMARY = "Summary"
    PATH = "Path"
    FILE_TYPE = "FileType"
    PREVIEW_URL = "PreviewUrl"
    PREVIEW_IMAGE_URL = "PreviewImageUrl"
    TAGS = "Tags"
    DATE = "Date"
    AUTHOR = "Author"
    ID = "Id"
    SITE_ID = "SiteId"
    WEB_ID = "WebId"
    LIST_ID = "ListId"
    ITEM_ID = "ItemId"
    IS_FOLDER = "IsFolder"
    CONTENT_CLASS = "ContentClass"
    DRIVE_ID = "DriveId"


SlotMapping = Dict[str, str]
