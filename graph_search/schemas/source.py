"""
Schemas - Source Configuration

Entity types and the immutable connector configuration.
"""

from enum import Enum
from typing import Any, Iterable, List, Optional

from pydantic import BaseModel, Field


class EntityType(str, Enum):
    """Searchable resource kinds understood by Microsoft Search."""
    MESSAGE = "message"
    EVENT = "event"
    DRIVE = "drive"
    DRIVE_ITEM = "driveItem"
    EXTERNAL_ITEM = "externalItem"
    LIST = "list"
    LIST_ITEM = "listItem"
    SITE = "site"
    PERSON = "person"
    TEAMS_MESSAGE = "chatMessage"
    BOOKMARK = "bookmark"
    ACRONYM = "acronym"

    @classmethod
    def _missing_(cls, value):
        # Case-insensitive lookup; "teamsMessage" is the display name of chatMessage
        if isinstance(value, str):
            lowered = value.lower()
            if lowered == "teamsmessage":
                return cls.TEAMS_MESSAGE
            for member in cls:
                if member.value.lower() == lowered:
                    return member
        return None


# Entity types backed by SharePoint / OneDrive content
SHAREPOINT_ENTITY_TYPES = frozenset({
    EntityType.DRIVE,
    EntityType.DRIVE_ITEM,
    EntityType.EXTERNAL_ITEM,
    EntityType.LIST,
    EntityType.LIST_ITEM,
    EntityType.SITE,
})

# Curated list lookups: fixed result shape, no paging
LOOKUP_ENTITY_TYPES = frozenset({EntityType.BOOKMARK, EntityType.ACRONYM})

# Server-side sort is only honored for these
SORTABLE_ENTITY_TYPES = frozenset({EntityType.LIST_ITEM, EntityType.EXTERNAL_ITEM})

DEFAULT_QUERY_TEMPLATE = "{searchTerms}"

COMMON_FIELDS = [
    "title", "name", "webUrl", "filetype", "fileType", "createdBy",
    "createdDateTime", "lastModifiedDateTime", "parentReference", "size",
    "description", "file", "folder", "subject", "bodyPreview", "replyTo",
    "from", "sender", "start", "end", "displayName", "givenName", "surname",
    "userPrincipalName", "mail", "phones", "department", "contentTypeId",
    "siteId", "webId", "contentClass", "siteTitle", "sitePath",
    "AuthorOWSUSER", "listId", "listItemId", "listItemUniqueId", "driveId",
    "owstaxidmetadataalltagsinfo",
]

BOOKMARK_FIELDS = ["id", "displayName", "description", "webUrl", "categories"]
ACRONYM_FIELDS = ["displayName", "description", "webUrl"]
PERSON_FIELDS = [
    "id", "displayName", "givenName", "surname", "companyName", "phones",
    "jobTitle", "department", "officeLocation", "additionalOfficeLocation",
    "personType", "userPrincipalName", "imAddress",
]


class SortFieldDirection(str, Enum):
    ASCENDING = "ascending"
    DESCENDING = "descending"


class SortFieldSpec(BaseModel):
    """One sortable field, admin-defined or exposed to users."""
    sort_field: str
    sort_direction: SortFieldDirection = SortFieldDirection.ASCENDING
    is_default_sort: bool = False
    is_user_sort: bool = False
    display_name: Optional[str] = None

    model_config = {"frozen": True}


class CollapseSpec(BaseModel):
    """Collapse rule (beta endpoint only)."""
    fields: List[str]
    limit: int = Field(default=1, ge=1)

    model_config = {"frozen": True}


class QueryAlterationOptions(BaseModel):
    """Spelling correction behaviour."""
    enable_modification: bool = False
    enable_suggestion: bool = False

    model_config = {"frozen": True}


class SourceConfig(BaseModel):
    """
    Connector configuration, read-only to the compiler and normalizer.

    Build it with `SourceConfig.initialize()` so that missing persisted values
    get their defaults, and change it through the `with_*` setters which
    return a new instance.
    """
    entity_types: List[EntityType] = Field(default_factory=lambda: [EntityType.DRIVE_ITEM])
    fields: List[str] = Field(default_factory=lambda: list(COMMON_FIELDS))
    sort_properties: List[SortFieldSpec] = []
    sort_list: List[SortFieldSpec] = []
    enable_top_results: bool = False
    content_source_connection_ids: List[str] = []
    query_alteration_options: QueryAlterationOptions = Field(
        default_factory=QueryAlterationOptions
    )
    query_template: str = DEFAULT_QUERY_TEMPLATE
    use_beta_endpoint: bool = False
    enable_result_types: bool = False
    trim_duplicates: bool = False
    collapse_properties: List[CollapseSpec] = []
    show_sp_embedded_content: bool = False
    show_ms_archived_content: bool = False

    model_config = {"frozen": True}

    @classmethod
    def initialize(cls, **raw: Any) -> "SourceConfig":
        """
        Build a fully populated configuration from persisted values.

        Keys whose value is None are treated as never set. An empty query
        template falls back to the pass-through template, and the user sort
        list always mirrors the admin sort properties.

        Raises:
            pydantic.ValidationError: on unknown entity types or bad values
        """
        values = {key: value for key, value in raw.items() if value is not None}
        if not values.get("query_template"):
            values["query_template"] = DEFAULT_QUERY_TEMPLATE
        if "fields" in values:
            values["fields"] = [f for f in values["fields"] if f]
        config = cls(**values)
        return config.model_copy(update={"sort_list": list(config.sort_properties)})

    def has_entity_type(self, *entity_types: EntityType) -> bool:
        """True if any of the given entity types is selected."""
        return any(et in self.entity_types for et in entity_types)

    def with_entity_types(self, entity_types: Iterable[Any]) -> "SourceConfig":
        """
        Select entity types and apply their field presets.

        External items do not support result types, so that flag is reset.
        Bookmarks, acronyms and people return a fixed shape and get a fixed
        field projection; any other selection keeps the current fields.
        """
        selected = [EntityType(et) for et in entity_types]
        update = {"entity_types": selected}

        if EntityType.EXTERNAL_ITEM in selected:
            update["enable_result_types"] = False

        if EntityType.BOOKMARK in selected:
            update["fields"] = list(BOOKMARK_FIELDS)
        elif EntityType.ACRONYM in selected:
            update["fields"] = list(ACRONYM_FIELDS)
        elif EntityType.PERSON in selected:
            update["fields"] = list(PERSON_FIELDS)

        return self.model_copy(update=update)

    def with_fields(self, fields: Iterable[str]) -> "SourceConfig":
        """Replace the field projection, dropping blank entries."""
        return self.model_copy(update={
            "fields": [f.strip() for f in fields if f and f.strip()]
        })

    def with_content_sources(self, connection_ids: Iterable[str]) -> "SourceConfig":
        """Replace the external connection identifiers."""
        return self.model_copy(update={
            "content_source_connection_ids": list(connection_ids)
        })

    def with_sort_properties(self, sort_properties: Iterable[SortFieldSpec]) -> "SourceConfig":
        """Replace the sort specs; the user sort list follows."""
        specs = list(sort_properties)
        return self.model_copy(update={
            "sort_properties": specs,
            "sort_list": list(specs),
        })

    def with_beta_endpoint(self, enabled: bool) -> "SourceConfig":
        """Toggle the beta endpoint."""
        return self.model_copy(update={"use_beta_endpoint": bool(enabled)})
