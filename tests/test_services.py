"""
Integration Tests for Services
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from pydantic import ValidationError

from graph_search.config import Settings
from graph_search.schemas import (
    EntityType,
    NormalizedResultSet,
    SearchContext,
    SortFieldSpec,
    SourceConfig,
)
from graph_search.schemas.source import ACRONYM_FIELDS, BOOKMARK_FIELDS, COMMON_FIELDS, PERSON_FIELDS
from graph_search.services import GraphSearchClient, MicrosoftSearchService, TokenResolver
from graph_search.services.search_service import (
    BOOKMARK_SLOTS,
    PERSON_SLOTS,
    SHAREPOINT_SLOTS,
)
from graph_search.tools.search_microsoft import run_search


GRAPH_REPLY = {
    "value": [{
        "searchTerms": ["budget"],
        "hitsContainers": [{
            "total": 42,
            "moreResultsAvailable": True,
            "hits": [{
                "hitId": "1",
                "summary": "Q3 budget",
                "resource": {
                    "@odata.type": "#microsoft.graph.driveItem",
                    "name": "budget.xlsx",
                    "webUrl": "https://contoso.sharepoint.com/sites/fin/budget.xlsx",
                    "listItem": {
                        "id": "item-guid",
                        "fields": {
                            "sitePath": "https://contoso.sharepoint.com/sites/fin",
                            "filetype": "xlsx",
                        },
                    },
                },
            }],
        }],
    }],
}


@pytest.fixture
def settings():
    settings = Settings()
    settings.graph.endpoint_url = "https://graph.microsoft.com"
    settings.graph.access_token = None
    settings.graph.sdk_version = "1.0.0"
    return settings


@pytest.fixture
def mock_client():
    client = MagicMock()
    client.post = AsyncMock(return_value=GRAPH_REPLY)
    return client


def make_service(settings, client, config=None, query_text="budget", **kwargs):
    return MicrosoftSearchService(
        config=config or SourceConfig.initialize(),
        token_resolver=TokenResolver(query_text=query_text),
        client=client,
        settings=settings,
        **kwargs,
    )


class TestTokenResolver:
    """Tests for TokenResolver."""

    @pytest.mark.asyncio
    async def test_search_terms(self):
        """Test that query tokens become the query text."""
        resolver = TokenResolver(query_text="budget")

        assert await resolver.resolve_tokens("{searchTerms} filetype:xlsx") == "budget filetype:xlsx"
        assert await resolver.resolve_tokens("{inputQueryText}") == "budget"

    @pytest.mark.asyncio
    async def test_today(self):
        """Test the date token against an injected clock."""
        clock = lambda: datetime(2024, 5, 15, 12, 0, tzinfo=timezone.utc)
        resolver = TokenResolver(clock=clock)

        assert await resolver.resolve_tokens("modified>={Today}") == "modified>=2024-05-15"

    @pytest.mark.asyncio
    async def test_custom_tokens_case_insensitive(self):
        """Test caller tokens matched regardless of case."""
        resolver = TokenResolver(tokens={"Site": "hr"})

        assert await resolver.resolve_tokens("path:{site}") == "path:hr"

    @pytest.mark.asyncio
    async def test_unknown_tokens_kept(self):
        """Test that unknown tokens stay in place."""
        resolver = TokenResolver(query_text="x")

        assert await resolver.resolve_tokens("{User.Name} {searchTerms}") == "{User.Name} x"

    @pytest.mark.asyncio
    async def test_empty_text(self):
        """Test that empty text is returned as is."""
        assert await TokenResolver().resolve_tokens("") == ""


class TestGraphSearchClient:
    """Tests for GraphSearchClient."""

    @pytest.mark.asyncio
    async def test_post_sends_json_and_headers(self, settings):
        """Test the request method, headers and decoded body."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["request"] = request
            return httpx.Response(200, json={"value": []})

        settings.graph.access_token = "secret"
        client = GraphSearchClient(settings, transport=httpx.MockTransport(handler))

        body = await client.post(
            "https://graph.microsoft.com/v1.0/search/query",
            {"requests": []},
            {"SdkVersion": "pnpmodernsearch/1.0.0"},
        )

        request = seen["request"]
        assert body == {"value": []}
        assert request.method == "POST"
        assert request.headers["Authorization"] == "Bearer secret"
        assert request.headers["SdkVersion"] == "pnpmodernsearch/1.0.0"
        assert request.headers["Content-Type"] == "application/json"

    @pytest.mark.asyncio
    async def test_no_bearer_without_token(self, settings):
        """Test that no Authorization header is sent without a token."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["request"] = request
            return httpx.Response(200, json={})

        client = GraphSearchClient(settings, transport=httpx.MockTransport(handler))
        await client.post("https://graph.microsoft.com/v1.0/search/query", {})

        assert "Authorization" not in seen["request"].headers

    @pytest.mark.asyncio
    async def test_error_status_raises(self, settings):
        """Test that error statuses raise HTTPStatusError."""
        transport = httpx.MockTransport(lambda request: httpx.Response(500, json={"error": {}}))
        client = GraphSearchClient(settings, transport=transport)

        with pytest.raises(httpx.HTTPStatusError):
            await client.post("https://graph.microsoft.com/v1.0/search/query", {})


class TestMicrosoftSearchService:
    """Tests for MicrosoftSearchService."""

    @pytest.mark.asyncio
    async def test_get_data(self, settings, mock_client):
        """Test the request sent for a search and the result returned."""
        service = make_service(settings, mock_client, locale="fr-FR")

        result = await service.get_data(SearchContext(input_query_text="budget"))

        url, payload, headers = mock_client.post.call_args.args
        request = payload["requests"][0]
        assert url == "https://graph.microsoft.com/v1.0/search/query"
        assert request["entityTypes"] == ["driveItem"]
        assert request["query"]["queryString"] == "budget"
        assert request["from"] == 0
        assert request["size"] == 10
        assert headers == {"SdkVersion": "pnpmodernsearch/1.0.0", "accept-language": "fr-FR"}

        assert result.total_count == 42
        assert result.items[0]["name"] == "budget.xlsx"
        assert service.item_count == 42

    @pytest.mark.asyncio
    async def test_get_data_with_slots(self, settings, mock_client):
        """Test that default slots trigger preview computation."""
        service = make_service(settings, mock_client)

        result = await service.get_data(SearchContext(), slots=service.get_template_slots())

        assert result.items[0]["AutoPreviewUrl"] == (
            "https://contoso.sharepoint.com/sites/fin/_layouts/15/Doc.aspx"
            "?sourcedoc={item-guid}&action=interactivepreview"
        )

    @pytest.mark.asyncio
    async def test_get_items_preview(self, settings, mock_client):
        """Test that previews can be added to a result fetched without slots."""
        service = make_service(settings, mock_client)
        result = await service.get_data(SearchContext())

        previewed = service.get_items_preview(result, SHAREPOINT_SLOTS)

        assert "AutoPreviewUrl" not in result.items[0]
        assert previewed.items[0]["AutoPreviewUrl"].endswith("sourcedoc={item-guid}&action=interactivepreview")
        assert previewed.total_count == result.total_count

    @pytest.mark.asyncio
    async def test_no_entity_types_skips_request(self, settings, mock_client):
        """Test that no request is sent without entity types."""
        config = SourceConfig.initialize(entity_types=[])
        service = make_service(settings, mock_client, config=config)
        service._items_count = 7

        result = await service.get_data(SearchContext(input_query_text="budget"))

        mock_client.post.assert_not_called()
        assert result == NormalizedResultSet()
        assert service.item_count == 0

    @pytest.mark.asyncio
    async def test_transport_errors_propagate(self, settings):
        """Test that transport errors reach the caller unchanged."""
        client = MagicMock()
        client.post = AsyncMock(side_effect=httpx.ConnectError("unreachable"))
        service = make_service(settings, client)

        with pytest.raises(httpx.ConnectError):
            await service.get_data(SearchContext())

    def test_beta_endpoint(self, settings, mock_client):
        """Test the endpoint switch after a config update."""
        service = make_service(settings, mock_client)
        assert service.search_url.endswith("/v1.0/search/query")

        service.update_config(service.config.with_beta_endpoint(True))

        assert service.search_url == "https://graph.microsoft.com/beta/search/query"

    @pytest.mark.parametrize(
        "entity_types,expected",
        [
            (["person"], PERSON_SLOTS),
            (["bookmark"], BOOKMARK_SLOTS),
            (["bookmark", "driveItem"], SHAREPOINT_SLOTS),
            (["message"], SHAREPOINT_SLOTS),
        ],
    )
    def test_template_slots(self, settings, mock_client, entity_types, expected):
        """Test the default slot mapping per entity type mix."""
        config = SourceConfig.initialize().with_entity_types(entity_types)
        service = make_service(settings, mock_client, config=config)

        assert service.get_template_slots() == expected

    def test_sortable_fields(self, settings, mock_client):
        """Test that only user sort fields are exposed."""
        config = SourceConfig.initialize().with_sort_properties([
            SortFieldSpec(sort_field="Created", is_user_sort=True),
            SortFieldSpec(sort_field="Size", is_default_sort=True),
        ])
        service = make_service(settings, mock_client, config=config)

        assert service.get_sortable_fields() == ["Created"]

    def test_dynamic_behaviors(self):
        """Test that filtering and paging are both dynamic."""
        assert MicrosoftSearchService.FILTER_BEHAVIOR == "dynamic"
        assert MicrosoftSearchService.PAGING_BEHAVIOR == "dynamic"


class TestSourceConfig:
    """Tests for SourceConfig construction and setters."""

    def test_initialize_defaults(self):
        """Test defaults for missing and empty persisted values."""
        config = SourceConfig.initialize(query_template="", fields=None)

        assert config.entity_types == [EntityType.DRIVE_ITEM]
        assert config.query_template == "{searchTerms}"
        assert config.fields == COMMON_FIELDS
        assert config.use_beta_endpoint is False

    def test_initialize_mirrors_sort_list(self):
        """Test that the sort list mirrors the sort properties."""
        spec = SortFieldSpec(sort_field="Created", is_default_sort=True)

        config = SourceConfig.initialize(sort_properties=[spec])

        assert config.sort_list == [spec]

    def test_unknown_entity_type_rejected(self):
        """Test that unknown entity types fail validation."""
        with pytest.raises(ValidationError):
            SourceConfig.initialize(entity_types=["spaceship"])

    def test_teams_message_alias(self):
        """Test that teamsMessage maps to chatMessage."""
        config = SourceConfig.initialize(entity_types=["teamsMessage"])

        assert config.entity_types == [EntityType.TEAMS_MESSAGE]

    @pytest.mark.parametrize(
        "entity_types,expected",
        [
            (["bookmark", "person"], BOOKMARK_FIELDS),
            (["acronym", "person"], ACRONYM_FIELDS),
            (["person"], PERSON_FIELDS),
        ],
    )
    def test_field_presets(self, entity_types, expected):
        """Test field presets and their priority."""
        config = SourceConfig.initialize().with_entity_types(entity_types)

        assert config.fields == expected

    def test_other_types_keep_fields(self):
        """Test that other entity types keep the current fields."""
        config = SourceConfig.initialize().with_fields(["title"]).with_entity_types(["listItem"])

        assert config.fields == ["title"]

    def test_external_item_disables_result_types(self):
        """Test that external items reset result types."""
        config = SourceConfig.initialize(enable_result_types=True).with_entity_types(["externalItem"])

        assert config.enable_result_types is False

    def test_setters_return_new_instance(self):
        """Test that setters leave the original config untouched."""
        config = SourceConfig.initialize()

        updated = config.with_fields([" title ", "", "  "])

        assert updated.fields == ["title"]
        assert config.fields == COMMON_FIELDS


class TestSearchTool:
    """Tests for the search_microsoft tool."""

    @pytest.mark.asyncio
    async def test_run_search(self):
        """Test that tool arguments become config, context and a plain dict."""
        service = MagicMock()
        service.get_template_slots.return_value = {"Title": "title"}
        service.get_data = AsyncMock(return_value=NormalizedResultSet(
            items=[{"title": "Budget"}],
            total_count=12,
        ))
        service.item_count = 12
        factory = MagicMock(return_value=service)

        result = await run_search(
            query="budget",
            entity_types="driveItem, listItem",
            page=2,
            page_size=100,
            service_factory=factory,
        )

        config = factory.call_args.kwargs["config"]
        context = service.get_data.call_args.args[0]
        assert config.entity_types == [EntityType.DRIVE_ITEM, EntityType.LIST_ITEM]
        assert context.page_number == 2
        assert context.items_count_per_page == 50
        assert service.get_data.call_args.kwargs["slots"] == {"Title": "title"}
        assert result == {
            "results": [{"title": "Budget"}],
            "filters": [],
            "count": 1,
            "total_count": 12,
            "query": "budget",
        }
