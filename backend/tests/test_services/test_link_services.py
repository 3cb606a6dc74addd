"""
Tests for redirect resolution, dead link checking and Discord notifications.
"""

import json

import httpx
import pytest

from pmhnp_hiring.core.events import EventManager, INGESTION_SOURCE_COMPLETED
from pmhnp_hiring.repositories.job_repository import JobRepository
from pmhnp_hiring.services.dead_link_checker import DeadLinkChecker, LinkStatus, is_link_alive
from pmhnp_hiring.services.ingestion_service import IngestionResult
from pmhnp_hiring.services.notifier import (
    SUCCESS_COLOR,
    WARNING_COLOR,
    DiscordNotifier,
    build_source_embed,
)
from pmhnp_hiring.services.url_resolver import resolve_apply_url


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.mark.unit
class TestUrlResolver:

    async def test_follows_redirect_chain(self):
        methods = []

        def handler(request: httpx.Request) -> httpx.Response:
            methods.append(request.method)
            if request.url.path == "/land/ad/7":
                return httpx.Response(302, headers={"location": "/redirect"})
            if request.url.path == "/redirect":
                return httpx.Response(301, headers={"location": "https://careers.example.org/jobs/7"})
            return httpx.Response(200)

        async with mock_client(handler) as client:
            resolved = await resolve_apply_url("https://www.adzuna.com/land/ad/7", client=client)

        assert resolved.resolved_url == "https://careers.example.org/jobs/7"
        assert resolved.hops_followed == 2
        assert resolved.was_redirected is True
        assert set(methods) == {"HEAD"}

    async def test_no_redirect(self):
        async with mock_client(lambda request: httpx.Response(200)) as client:
            resolved = await resolve_apply_url("https://careers.example.org/jobs/7", client=client)

        assert resolved.hops_followed == 0
        assert resolved.was_redirected is False

    async def test_redirect_loop_stops_at_limit(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(302, headers={"location": str(request.url)})

        async with mock_client(handler) as client:
            resolved = await resolve_apply_url("https://loop.example.org/a", max_redirects=3, client=client)

        assert resolved.hops_followed == 3
        assert resolved.resolved_url == "https://loop.example.org/a"

    async def test_network_error_returns_last_url(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "www.adzuna.com":
                return httpx.Response(302, headers={"location": "https://down.example.org/job"})
            raise httpx.ConnectTimeout("timed out", request=request)

        async with mock_client(handler) as client:
            resolved = await resolve_apply_url("https://www.adzuna.com/land/ad/1", client=client)

        assert resolved.resolved_url == "https://down.example.org/job"
        assert resolved.hops_followed == 1


@pytest.mark.unit
class TestLinkStatus:

    async def test_alive(self):
        async with mock_client(lambda request: httpx.Response(200)) as client:
            assert await is_link_alive(client, "https://example.org/job") == LinkStatus(True, 200)

    async def test_gone(self):
        async with mock_client(lambda request: httpx.Response(410)) as client:
            assert await is_link_alive(client, "https://example.org/job") == LinkStatus(False, 410)

    async def test_head_blocked_falls_back_to_get(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(405 if request.method == "HEAD" else 404)

        async with mock_client(handler) as client:
            assert await is_link_alive(client, "https://example.org/job") == LinkStatus(False, 404)

    async def test_server_error_counts_as_alive(self):
        async with mock_client(lambda request: httpx.Response(503)) as client:
            assert (await is_link_alive(client, "https://example.org/job")).alive is True

    async def test_network_error_is_transient(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with mock_client(handler) as client:
            assert await is_link_alive(client, "https://example.org/job") == LinkStatus(True, 0)


@pytest.mark.database
class TestDeadLinkChecker:

    async def test_dead_links_are_unpublished(self, db, job_factory):
        alive = await job_factory(apply_link="https://example.org/alive")
        dead = await job_factory(external_id="dead", source_provider="lever", apply_link="https://example.org/dead")
        await job_factory(external_id="employer", source_type="employer", apply_link="https://example.org/dead")

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404 if request.url.path == "/dead" else 200)

        async with mock_client(handler) as client:
            checker = DeadLinkChecker(db, client=client, batch_delay=0)
            result = await checker.check_dead_links(batch_size=1)

        assert result["checked"] == 2
        assert result["alive"] == 1
        assert result["dead"] == 1
        assert result["dead_by_source"] == {"lever": 1}
        jobs = JobRepository(db)
        assert (await jobs.get_by_id(dead.id)).is_published is False
        assert (await jobs.get_by_id(alive.id)).is_published is True


@pytest.mark.unit
class TestDiscordNotifier:

    def result(self, **fields):
        values = {"source": "greenhouse", "fetched": 40, "added": 5, "duplicates": 30, "errors": 1, "duration": 12.34}
        values.update(fields)
        return IngestionResult(**values)

    def test_success_embed(self):
        embed = build_source_embed(self.result())

        assert embed["title"] == "Ingestion Complete"
        assert embed["color"] == SUCCESS_COLOR
        assert embed["fields"][0]["value"] == "GREENHOUSE"
        assert embed["fields"][5]["value"] == "12.3s"

    def test_warning_embed(self):
        assert build_source_embed(self.result(fetched=0))["color"] == WARNING_COLOR
        assert build_source_embed(self.result(added=1, errors=3))["title"] == "Ingestion Warning"

    async def test_disabled_without_webhook(self):
        notifier = DiscordNotifier(webhook_url="")

        assert notifier.enabled is False
        assert await notifier.notify_source_result(self.result()) is False

    async def test_posts_embed_on_ingestion_event(self):
        payloads = []

        def handler(request: httpx.Request) -> httpx.Response:
            payloads.append(json.loads(request.content))
            return httpx.Response(204)

        async with mock_client(handler) as client:
            notifier = DiscordNotifier(webhook_url="https://discord.test/api/webhooks/1", client=client)
            events = EventManager()
            notifier.subscribe(events)

            await events.emit(INGESTION_SOURCE_COMPLETED, {"result": self.result()})

        assert len(payloads) == 1
        assert payloads[0]["embeds"][0]["title"] == "Ingestion Complete"

    async def test_webhook_failure_returns_false(self):
        async with mock_client(lambda request: httpx.Response(500)) as client:
            notifier = DiscordNotifier(webhook_url="https://discord.test/api/webhooks/1", client=client)

            assert await notifier.notify_source_result(self.result()) is False
