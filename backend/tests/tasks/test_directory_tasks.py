"""
Tests for the directory Celery tasks.

Task bodies run against the SQLite test database by patching
create_task_session_maker; Redis and the broker are mocked.
"""
import pytest
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock, patch

from storefront.core.data_freshness import utcnow
from storefront.models import ListingPromotion


def closing(result):
    """run_async stand-in that discards the coroutine."""
    def run(coro):
        coro.close()
        return result
    return run


@pytest.fixture
def task_session(session_maker):
    """(session_maker, engine) pair as returned by create_task_session_maker."""
    engine = AsyncMock()
    return session_maker, engine


class TestTaskRegistration:
    """Test that tasks are properly registered with Celery."""

    def test_tasks_registered(self):
        from storefront.tasks import (
            reconcile_all_tenant_categories,
            reconcile_tenant_categories,
            refresh_directory,
            sweep_expired_promotions,
        )

        assert refresh_directory.name == "storefront.tasks.directory.refresh_directory"
        assert sweep_expired_promotions.name == "storefront.tasks.promotions.sweep_expired_promotions"
        assert reconcile_tenant_categories.name == "storefront.tasks.categories.reconcile_tenant_categories"
        assert reconcile_all_tenant_categories.name == "storefront.tasks.categories.reconcile_all_tenant_categories"

    def test_beat_schedule_targets_registered_tasks(self):
        from storefront.tasks.celery_app import celery_app

        scheduled = {entry["task"] for entry in celery_app.conf.beat_schedule.values()}

        assert scheduled == {
            "storefront.tasks.directory.refresh_directory",
            "storefront.tasks.promotions.sweep_expired_promotions",
            "storefront.tasks.categories.reconcile_all_tenant_categories",
        }


class TestRefreshDirectory:
    @pytest.mark.asyncio
    async def test_refresh_builds_snapshot(self, task_session, listing_factory, monkeypatch):
        from storefront.tasks import directory

        monkeypatch.setattr(directory, "_materializer", None)
        await listing_factory(name="Live Store", last_sync_at=utcnow() - timedelta(hours=1))
        await listing_factory(name="Old Store", last_sync_at=utcnow() - timedelta(days=3))

        with patch("storefront.tasks.directory.create_task_session_maker", return_value=task_session):
            result = await directory._refresh_directory_async()

        assert result["status"] == "ok"
        assert result["version"] == 1
        assert result["stores"] == 1
        assert result["categories"] == 1
        task_session[1].dispose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_materializer_survives_between_runs(self, task_session, monkeypatch):
        from storefront.tasks import directory

        monkeypatch.setattr(directory, "_materializer", None)

        with patch("storefront.tasks.directory.create_task_session_maker", return_value=task_session):
            await directory._refresh_directory_async()
            result = await directory._refresh_directory_async()

        assert result["version"] == 2

    @patch("storefront.tasks.directory.run_async")
    def test_task_delegates_to_async_impl(self, mock_run_async):
        mock_run_async.side_effect = closing({"status": "ok", "version": 3})
        from storefront.tasks.directory import refresh_directory

        assert refresh_directory.run()["version"] == 3


class TestSweepExpiredPromotions:
    @pytest.mark.asyncio
    async def test_sweep_clears_expired(self, task_session, listing, db_session):
        now = utcnow()
        db_session.add(
            ListingPromotion(
                listing_id=listing.id,
                is_promoted=True,
                tier="basic",
                started_at=now - timedelta(days=2),
                expires_at=now - timedelta(days=1),
            )
        )
        await db_session.commit()

        from storefront.tasks import promotions

        with patch("storefront.tasks.promotions.create_task_session_maker", return_value=task_session):
            result = await promotions._sweep_expired_promotions_async()

        assert result["status"] == "ok"
        assert result["cleared"] == 1
        task_session[1].dispose.assert_awaited_once()


class TestReconcileCategories:
    @pytest.mark.asyncio
    async def test_reconcile_pushes_tenant_taxonomy(self, task_session, listing_factory, memory_provider):
        tenant = await listing_factory(categories={"books": "Books", "games": "Games"})
        memory_provider.seed(str(tenant.id), [])

        from storefront.tasks import categories

        with patch("storefront.tasks.categories.create_task_session_maker", return_value=task_session), \
                patch("storefront.tasks.categories.get_provider", return_value=memory_provider):
            result = await categories._reconcile_tenant_categories_async(tenant.id)

        assert result["status"] == "ok"
        assert result["tenant_scope"] == str(tenant.id)
        assert sorted(result["created"]) == ["books", "games"]
        assert memory_provider.snapshot(str(tenant.id)) == {"books": "Books", "games": "Games"}

    @pytest.mark.asyncio
    async def test_reconcile_reports_partial_failure(self, task_session, listing_factory, memory_provider):
        from storefront.core.exceptions import PermanentProviderError
        from storefront.tasks import categories

        tenant = await listing_factory(categories={"books": "Books", "games": "Games"})
        memory_provider.inject_failure("create", "games", PermanentProviderError("rejected"))

        with patch("storefront.tasks.categories.create_task_session_maker", return_value=task_session), \
                patch("storefront.tasks.categories.get_provider", return_value=memory_provider):
            result = await categories._reconcile_tenant_categories_async(tenant.id)

        assert result["status"] == "partial"
        assert result["created"] == ["books"]
        assert result["failed"][0]["slug"] == "games"

    @pytest.mark.asyncio
    async def test_reconcile_unknown_tenant(self, task_session, memory_provider):
        from storefront.tasks import categories

        with patch("storefront.tasks.categories.create_task_session_maker", return_value=task_session), \
                patch("storefront.tasks.categories.get_provider", return_value=memory_provider):
            result = await categories._reconcile_tenant_categories_async(9999)

        assert result == {"status": "not_found", "tenant_id": 9999}
        assert memory_provider.calls == []

    def test_reconcile_task_takes_per_tenant_lock(self):
        from storefront.tasks.categories import reconcile_tenant_categories

        mock_redis = MagicMock()
        mock_redis.lock.return_value.acquire.return_value = True

        with patch("redis.Redis.from_url", return_value=mock_redis), \
                patch("storefront.tasks.categories.run_async", side_effect=closing({"status": "ok"})):
            result = reconcile_tenant_categories.run(42)

        assert result == {"status": "ok"}
        assert mock_redis.lock.call_args.args[0] == "celery_lock:reconcile_categories:42"
        mock_redis.lock.return_value.release.assert_called_once_with()

    def test_reconcile_task_skipped_while_locked(self):
        from storefront.tasks.categories import reconcile_tenant_categories

        mock_redis = MagicMock()
        mock_redis.lock.return_value.acquire.return_value = False
        run_async = MagicMock()

        with patch("redis.Redis.from_url", return_value=mock_redis), \
                patch("storefront.tasks.categories.run_async", run_async):
            result = reconcile_tenant_categories.run(42)

        assert result["status"] == "skipped"
        run_async.assert_not_called()

    @pytest.mark.asyncio
    async def test_list_sync_enabled_tenants(self, task_session, listing_factory):
        from storefront.tasks import categories

        synced = await listing_factory(name="Synced")
        await listing_factory(name="Not Synced", sync_enabled=False)

        with patch("storefront.tasks.categories.create_task_session_maker", return_value=task_session):
            assert await categories._list_sync_enabled_tenants() == [synced.id]

    def test_reconcile_all_fans_out(self):
        from storefront.tasks.categories import reconcile_all_tenant_categories

        with patch("storefront.tasks.categories.run_async", side_effect=closing([3, 5])), \
                patch("storefront.tasks.categories.reconcile_tenant_categories.delay") as delay:
            result = reconcile_all_tenant_categories.run()

        assert result == {"status": "ok", "queued": 2}
        assert [call.args for call in delay.call_args_list] == [(3,), (5,)]
