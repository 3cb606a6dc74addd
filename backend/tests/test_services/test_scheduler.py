"""
Tests for the Celery beat schedule and the task runner.
"""

import pytest

from pmhnp_hiring.services import scheduler


@pytest.fixture
def no_database(monkeypatch):
    async def run(operation):
        return await operation(None)

    monkeypatch.setattr(scheduler, "_with_database", run)


@pytest.mark.unit
class TestBeatSchedule:

    def test_every_scheduled_task_is_registered(self):
        schedule = scheduler.celery_app.conf.beat_schedule

        assert set(schedule) == {
            "ingest-jobs",
            "cleanup-expired-jobs",
            "freshness-decay",
            "check-dead-links",
            "expiry-warnings",
        }
        for entry in schedule.values():
            assert entry["task"] in scheduler.celery_app.tasks

    def test_ingestion_runs_every_six_hours(self):
        entry = scheduler.celery_app.conf.beat_schedule["ingest-jobs"]

        assert entry["schedule"].hour == {0, 6, 12, 18}
        assert entry["options"] == {"queue": "ingestion"}


@pytest.mark.unit
class TestRunTask:

    def test_success(self, no_database):
        async def operation(manager):
            return {"unpublished": 2}

        result = scheduler._run_task("cleanup_expired_jobs", operation)

        assert result["status"] == "success"
        assert result["result"] == {"unpublished": 2}
        assert "timestamp" in result

    def test_failure_is_reported(self, no_database):
        async def operation(manager):
            raise RuntimeError("database is locked")

        result = scheduler._run_task("freshness_decay", operation)

        assert result["status"] == "error"
        assert result["error"] == "database is locked"
