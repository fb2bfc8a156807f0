"""
Test suite for IngestionJob and IngestionJobRunner.

The pipeline is replaced by a stub whose runs are released by the test.

System role: Verification of background ingestion scheduling
"""

import asyncio
import uuid

import pytest

from respondo.application.document_pipeline.ingestion_job import IngestionJobRunner
from respondo.boundary.db.models import DocumentStatus
from respondo.models.ingestion import IngestionResult


class GatedPipeline:
    """Pipeline stub that blocks every run until released."""

    def __init__(self) -> None:
        self.release = asyncio.Event()
        self.started: list[str] = []

    async def run(self, document_id: str) -> IngestionResult:
        self.started.append(document_id)
        await self.release.wait()
        return IngestionResult(document_id=document_id, status=DocumentStatus.COMPLETED)


@pytest.fixture
def pipeline() -> GatedPipeline:
    return GatedPipeline()


@pytest.fixture
def runner(pipeline: GatedPipeline) -> IngestionJobRunner:
    return IngestionJobRunner(pipeline)


class TestIngestionJobRunnerStart:
    async def test_start_should_return_immediately(self, runner, pipeline) -> None:
        # Act
        job = runner.start(uuid.uuid4())
        await asyncio.sleep(0)

        # Assert
        assert not job.done()
        assert job.result() is None
        assert runner.active_count == 1

        pipeline.release.set()
        result = await job.wait()
        assert result.status == DocumentStatus.COMPLETED
        assert job.result() == result

    async def test_running_job_should_be_reused(self, runner, pipeline) -> None:
        document_id = uuid.uuid4()

        first = runner.start(document_id)
        second = runner.start(str(document_id))
        pipeline.release.set()
        await first.wait()

        assert first is second
        assert pipeline.started == [str(document_id)]

    async def test_finished_job_should_be_forgotten(self, runner, pipeline) -> None:
        document_id = uuid.uuid4()
        pipeline.release.set()

        job = runner.start(document_id)
        await job.wait()
        await asyncio.sleep(0)

        assert runner.get(document_id) is None
        assert runner.active_count == 0


class TestIngestionJobCancel:
    async def test_cancelled_job_should_wait_to_none(self, runner) -> None:
        job = runner.start(uuid.uuid4())
        await asyncio.sleep(0)

        assert job.cancel() is True
        assert await job.wait() is None
        assert job.cancelled()

    async def test_cancelling_waiter_should_not_cancel_job(self, runner, pipeline) -> None:
        job = runner.start(uuid.uuid4())
        waiter = asyncio.create_task(job.wait())
        await asyncio.sleep(0)

        waiter.cancel()
        with pytest.raises(asyncio.CancelledError):
            await waiter

        assert not job.done()
        pipeline.release.set()
        assert (await job.wait()).succeeded

    async def test_shutdown_should_cancel_running_jobs(self, runner) -> None:
        jobs = [runner.start(uuid.uuid4()) for _ in range(3)]
        await asyncio.sleep(0)

        await runner.shutdown()

        assert all(job.cancelled() for job in jobs)
        assert runner.active_count == 0
