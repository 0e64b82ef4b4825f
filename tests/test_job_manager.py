import asyncio

import pytest

from fetchpool.core import JobManager
from fetchpool.exceptions import PoolClosedError


@pytest.fixture
async def manager(config):
    async with JobManager(config) as manager:
        yield manager


async def test_song_and_missing_directory_scenario(remote, manager):
    song = remote.url("/a/song1.mp3")
    directory = remote.url("/a/")

    job_id = manager.submit(f"{song}\n{directory}\n")
    snapshot = await asyncio.wait_for(manager.wait(job_id), timeout=10)

    assert snapshot.total == 2
    assert snapshot.completed == 2
    assert snapshot.success == 1
    assert "song1.mp3" in snapshot.results[song]
    assert snapshot.results[song].startswith("Saved")
    assert "404" in snapshot.results[directory]
    assert snapshot.results[directory].startswith("Failed")


async def test_blank_submission_is_immediately_terminal(manager):
    job_id = manager.submit("  \n\n\t\n")
    snapshot = await manager.poll(job_id)

    assert snapshot.total == 0
    assert snapshot.completed == 0
    assert snapshot.is_terminal


async def test_lines_are_trimmed_before_fetching(remote, manager):
    song = remote.url("/a/song1.mp3")
    job_id = manager.submit(f"   {song}   \n")
    snapshot = await asyncio.wait_for(manager.wait(job_id), timeout=10)

    assert list(snapshot.results) == [song]


async def test_timeout_still_completes_the_item(remote, manager):
    slow = remote.url("/slow.bin")
    job_id = manager.submit_urls([slow])
    snapshot = await asyncio.wait_for(manager.wait(job_id), timeout=10)

    assert snapshot.completed == 1
    assert snapshot.success == 0
    assert "timed out" in snapshot.results[slow]


async def test_unknown_identifier_polls_as_zero_snapshot(manager):
    snapshot = await manager.poll("does-not-exist")
    assert (snapshot.total, snapshot.completed, snapshot.success) == (0, 0, 0)
    assert snapshot.results == {}


async def test_polls_after_completion_are_stable(remote, manager):
    job_id = manager.submit_urls([remote.url("/a/song1.mp3"), remote.url("/x/")])
    await asyncio.wait_for(manager.wait(job_id), timeout=10)

    first = await manager.poll(job_id)
    await asyncio.sleep(0.05)
    second = await manager.poll(job_id)

    assert first == second
    assert first.is_terminal


async def test_concurrent_jobs_share_the_worker_budget(remote, manager, config):
    jobs = [
        manager.submit_urls([remote.url(f"/files/{n}-{i}.bin") for i in range(5)])
        for n in range(3)
    ]
    snapshots = await asyncio.wait_for(
        asyncio.gather(*(manager.wait(job_id) for job_id in jobs)), timeout=15
    )

    assert all(s.completed == s.total == 5 for s in snapshots)
    assert all(s.success == 5 for s in snapshots)
    assert remote.state["peak"] <= config.max_workers
    assert manager.stats.peak_in_flight <= config.max_workers
    assert len(manager.registry) == 3


async def test_submit_requires_started_manager(config):
    manager = JobManager(config)
    with pytest.raises(PoolClosedError):
        manager.submit("https://host/a.bin")

    await manager.start()
    await manager.shutdown()
    with pytest.raises(PoolClosedError):
        manager.submit("https://host/a.bin")
    assert len(manager.registry) == 0


async def test_timed_shutdown_releases_waiters(remote, config):
    config.max_workers = 1
    manager = JobManager(config)
    await manager.start()
    job_id = manager.submit_urls([remote.url("/slow.bin")] * 2 + [remote.url("/x")])
    waiter = asyncio.create_task(manager.wait(job_id))
    await asyncio.sleep(0.05)

    await asyncio.wait_for(manager.shutdown(timeout=0.1), timeout=5)
    snapshot = await asyncio.wait_for(waiter, timeout=1)

    assert snapshot.is_terminal
    assert snapshot.completed == snapshot.total == 3
    assert snapshot.success == 0
    assert set(snapshot.results.values()) == {"Error: cancelled by shutdown"}
