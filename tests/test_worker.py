import json

import pytest
from typer.testing import CliRunner

import jobrunner.jobs  # noqa: F401
from jobrunner import codec, redis_helper, worker
from jobrunner.cli import app
from jobrunner.job import QueuedJob
from jobrunner.registry import JobRegistry, register_job
from jobrunner.validator import TargetValidator

runner = CliRunner()

registry = JobRegistry()


@register_job(registry=registry)
class Misbehaving(QueuedJob):
    @classmethod
    def explode(cls, *args):
        raise RuntimeError("factory blew up")

    @classmethod
    def not_a_job(cls):
        return {"plain": "dict"}


@pytest.fixture
def misbehaving_validator():
    return TargetValidator(registry=registry, allowed_namespaces={__name__})


async def ready_and_scheduled():
    client = await redis_helper.get_redis()
    return await client.zcard(redis_helper.READY_ZSET), await client.zcard(redis_helper.SCHEDULED_ZSET)


@pytest.mark.asyncio
async def test_enqueues_job_with_priority(logs):
    code = await worker.run_background_job("jobrunner.jobs.Example", "run", codec.encode(["a", 1]), 0, 7)
    assert code == worker.EXIT_OK
    assert await ready_and_scheduled() == (1, 0)

    client = await redis_helper.get_redis()
    [record] = await redis_helper.list_jobs(client)
    assert record["job_type"] == "jobrunner.jobs.Example"
    assert record["payload"] == {"args": ["a", 1]}
    assert record["priority"] == 7
    assert record["delay"] == 0
    assert record["status"] == "queued"
    assert any("dispatched successfully" in m for m in logs.status)


@pytest.mark.asyncio
async def test_delayed_job_is_scheduled():
    code = await worker.run_background_job("jobrunner.jobs.SumNumbers", "create", codec.encode([1, 2]), 60, 0)
    assert code == worker.EXIT_OK
    assert await ready_and_scheduled() == (0, 1)


@pytest.mark.asyncio
async def test_corrupted_payload_exits_non_zero(logs):
    code = await worker.run_background_job("jobrunner.jobs.Example", "run", "%%%corrupt%%%", 0, 0)
    assert code == worker.EXIT_CODEC_ERROR
    assert any("Failed to decode parameters" in m for m in logs.errors)
    assert await ready_and_scheduled() == (0, 0)


@pytest.mark.asyncio
async def test_unauthorized_class_is_refused(logs):
    code = await worker.run_background_job("Evil.Ns.Hack", "run", codec.encode([]), 0, 0)
    assert code == worker.EXIT_INVALID_TARGET
    assert any("Unauthorized class" in m for m in logs.errors)


@pytest.mark.asyncio
async def test_factory_exception_exits_non_zero(misbehaving_validator, logs):
    code = await worker.run_background_job(
        f"{__name__}.Misbehaving", "explode", codec.encode([]), validator=misbehaving_validator
    )
    assert code == worker.EXIT_FACTORY_ERROR
    assert any("factory blew up" in m for m in logs.errors)
    assert await ready_and_scheduled() == (0, 0)


@pytest.mark.asyncio
async def test_factory_must_return_queueable_job(misbehaving_validator, logs):
    code = await worker.run_background_job(
        f"{__name__}.Misbehaving", "not_a_job", codec.encode([]), validator=misbehaving_validator
    )
    assert code == worker.EXIT_FACTORY_ERROR
    assert any("not a queueable job" in m for m in logs.errors)


@pytest.mark.asyncio
async def test_factory_argument_errors_exit_non_zero(logs):
    code = await worker.run_background_job("jobrunner.jobs.SendEmail", "create", codec.encode(["nobody"]))
    assert code == worker.EXIT_FACTORY_ERROR
    assert any("not an email address" in m for m in logs.errors)


def test_cli_worker_entry_point_exit_codes():
    payload = codec.encode(["a", 1])
    ok = runner.invoke(app, ["run-background-job", "--", "jobrunner.jobs.Example", "run", payload, "0", "-3"])
    assert ok.exit_code == 0

    corrupt = runner.invoke(app, ["run-background-job", "--", "jobrunner.jobs.Example", "run", "%%%", "0", "0"])
    assert corrupt.exit_code == worker.EXIT_CODEC_ERROR


def test_cli_rejects_negative_delay():
    result = runner.invoke(app, ["run-background-job", "jobrunner.jobs.Example", "run", "W10=", "-1", "0"])
    assert result.exit_code != 0


def test_cli_submit_dispatches(monkeypatch):
    calls = []

    class Recorder:
        def dispatch(self, *args):
            calls.append(args)

    monkeypatch.setattr("jobrunner.cli.get_default_dispatcher", lambda: Recorder())
    result = runner.invoke(
        app, ["submit", "jobrunner.jobs.Example", "run", "--params", json.dumps(["a", 1]), "--delay", "5"]
    )
    assert result.exit_code == 0
    assert calls == [("jobrunner.jobs.Example", "run", ["a", 1], 5, 0)]


def test_cli_submit_requires_json_list():
    result = runner.invoke(app, ["submit", "jobrunner.jobs.Example", "run", "--params", "{}"])
    assert result.exit_code != 0


def test_cli_rejects_out_of_range_priority():
    result = runner.invoke(app, ["run-background-job", "--", "jobrunner.jobs.Example", "run", "W10=", "0", "100000"])
    assert result.exit_code != 0
