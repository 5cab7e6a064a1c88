import json

import httpx
import pytest
from rdflib import Namespace

from rosrs_client import ROSRSError
from rosrs_client.evo import EvoType, JobState, JobStatus, ROEVOService

EX = Namespace("http://example.org/")
RO1 = EX["ro1/"]
JOB = EX["evo/jobs/1"]


@pytest.fixture
def copy_service(server):
    """Accept copy jobs and report them as done on the next poll."""
    server.route(
        "POST",
        EX["evo/copy/"],
        lambda _: httpx.Response(
            201,
            headers={"Location": str(JOB), "Content-Type": "application/json"},
            json={"status": "RUNNING", "target": str(EX["sp3/"])},
        ),
    )
    server.route(
        "GET",
        JOB,
        lambda _: httpx.Response(
            200,
            json={
                "copyfrom": str(RO1),
                "type": "SNAPSHOT",
                "finalize": True,
                "target": str(EX["sp3/"]),
                "status": "DONE",
                "reason": "Snapshot created",
            },
        ),
    )
    return server


def test_for_rosrs_shares_client(rosrs):
    roevo = ROEVOService.for_rosrs(rosrs)
    assert roevo.client is rosrs.client
    assert roevo.roevo_uri == str(EX)


def test_snapshot(ro1, copy_service):
    job = ro1.snapshot("sp3")
    assert job.job_uri == JOB
    assert job.copyfrom == str(RO1)
    assert job.type is EvoType.SNAPSHOT
    assert job.target == str(EX["sp3/"])
    assert job.state is JobState.RUNNING
    assert not job.is_finished

    (req,) = copy_service.sent("POST", EX["evo/copy/"])
    assert json.loads(req.content) == {
        "copyfrom": str(RO1),
        "type": "SNAPSHOT",
        "finalize": True,
        "target": "sp3",
    }
    assert req.headers["Authorization"] == "Bearer secret"


def test_refresh(ro1, copy_service):
    job = ro1.snapshot("sp3")
    ro1.roevo.refresh(job)
    assert job.state_and_reason() == (JobState.DONE, "Snapshot created")
    assert job.is_finished


def test_archive_without_status_in_answer(ro1, server):
    server.route("POST", EX["evo/copy/"], lambda _: httpx.Response(202, headers={"Location": str(JOB)}))
    job = ro1.archive(finalize=False)
    assert job.type is EvoType.ARCHIVE
    assert job.state is JobState.RUNNING
    (req,) = server.sent("POST", EX["evo/copy/"])
    assert json.loads(req.content) == {"copyfrom": str(RO1), "type": "ARCHIVE", "finalize": False}


def test_rejected_job(ro1, server):
    server.route("POST", EX["evo/copy/"], lambda _: httpx.Response(400))
    with pytest.raises(ROSRSError) as e:
        ro1.snapshot("sp3")
    assert e.value.status == 400


def test_refresh_unsubmitted_job(rosrs):
    with pytest.raises(ValueError):
        ROEVOService.for_rosrs(rosrs).refresh(JobStatus())
