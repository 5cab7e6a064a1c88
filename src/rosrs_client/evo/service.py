"""Blocking HTTP client for the RO evolution service (ROEVO)."""
from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urljoin

from ..service import HttpService, ROSRService
from .job import JobState, JobStatus, JobStatusMessage
from .types import EvoType

logger = logging.getLogger(__name__)


class ROEVOService(HttpService):
    """Client of the RO evolution service.

    Jobs are submitted with `create_snapshot` / `create_archive` and run
    out of process. The returned `JobStatus` is updated by `refresh`,
    polling it is up to the caller.
    """

    @classmethod
    def for_rosrs(cls, rosrs: ROSRService) -> ROEVOService:
        """Return an evolution client sharing the connection of a storage client."""
        return cls(rosrs.settings, client=rosrs.client)

    @property
    def roevo_uri(self) -> str:
        return self.settings.evolution_uri

    def _endpoint(self, path: str) -> str:
        return urljoin(self.roevo_uri, path)

    # ----

    def get_evolution_information(self, ro_uri) -> bytes:
        """Download the lineage document of an RO (Turtle)."""
        response = self._request(
            "GET",
            self._endpoint("evo/info"),
            expected=(200,),
            params={"ro": str(ro_uri)},
            headers={"Accept": "text/turtle"},
        )
        return response.content

    def _copy(
        self, ro_uri, target: Optional[str], evo_type: EvoType, finalize: bool
    ) -> JobStatus:
        job = JobStatus(str(ro_uri), evo_type, finalize)
        job.target = target
        payload = {"copyfrom": str(ro_uri), "type": evo_type.value, "finalize": finalize}
        if target is not None:
            payload["target"] = target
        response = self._request(
            "POST", self._endpoint("evo/copy/"), expected=(201, 202), json=payload
        )
        job.job_uri = self._location(response)
        if response.content:
            job.update(JobStatusMessage.model_validate_json(response.content))
        if job.state is None:
            job.set_state_and_reason(JobState.RUNNING, None)
        logger.debug("Submitted %s job for %s: %s", evo_type.value, ro_uri, job.job_uri)
        return job

    def create_snapshot(self, ro_uri, target: Optional[str], finalize: bool = True) -> JobStatus:
        """Start copying an RO into a snapshot."""
        return self._copy(ro_uri, target, EvoType.SNAPSHOT, finalize)

    def create_archive(self, ro_uri, target: Optional[str], finalize: bool = True) -> JobStatus:
        """Start copying an RO into an archive."""
        return self._copy(ro_uri, target, EvoType.ARCHIVE, finalize)

    def refresh(self, job: JobStatus) -> JobStatus:
        """Poll the service once and update the job status."""
        if job.job_uri is None:
            raise ValueError("The job has not been submitted")
        response = self._request(
            "GET", job.job_uri, expected=(200,), headers={"Accept": "application/json"}
        )
        job.update(JobStatusMessage.model_validate_json(response.content))
        return job
