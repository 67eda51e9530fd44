import logging
from collections.abc import Iterable, Mapping

from .models import Application, ApplicationStatus, Job

logger = logging.getLogger(__name__)

# Display order
BUCKETS: tuple[str, ...] = (
    ApplicationStatus.APPLIED.value,
    ApplicationStatus.INTERVIEWING.value,
    ApplicationStatus.ACCEPTED.value,
    ApplicationStatus.REJECTED.value,
    ApplicationStatus.WITHDRAWN.value,
    ApplicationStatus.ARCHIVED.value,
)

# Transitions an admin may make; archived is derived from the job, never set here
ADMIN_TRANSITIONS: dict[ApplicationStatus, set[ApplicationStatus]] = {
    ApplicationStatus.APPLIED: {
        ApplicationStatus.INTERVIEWING,
        ApplicationStatus.ACCEPTED,
        ApplicationStatus.REJECTED,
    },
    ApplicationStatus.INTERVIEWING: {
        ApplicationStatus.APPLIED,
        ApplicationStatus.ACCEPTED,
        ApplicationStatus.REJECTED,
    },
    ApplicationStatus.ACCEPTED: {ApplicationStatus.INTERVIEWING, ApplicationStatus.REJECTED},
    ApplicationStatus.REJECTED: {ApplicationStatus.INTERVIEWING, ApplicationStatus.ACCEPTED},
    ApplicationStatus.WITHDRAWN: set(),
    ApplicationStatus.ARCHIVED: set(),
}


def status_key(raw: str) -> str:
    """Bucket key for a stored status string: the enum value, or the lowercased literal."""
    try:
        return ApplicationStatus.parse(raw).value
    except ValueError:
        return str(raw).strip().lower()


def effective_bucket(app: Application, job: Job) -> str:
    if not job.is_active:
        return ApplicationStatus.ARCHIVED.value
    return status_key(app.status)


def group_by_status(
    applications: Iterable[Application],
    jobs: Iterable[Job] | Mapping[int, Job],
) -> dict[str, list[Application]]:
    """
    Place every application whose job is known into exactly one bucket.
    Archived jobs override the stored status. Unknown status strings get a
    bucket of their own instead of being dropped.
    """
    job_by_id = jobs if isinstance(jobs, Mapping) else {j.id: j for j in jobs}

    grouped: dict[str, list[Application]] = {b: [] for b in BUCKETS}
    for app in applications:
        job = job_by_id.get(app.job_id)
        if job is None:
            logger.warning(
                "Application %s references missing job %s - skipped", app.id, app.job_id
            )
            continue

        key = effective_bucket(app, job)
        if key not in grouped:
            logger.warning("Application %s has unrecognised status '%s'", app.id, app.status)
            grouped[key] = []
        grouped[key].append(app)

    return grouped


def can_transition(current: str, target: ApplicationStatus) -> bool:
    try:
        cur = ApplicationStatus.parse(current)
    except ValueError:
        # legacy value: let an admin move it back onto the enum
        return target != ApplicationStatus.ARCHIVED
    if cur == target:
        return True
    return target in ADMIN_TRANSITIONS[cur]
