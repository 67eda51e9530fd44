"""Which read views each mutation makes stale.

Mutating endpoints list the GET paths whose cached data they change in the
``X-Stale-Views`` response header, so clients refetch exactly those views
instead of invalidating everything after every write.
"""

from fastapi import Depends, Response

HEADER = "X-Stale-Views"

APPLICATIONS = "/api/applications"
APPLICATIONS_GROUPED = "/api/applications/grouped"
ADMIN_APPLICATIONS = "/api/admin/applications"
CREDITS = "/api/credits"
CURRENT_USER = "/api/user"
ADMIN_USERS = "/api/admin/users"
JOBS = "/api/jobs"
NOTIFICATIONS = "/api/notifications"
UNREAD_COUNT = "/api/notifications/unread-count"
JOB_REPORTS = "/api/job-reports"
FEEDBACK = "/api/feedback"
REFERRAL_CODE = "/api/users/{id}/referral-code"
PROFILES = "/api/profiles"
MESSAGES = "/api/applications/{id}/messages"
UNREAD_MESSAGES = "/api/applications/{id}/messages/unread"

MUTATION_VIEWS: dict[str, tuple[str, ...]] = {
    "apply": (APPLICATIONS, APPLICATIONS_GROUPED, CREDITS, NOTIFICATIONS, UNREAD_COUNT),
    "withdraw": (APPLICATIONS, APPLICATIONS_GROUPED, ADMIN_APPLICATIONS, NOTIFICATIONS, UNREAD_COUNT),
    "application_status": (ADMIN_APPLICATIONS, NOTIFICATIONS, UNREAD_COUNT),
    "job_write": (JOBS, APPLICATIONS_GROUPED),
    "notification_read": (NOTIFICATIONS, UNREAD_COUNT),
    "notification_delete": (NOTIFICATIONS, UNREAD_COUNT),
    "credit_adjust": (ADMIN_USERS, CURRENT_USER, CREDITS),
    "report_submit": (JOB_REPORTS,),
    "report_review": (JOB_REPORTS,),
    "feedback_write": (FEEDBACK,),
    "referral_issue": (REFERRAL_CODE, CURRENT_USER),
    "session": (CURRENT_USER,),
    "register": (CURRENT_USER, CREDITS, NOTIFICATIONS, UNREAD_COUNT),
    "profile_write": (PROFILES,),
    "message_send": (MESSAGES, UNREAD_MESSAGES, NOTIFICATIONS, UNREAD_COUNT),
    "message_read": (MESSAGES, UNREAD_MESSAGES),
}


def stale_views(mutation: str) -> tuple[str, ...]:
    return MUTATION_VIEWS[mutation]


def invalidates(mutation: str):
    """Route dependency that tags a successful response with its stale views."""
    views = stale_views(mutation)

    def _mark(response: Response) -> None:
        response.headers[HEADER] = ", ".join(views)

    return Depends(_mark)
