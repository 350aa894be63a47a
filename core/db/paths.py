"""
Collection paths used in the document store.
"""

ACCOUNTS = "accounts"
SESSIONS = "sessions"
USERS = "users"
JOBS = "jobs"
BOOKINGS = "bookings"


def notes_collection(job_id: str) -> str:
    return f"{JOBS}/{job_id}/notes"


def saved_jobs_collection(uid: str) -> str:
    return f"{USERS}/{uid}/savedJobs"


def read_notifications_collection(uid: str) -> str:
    return f"{USERS}/{uid}/readNotifications"
