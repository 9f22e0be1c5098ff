import hmac
import secrets

from reportcards.core.config import get_settings
from reportcards.schemas.reports import StudentReport
from reportcards.store.selectors import find_by_id
from reportcards.store.store import Store


def new_share_token() -> str:
    return secrets.token_urlsafe(get_settings().token_bytes)


def assign_share_token(store: Store, report_id: str) -> str | None:
    """Share a report and return its token; reports keep the token they were first given.

    Returns ``None`` when no report has ``report_id``.
    """
    report = find_by_id(store.state.reports, report_id)
    if report is None:
        return None
    if report.share_token:
        return report.share_token

    taken = {other.share_token for other in store.state.reports if other.share_token}
    token = new_share_token()
    while token in taken:
        token = new_share_token()

    store.set_share_token(report_id, token)
    shared = find_by_id(store.state.reports, report_id)
    return shared.share_token if shared is not None else None


def resolve_by_token(store: Store, token: str) -> StudentReport | None:
    if not token:
        return None
    match: StudentReport | None = None
    for report in store.state.reports:
        # full scan with constant-time compares so timing says nothing about near misses
        if report.share_token and hmac.compare_digest(report.share_token, token) and match is None:
            match = report
    return match
