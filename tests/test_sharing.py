from reportcards.schemas.reports import StudentReport
from reportcards.services.sharing import assign_share_token, new_share_token, resolve_by_token
from reportcards.store import Store


def _report(store: Store) -> StudentReport:
    report = StudentReport(student_id="s1", assessment_template_id="t1", school_year_id="y1")
    store.add_report(report)
    return report


def test_share_token_is_long_and_url_safe():
    token = new_share_token()

    assert len(token) >= 22
    assert all(char.isalnum() or char in "-_" for char in token)


def test_resolve_returns_the_shared_report(store: Store):
    report = _report(store)
    _report(store)

    token = assign_share_token(store, report.id)

    assert resolve_by_token(store, token).id == report.id


def test_resharing_keeps_the_first_token(store: Store):
    report = _report(store)

    first = assign_share_token(store, report.id)
    second = assign_share_token(store, report.id)

    assert first == second


def test_sharing_does_not_touch_updated_at(store: Store):
    report = _report(store)

    assign_share_token(store, report.id)

    assert store.state.reports[0].updated_at == report.updated_at


def test_unknown_or_empty_token_resolves_to_nothing(store: Store):
    report = _report(store)
    assign_share_token(store, report.id)

    assert resolve_by_token(store, "not-a-token") is None
    assert resolve_by_token(store, "") is None
    assert assign_share_token(store, "missing") is None
