from reportcards.schemas.assessments import AssessmentPoint, AssessmentTemplate, Subject
from reportcards.schemas.reports import ExamResult, ReportEntry, StudentReport, SubjectComment
from reportcards.schemas.school import Grade, SchoolYear, TeacherAssignment
from reportcards.schemas.students import Student, StudentDocument
from reportcards.services.sharing import assign_share_token, resolve_by_token
from reportcards.store import Store, selectors


def _exam(term: str, title: str) -> ExamResult:
    return ExamResult(term=term, title=title, subject="Math", grade=1)


def test_group_by_term_of_nothing_is_empty():
    assert selectors.group_by_term([]) == {}
    assert selectors.group_by_term(None) == {}


def test_group_by_term_keeps_every_result_in_original_order():
    results = [_exam("Term 2", "b1"), _exam("Term 1", "a1"), _exam("Term 2", "b2"), _exam("Term 1", "a2")]

    grouped = selectors.group_by_term(results)

    assert list(grouped) == ["Term 1", "Term 2"]
    assert [result.title for result in grouped["Term 1"]] == ["a1", "a2"]
    assert [result.title for result in grouped["Term 2"]] == ["b1", "b2"]
    assert sum(len(group) for group in grouped.values()) == len(results)


def test_group_by_term_ordering_is_pluggable():
    results = [_exam("Term 10", "x"), _exam("Term 2", "y")]

    assert list(selectors.group_by_term(results)) == ["Term 10", "Term 2"]
    assert list(selectors.group_by_term(results, sort_key=lambda term: int(term.split()[-1]))) == ["Term 2", "Term 10"]
    assert list(selectors.group_by_term(results, sort_key=None)) == ["Term 10", "Term 2"]


def test_group_by_category_always_has_both_keys():
    assignments = [
        TeacherAssignment(subject="Math", teacher="Ms Carin"),
        TeacherAssignment(subject="Robotics", teacher="Mr Roman", category="professional"),
        TeacherAssignment(subject="Art", teacher="Ms Tetiana"),
    ]

    grouped = selectors.group_by_category(assignments)

    assert [item.subject for item in grouped["core"]] == ["Math", "Art"]
    assert [item.subject for item in grouped["professional"]] == ["Robotics"]
    assert selectors.group_by_category(None) == {"core": [], "professional": []}


def test_total_points_counts_subject_points_or_flat_points():
    nested = AssessmentTemplate(
        grade_id="g1",
        school_year_id="y1",
        name="Nested",
        subjects=[
            Subject(name="Math", assessment_points=[AssessmentPoint(name="a"), AssessmentPoint(name="b")]),
            Subject(name="Art", assessment_points=[AssessmentPoint(name="c")]),
        ],
    )
    flat = AssessmentTemplate(grade_id="g1", school_year_id="y1", name="Flat", points=[AssessmentPoint(name="a")])

    assert selectors.total_points(nested) == 3
    assert selectors.total_points(flat) == 1


def test_effective_stars_substitutes_unset_rating():
    point = AssessmentPoint(name="Counting", max_stars=4)

    assert selectors.effective_stars(ReportEntry(assessment_point_id=point.id, subject_id="s", stars=0), point) == 4
    assert selectors.effective_stars(ReportEntry(assessment_point_id=point.id, subject_id="s", stars=2), point) == 2
    assert selectors.effective_stars(None, point) == 4


def test_student_documents_split_general_and_per_report(store: Store):
    common = {"file_name": "a.pdf", "file_type": "application/pdf", "file_data": "data:application/pdf;base64,AA=="}
    store.add_document(StudentDocument(student_id="s1", label="Passport / ID", **common))
    store.add_document(StudentDocument(student_id="s1", type="report", report_id="r1", label="Scan", **common))
    store.add_document(StudentDocument(student_id="s2", label="Medical Information", **common))

    documents = selectors.student_documents(store.state, "s1")

    assert [doc.label for doc in documents["general"]] == ["Passport / ID"]
    assert list(documents["by_report"]) == ["r1"]


def test_school_scenario_end_to_end(store: Store):
    year = SchoolYear(name="Y1", start_year=2025, end_year=2026, is_active=True)
    store.add_school_year(year)
    grade = Grade(name="G1", color_index=0)
    store.add_grade(grade)
    point = AssessmentPoint(name="Counting", max_stars=4)
    subject = Subject(name="Math", assessment_points=[point])
    template = AssessmentTemplate(grade_id=grade.id, school_year_id=year.id, name="T1", subjects=[subject])
    store.add_assessment_template(template)
    student = Student(first_name="S1", last_name="Pupil", grade_id=grade.id, school_year_id=year.id)
    store.add_student(student)
    report = StudentReport(
        student_id=student.id,
        assessment_template_id=template.id,
        school_year_id=year.id,
        entries=[ReportEntry(assessment_point_id=point.id, subject_id=subject.id, stars=0)],
    )
    store.add_report(report)

    assert [item.id for item in selectors.active_for(store.state.assessment_templates, year.id)] == [template.id]
    assert selectors.effective_stars(report.entries[0], point) == 4

    token = assign_share_token(store, report.id)
    resolved = resolve_by_token(store, token)

    assert resolved is not None
    assert resolved.id == report.id
    assert resolved.share_token == token
    assert resolved.shared_at is not None
    untouched = {"share_token", "shared_at"}
    assert resolved.model_dump(exclude=untouched) == report.model_dump(exclude=untouched)


def test_report_view_resolves_references(store: Store):
    grade = Grade(
        name="Grade 0-1",
        teacher_assignments=[TeacherAssignment(subject="Robotics", teacher="Mr Roman", category="professional")],
    )
    store.add_grade(grade)
    shown = Subject(name="Math", assessment_points=[AssessmentPoint(name="Counting", max_stars=3)])
    hidden = Subject(name="Art", assessment_points=[AssessmentPoint(name="Drawing")])
    template = AssessmentTemplate(grade_id=grade.id, school_year_id="y1", name="T", subjects=[shown, hidden])
    store.add_assessment_template(template)
    student = Student(first_name="Liam", last_name="Visser", grade_id=grade.id, school_year_id="y1")
    store.add_student(student)
    report = StudentReport(
        student_id=student.id,
        assessment_template_id=template.id,
        school_year_id="y1",
        entries=[
            ReportEntry(
                assessment_point_id=shown.assessment_points[0].id,
                subject_id=shown.id,
                stars=0,
                teacher_notes="Counts to 20",
                ai_rewritten_text="Liam confidently counts to 20.",
            )
        ],
        subject_comments=[SubjectComment(subject_id=shown.id, teacher_comment="Good progress")],
        exam_results=[_exam("Term 2", "late"), _exam("Term 1", "early")],
    )

    view = selectors.report_view(store.state, report)

    assert view["student"].id == student.id
    assert view["grade"].id == grade.id
    assert [section["subject"].name for section in view["subjects"]] == ["Math"]
    row = view["subjects"][0]["rows"][0]
    assert row["stars"] == 3
    assert row["notes"] == "Liam confidently counts to 20."
    assert list(view["exam_results"]) == ["Term 1", "Term 2"]
    assert [item.teacher for item in view["teachers"]["professional"]] == ["Mr Roman"]


def test_dashboard_and_overview_only_count_active_year(store: Store):
    current = SchoolYear(name="2025-2026", start_year=2025, end_year=2026, is_active=True)
    store.add_school_year(current)
    grade = Grade(name="Grade 0-1")
    store.add_grade(grade)
    store.add_student(Student(first_name="A", last_name="One", grade_id=grade.id, school_year_id=current.id))
    store.add_student(Student(first_name="B", last_name="Two", grade_id=grade.id, school_year_id="old-year"))

    stats = selectors.dashboard_stats(store.state)
    overview = selectors.grade_overview(store.state)

    assert stats == {"grades": 1, "students": 1, "assessments": 0, "reports": 0}
    assert overview[0]["students"] == 1
