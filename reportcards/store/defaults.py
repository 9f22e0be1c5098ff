from reportcards.schemas.assessments import AssessmentPoint, AssessmentTemplate, Subject
from reportcards.schemas.school import AppSettings, Grade, SchoolYear, TeacherAssignment
from reportcards.schemas.state import AppState

DEFAULT_SETTINGS = AppSettings(
    school_name="TISA School",
    mission_statement=(
        "At TISA School, we empower each student to achieve academic and holistic excellence, "
        "develop their natural talents, and become globally-minded citizens who are socially "
        "responsible and successful."
    ),
    statement=(
        "Tisa empowers each student to:\n"
        "• Respect themselves and others;\n"
        "• Develop a lifelong love of learning;\n"
        "• Contribute as a globally-minded citizen to achieve individual academic and holistic excellence."
    ),
    vision=(
        "We inspire student learning:\n"
        "• Through a dynamic and caring environment;\n"
        "• With innovative and effective instructional strategies;\n"
        "• In collaborative relationships."
    ),
    values=["Respect", "Integrity", "Courage", "Curiosity", "Care"],
    grading_key="⭐⭐⭐ - Mostly\n⭐⭐ - Usually\n⭐ - Rarely",
    company_writing_style="",
)

_CORE_TEACHERS = (
    ("English", "Ms Carin"),
    ("Math", "Ms Carin"),
    ("Science", "Ms Carin"),
    ("Social Studies", "Ms Carin/Ms Natalia"),
    ("Dutch", "Ms Carin"),
    ("Literature", "Ms Carin/Ms Natalia"),
    ("Mental Math", "Ms Carin"),
    ("Art", "Ms Tetiana"),
    ("Drama", "Ms Natalia"),
    ("Jiu Jitsu", "Mr Sam"),
)
_PROFESSIONAL_TEACHERS = (
    ("STEAM, Robotics", "Mr Roman"),
    ("CAD, Music (Choir)", "Ms Arina"),
    ("CAD, Music (Piano)", "Ms Arina"),
)

_GRADE_01_SUBJECTS = (
    (
        "Learner Profile (PYP Criteria)",
        "IB Primary Years Programme learner attributes",
        (
            "Communicator",
            "Thinker",
            "Inquirers",
            "Courageous",
            "Knowledgeable",
            "Principled",
            "Caring",
            "Open-minded",
            "Balanced",
            "Reflective",
        ),
    ),
    (
        "Work Habits",
        "Classroom behavior and learning habits",
        (
            "Displays enthusiasm in the classroom",
            "Exhibits self-discipline",
            "Participates in class discussions",
            "Follows class procedures and instructions",
            "Interacts well with peers",
            "Is attentive during classes",
            "Follows directions",
            "Is polite and courteous",
            "Independently works during self-study sessions",
            "Follows academic integrity",
        ),
    ),
    (
        "English - Term 1",
        "English language skills for Term 1",
        (
            "Writing: Trace letters",
            "Writing: Listen and write sounds they hear",
            "Writing: Correct pencil grip",
            "Reading: Listen to and recognise sounds",
            "Reading: Blend sounds together to make a full word",
            "Reading: Read simple words by themselves",
            "Speaking: Listen carefully to instructions",
            "Speaking: Shares ideas or retell stories",
            "Viewing: Talks about what they see in pictures",
        ),
    ),
    (
        "Math - Term 1",
        "Mathematics skills for Term 1",
        (
            "Numbers: Recognise and trace numbers up to 50",
            "Numbers: Count objects or verbally from 1-10 and beyond",
            "Numbers: Match objects to numerals",
            "Shapes: Recognize and name basic shapes",
            "Shapes: Identify and extend simple patterns",
        ),
    ),
    (
        "Science - Term 1",
        "Light and Shadow, Sound",
        (
            "Understand that a shadow is formed when light hits an opaque object",
            "Understand that the shadow changes with the light source direction",
            "Understand that sound is made by vibrations",
            "Test that sound is made by vibrations",
        ),
    ),
    (
        "Drama - Term 1",
        "Expression and imagination",
        (
            "Body expression: Act given animals using body expression",
            "Reciting poetry: Recite nursery rhymes loudly and clearly",
            "Imagination: Turn a pencil into something else",
        ),
    ),
)


def _subject(name: str, description: str, points: tuple[str, ...]) -> Subject:
    return Subject(
        name=name,
        description=description,
        assessment_points=[AssessmentPoint(name=point, max_stars=3, order=index) for index, point in enumerate(points)],
    )


def default_state() -> AppState:
    """Fresh first-run state; ids are minted on every call."""
    year = SchoolYear(name="2025-2026", start_year=2025, end_year=2026, is_active=True)
    early_years = Grade(
        name="Grade 0-1",
        description="Early Years",
        color_index=0,
        order=0,
        classroom_teacher="Ms Carin",
        teacher_assignments=[
            *(TeacherAssignment(subject=subject, teacher=teacher, category="core") for subject, teacher in _CORE_TEACHERS),
            *(
                TeacherAssignment(subject=subject, teacher=teacher, category="professional")
                for subject, teacher in _PROFESSIONAL_TEACHERS
            ),
        ],
    )
    grades = [
        early_years,
        Grade(name="Grade 2-3", description="Lower Primary", color_index=1, order=1),
        Grade(name="Grade 4-5", description="Upper Primary", color_index=2, order=2),
    ]
    template = AssessmentTemplate(
        grade_id=early_years.id,
        school_year_id=year.id,
        name="Student Progress Report - Semester 1 (Terms 1 & 2)",
        description="Complete assessment for Grade 0-1 covering all subjects and tracks",
        subjects=[_subject(*subject) for subject in _GRADE_01_SUBJECTS],
    )
    return AppState(
        school_years=[year],
        active_school_year_id=year.id,
        grades=grades,
        assessment_templates=[template],
        app_settings=DEFAULT_SETTINGS.model_copy(deep=True),
    )
