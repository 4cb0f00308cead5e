"""Pattern rules that turn section text into typed entity candidates.

Every rule is a plain function ``(text) -> list[Entity]``. Rules scan the
whole text with ``finditer`` and never suppress each other; a span may be
claimed by more than one rule. Positions are relative to ``text`` and always
satisfy ``text[start:end] == value``.

Confidence is fixed per rule and reflects its precision: structured
patterns (email, phone, date ranges) score high, list-shape heuristics low.
"""

import re

from config import settings
from models.schemas.extracted_resume import Entity, EntityType, Position
from services.section_parser import classify_header

# Bullet markers: standard + expanded unicode set
BULLET_MARKERS = "•-–—►▪✓*○◆⚫→▸▹◇■□●"

_MONTHS = (
    r"(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|Jun(?:e)?|"
    r"Jul(?:y)?|Aug(?:ust)?|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)\.?"
)
_RANGE_SEP = r"[ \t]*(?:-|–|—|to)[ \t]*"
_YEAR = r"(?:19|20)\d{2}"

# ---------------------------------------------------------------------------
# Contact
# ---------------------------------------------------------------------------

EMAIL_RE = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
PHONE_RE = re.compile(
    r"(?<![\d+])(?:\+\d{1,3}[ \t.-]?)?(?:\(\d{3}\)|\b\d{3})[ \t.-]?\d{3}[ \t.-]?\d{4}\b"
)
URL_RE = re.compile(
    r"\b(?:https?://)?(?:[a-z0-9-]+\.)+[a-z]{2,}(?:/[^\s]*[^\s.,;:)])?",
    re.IGNORECASE,
)
# Leading run of 2-4 capitalised words on the first line of the header
NAME_RE = re.compile(r"[A-Z][A-Za-z'.-]+(?:[ \t]+[A-Z][A-Za-z'.-]+){1,3}")

# ---------------------------------------------------------------------------
# Experience
# ---------------------------------------------------------------------------

JOB_TITLE_RE = re.compile(
    r"\b(?:(?:Senior|Lead|Principal|Junior|Associate)[ \t]+)?"
    r"(?:(?:Software|Web|UI|UX|Frontend|Backend|Full[ \t]Stack|DevOps|Data|Product|Project)[ \t]+)?"
    r"(?:Engineer|Developer|Designer|Manager|Analyst|Architect|Consultant|Specialist|Director|Administrator)\b",
    re.IGNORECASE,
)
# Runs of capitalised words are capped (here and in INSTITUTION_RE and
# LOCATION_RE) so finditer stays linear on long capitalised text.
COMPANY_RE = re.compile(
    r"\b(?P<suffixed>(?:[A-Z][a-z]+[ \t]+){1,6}(?:Inc|LLC|Ltd|Corporation|Corp|Company|Co)\b\.?)"
    r"|\b(?:at|for|with)[ \t]+(?P<introduced>[A-Z][A-Za-z0-9&]*(?:[ \t]+[A-Z][A-Za-z0-9&]*){0,5})"
)
DATE_RANGE_RE = re.compile(
    rf"\b(?P<month_range>{_MONTHS}[ \t]+\d{{4}}{_RANGE_SEP}"
    rf"(?:{_MONTHS}[ \t]+\d{{4}}|Present|Current)\b)"
    rf"|\b(?P<year_range>{_YEAR}{_RANGE_SEP}(?:{_YEAR}|Present|Current)\b)",
    re.IGNORECASE,
)
METRIC_RE = re.compile(
    r"\b(?:increased|decreased|improved|reduced|achieved|generated|managed|led|created)\b"
    r".{3,50}?\b\d+(?:\.\d+)?%"
    r"|\$\d+(?:,\d{3})*(?:\.\d+)?(?:[ \t]*(?:million|billion|mm|k|m|b))?\b",
    re.IGNORECASE,
)

# ---------------------------------------------------------------------------
# Education
# ---------------------------------------------------------------------------

_DEGREE_FIELDS = (
    r"Science|Arts|Engineering|Business|Administration|Computer|Information|"
    r"Technology|Mathematics|Physics|Chemistry|Biology|Psychology|Economics|"
    r"Finance|Marketing|Management|Law|Medicine|Nursing|Education|"
    r"Communication|Design|Architecture"
)
DEGREE_RE = re.compile(
    r"(?P<named>(?:\b(?:Bachelor|Master|PhD|Doctorate|Associate|MBA|B\.Tech|M\.Tech)\b"
    r"|\b(?:B\.S\.|M\.S\.|B\.A\.|M\.A\.|B\.Eng\.|M\.Eng\.|Ph\.D\.))"
    rf".{{1,30}}?\b(?:{_DEGREE_FIELDS})\b(?:[ \t]+(?:{_DEGREE_FIELDS})\b)*)"
    r"|(?-i:\b(?P<abbreviated>(?:BS|MS|BA|MA|BSc|MSc|BEng|MEng)[ \t]+(?:in[ \t]+)?"
    r"[A-Z][A-Za-z]*(?:[ \t]+[A-Z][A-Za-z]*)?)\b)",
    re.IGNORECASE,
)
INSTITUTION_RE = re.compile(
    r"\b(?:[A-Z][A-Za-z&'-]*[ \t]+){0,4}(?:University|College|Institute|School)"
    r"(?:(?:[ \t]+of)?(?:[ \t]+[A-Z][A-Za-z&'-]*){1,5})?"
)
GRADUATION_DATE_RE = re.compile(
    rf"(?P<explicit>\bClass[ \t]+of[ \t]+\d{{4}}\b"
    rf"|\bGraduated:?[ \t]+(?:in[ \t]+)?\d{{4}}\b"
    rf"|\b{_MONTHS}[ \t]+\d{{4}}\b)"
    rf"|(?P<year>\b{_YEAR}\b)(?=[ \t\r]*$)",
    re.IGNORECASE | re.MULTILINE,
)

# ---------------------------------------------------------------------------
# Skills
# ---------------------------------------------------------------------------

TECHNICAL_SKILLS: tuple[str, ...] = (
    "JavaScript", "TypeScript", "Python", "Java", "C#", "C++", "Ruby", "PHP", "Swift", "Kotlin",
    "React", "Angular", "Vue", "Node.js", "Express", "Django", "Flask", "Spring", "ASP.NET",
    "HTML", "CSS", "SASS", "LESS", "Bootstrap", "Tailwind", "Material UI",
    "SQL", "MySQL", "PostgreSQL", "MongoDB", "Firebase", "DynamoDB", "Redis",
    "AWS", "Azure", "GCP", "Docker", "Kubernetes", "Jenkins", "Git", "GitHub", "GitLab",
    "REST API", "GraphQL", "WebSockets", "OAuth", "JWT",
    "TensorFlow", "PyTorch", "scikit-learn", "Pandas", "NumPy",
    "Agile", "Scrum", "Kanban", "JIRA", "Confluence",
)
# Longest first so "Java" never shadows "JavaScript"
TECHNICAL_SKILL_RE = re.compile(
    r"(?<![\w.])(?:"
    + "|".join(re.escape(s) for s in sorted(TECHNICAL_SKILLS, key=len, reverse=True))
    + r")(?![\w+#])",
    re.IGNORECASE,
)
_BULLET = rf"(?:[{re.escape(BULLET_MARKERS)}]|\d+[.)])"
LIST_ITEM_RE = re.compile(
    rf"^[ \t]*{_BULLET}[ \t]*(?P<item>[^.,;:\n\r]+?)[ \t\r]*$",
    re.MULTILINE,
)
BULLET_LINE_RE = re.compile(rf"^[ \t]*{_BULLET}[ \t]*(?P<item>\S.*?)[ \t\r]*$", re.MULTILINE)
BULLET_PREFIX_RE = re.compile(rf"[ \t]*{_BULLET}[ \t]*")
_SEPARATOR_RE = re.compile(r"[,|;]")
INLINE_ITEM_RE = re.compile(r"(?:^|(?<=[,|;:]))[ \t]*(?P<item>[^,|;:\n\r]+?)[ \t\r]*(?=[,|;]|$)")

# ---------------------------------------------------------------------------
# Generic
# ---------------------------------------------------------------------------

DATE_RE = re.compile(
    rf"\b{_MONTHS}[ \t]+\d{{4}}\b|\b\d{{1,2}}/\d{{1,2}}/\d{{2,4}}\b|\b\d{{4}}-\d{{2}}-\d{{2}}\b",
    re.IGNORECASE,
)
LOCATION_RE = re.compile(
    r"\b[A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+){0,4},[ \t]+(?:[A-Z]{2}|[A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+){0,3})\b"
)
CERTIFICATION_RE = re.compile(
    r"\b(?:Certified|Certificate|Certification|Licensed)(?:[ \t]+[A-Z][A-Za-z0-9+&-]*)+"
)


def _entity(
    entity_type: EntityType, text: str, start: int, end: int, confidence: float
) -> Entity:
    return Entity(
        type=entity_type,
        value=text[start:end],
        confidence=confidence,
        position=Position(start=start, end=end),
    )


def _scan(pattern: re.Pattern, text: str, entity_type: EntityType, confidence: float) -> list[Entity]:
    return [
        _entity(entity_type, text, m.start(), m.end(), confidence)
        for m in pattern.finditer(text)
        if m.end() > m.start()
    ]


def _within_bounds(item: str) -> bool:
    return settings.skill_item_min_length < len(item) < settings.skill_item_max_length


# ---------------------------------------------------------------------------
# Contact rules
# ---------------------------------------------------------------------------


def extract_emails(text: str) -> list[Entity]:
    return _scan(EMAIL_RE, text, EntityType.EMAIL, 0.95)


def extract_phones(text: str) -> list[Entity]:
    return _scan(PHONE_RE, text, EntityType.PHONE, 0.9)


def extract_websites(text: str) -> list[Entity]:
    """URLs and bare domains, skipping the domain part of email addresses."""
    email_spans = [m.span() for m in EMAIL_RE.finditer(text)]
    entities = []
    for m in URL_RE.finditer(text):
        if any(start <= m.start() < end for start, end in email_spans):
            continue
        # "jane.doe@..." also reads as a domain ending right before "@"
        if m.end() < len(text) and text[m.end()] == "@":
            continue
        entities.append(_entity(EntityType.WEBSITE, text, m.start(), m.end(), 0.85))
    return entities


def extract_person_name(text: str) -> list[Entity]:
    """Guess the candidate's name from the start of the first non-empty line."""
    offset = 0
    for line in text.split("\n"):
        if line.strip():
            break
        offset += len(line) + 1
    else:
        return []

    indent = len(line) - len(line.lstrip())
    m = NAME_RE.match(line, indent)
    if not m or classify_header(m.group()) is not None:
        return []
    return [_entity(EntityType.PERSON_NAME, text, offset + m.start(), offset + m.end(), 0.75)]


# ---------------------------------------------------------------------------
# Experience rules
# ---------------------------------------------------------------------------


def extract_job_titles(text: str) -> list[Entity]:
    return _scan(JOB_TITLE_RE, text, EntityType.JOB_TITLE, 0.8)


def extract_companies(text: str) -> list[Entity]:
    entities = []
    for m in COMPANY_RE.finditer(text):
        group = "suffixed" if m.group("suffixed") else "introduced"
        entities.append(
            _entity(EntityType.COMPANY_NAME, text, m.start(group), m.end(group), 0.75)
        )
    return entities


def extract_date_ranges(text: str) -> list[Entity]:
    entities = []
    for m in DATE_RANGE_RE.finditer(text):
        confidence = 0.9 if m.group("month_range") else 0.85
        entities.append(_entity(EntityType.DATE_RANGE, text, m.start(), m.end(), confidence))
    return entities


def extract_metrics(text: str) -> list[Entity]:
    return _scan(METRIC_RE, text, EntityType.METRIC, 0.85)


# ---------------------------------------------------------------------------
# Education rules
# ---------------------------------------------------------------------------


def extract_degrees(text: str) -> list[Entity]:
    entities = []
    for m in DEGREE_RE.finditer(text):
        confidence = 0.9 if m.group("named") else 0.8
        group = "named" if m.group("named") else "abbreviated"
        entities.append(_entity(EntityType.DEGREE, text, m.start(group), m.end(group), confidence))
    return entities


def extract_institutions(text: str) -> list[Entity]:
    # A bare "School" or "College" is not an institution name
    return [
        _entity(EntityType.EDUCATION, text, m.start(), m.end(), 0.85)
        for m in INSTITUTION_RE.finditer(text)
        if len(m.group().split()) > 1
    ]


def extract_graduation_dates(text: str) -> list[Entity]:
    entities = []
    for m in GRADUATION_DATE_RE.finditer(text):
        confidence = 0.9 if m.group("explicit") else 0.8
        entities.append(_entity(EntityType.DATE, text, m.start(), m.end(), confidence))
    return entities


# ---------------------------------------------------------------------------
# Skill rules
# ---------------------------------------------------------------------------


def extract_known_skills(text: str) -> list[Entity]:
    return _scan(TECHNICAL_SKILL_RE, text, EntityType.SKILL, 0.9)


def extract_listed_skills(text: str) -> list[Entity]:
    """Bullet or numbered list items short enough to be a single skill."""
    return [
        _entity(EntityType.SKILL, text, m.start("item"), m.end("item"), 0.7)
        for m in LIST_ITEM_RE.finditer(text)
        if _within_bounds(m.group("item"))
    ]


def extract_inline_skills(text: str) -> list[Entity]:
    """Comma, pipe or semicolon separated items; a leading bullet marker is skipped."""
    entities = []
    offset = 0
    for line in text.split("\n"):
        if _SEPARATOR_RE.search(line):
            prefix = BULLET_PREFIX_RE.match(line)
            skip = prefix.end() if prefix else 0
            for m in INLINE_ITEM_RE.finditer(line[skip:]):
                if _within_bounds(m.group("item")):
                    start = offset + skip + m.start("item")
                    entities.append(_entity(
                        EntityType.SKILL, text, start, start + len(m.group("item")), 0.7,
                    ))
        offset += len(line) + 1
    return entities


# ---------------------------------------------------------------------------
# Achievement and certification list rules
# ---------------------------------------------------------------------------


def extract_achievements(text: str) -> list[Entity]:
    return [
        _entity(EntityType.ACHIEVEMENT, text, m.start("item"), m.end("item"), 0.7)
        for m in BULLET_LINE_RE.finditer(text)
        if len(m.group("item")) > 2
    ]


def extract_certification_lines(text: str) -> list[Entity]:
    """Each line of a certifications list, bullet marker removed."""
    entities = []
    offset = 0
    for line in text.split("\n"):
        m = BULLET_LINE_RE.match(line)
        if m:
            start, end = offset + m.start("item"), offset + m.end("item")
        else:
            stripped = line.strip()
            start = offset + len(line) - len(line.lstrip())
            end = start + len(stripped)
        if 2 < end - start <= 80:
            entities.append(_entity(EntityType.CERTIFICATION, text, start, end, 0.7))
        offset += len(line) + 1
    return entities


# ---------------------------------------------------------------------------
# Generic rules
# ---------------------------------------------------------------------------


def extract_dates(text: str) -> list[Entity]:
    return _scan(DATE_RE, text, EntityType.DATE, 0.85)


def extract_locations(text: str) -> list[Entity]:
    return _scan(LOCATION_RE, text, EntityType.LOCATION, 0.8)


def extract_certifications(text: str) -> list[Entity]:
    return _scan(CERTIFICATION_RE, text, EntityType.CERTIFICATION, 0.8)
