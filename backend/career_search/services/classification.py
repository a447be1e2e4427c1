"""Static rules that turn a search hit's URL and snippet into display metadata.

Rules match against ``host + path`` with the scheme and a leading ``www.``
removed, so a pattern may name a bare domain (``github.com``) or a section of
a site (``linkedin.com/learning``).
"""

from __future__ import annotations

from urllib.parse import urlparse

from career_search.schemas import AccessType, WebsiteCategory

MIN_RELEVANCE_SCORE = 50
RELEVANCE_DECAY_PER_POSITION = 5

DEFAULT_TRUST_SCORE = 70
CONTENT_PLATFORM_TRUST_SCORE = 80
REFERENCE_TRUST_SCORE = 90

FEATURE_VOCABULARY = ("guide", "tutorial", "course", "article", "documentation")

JOB_BOARD_PATTERNS = (
    "linkedin.com/jobs",
    "indeed.com/jobs",
    "indeed.com/viewjob",
    "indeed.com/q-",
    "glassdoor.com/job",
    "monster.com/jobs",
    "monster.com/job-openings",
    "ziprecruiter.com/jobs",
    "ziprecruiter.com/c/",
    "careerbuilder.com/job",
    "simplyhired.com/search",
    "simplyhired.com/job",
    "dice.com/job",
    "wellfound.com/jobs",
)

# First match wins.
CATEGORY_RULES: tuple[tuple[str, WebsiteCategory], ...] = (
    ("github.com", WebsiteCategory.CODE_REPOSITORY),
    ("gitlab.com", WebsiteCategory.CODE_REPOSITORY),
    ("stackoverflow.com", WebsiteCategory.QA_FORUM),
    ("stackexchange.com", WebsiteCategory.QA_FORUM),
    ("quora.com", WebsiteCategory.QA_FORUM),
    ("wikipedia.org", WebsiteCategory.REFERENCE),
    ("developer.mozilla.org", WebsiteCategory.REFERENCE),
    ("bls.gov", WebsiteCategory.REFERENCE),
    ("linkedin.com/learning", WebsiteCategory.COURSE),
    ("udemy.com", WebsiteCategory.COURSE),
    ("classcentral.com", WebsiteCategory.COURSE),
    ("udacity.com", WebsiteCategory.COURSE),
    ("coursera.org", WebsiteCategory.LEARNING_PLATFORM),
    ("edx.org", WebsiteCategory.LEARNING_PLATFORM),
    ("khanacademy.org", WebsiteCategory.LEARNING_PLATFORM),
    ("pluralsight.com", WebsiteCategory.LEARNING_PLATFORM),
    ("codecademy.com", WebsiteCategory.LEARNING_PLATFORM),
    ("freecodecamp.org", WebsiteCategory.LEARNING_PLATFORM),
    ("leetcode.com", WebsiteCategory.LEARNING_PLATFORM),
    ("linkedin.com", WebsiteCategory.PROFESSIONAL_NETWORK),
    ("meetup.com", WebsiteCategory.PROFESSIONAL_NETWORK),
    ("glassdoor.com", WebsiteCategory.JOB_BOARD),
    ("medium.com", WebsiteCategory.TECH_BLOG),
    ("dev.to", WebsiteCategory.TECH_BLOG),
    ("hashnode", WebsiteCategory.TECH_BLOG),
    ("substack.com", WebsiteCategory.TECH_BLOG),
    ("reddit.com", WebsiteCategory.COMMUNITY),
    ("discord.", WebsiteCategory.COMMUNITY),
    ("news.ycombinator.com", WebsiteCategory.COMMUNITY),
    ("themuse.com", WebsiteCategory.CAREER_GUIDE),
    ("thebalancemoney.com", WebsiteCategory.CAREER_GUIDE),
    ("thebalancecareers.com", WebsiteCategory.CAREER_GUIDE),
    ("indeed.com/career-advice", WebsiteCategory.CAREER_GUIDE),
    ("careerfoundry.com", WebsiteCategory.CAREER_GUIDE),
    ("hbr.org", WebsiteCategory.INDUSTRY_BLOG),
    ("forbes.com", WebsiteCategory.INDUSTRY_BLOG),
    ("techcrunch.com", WebsiteCategory.INDUSTRY_BLOG),
    ("fastcompany.com", WebsiteCategory.INDUSTRY_BLOG),
)

REFERENCE_TRUST_DOMAINS = (
    "wikipedia.org",
    "github.com",
    "gitlab.com",
    "stackoverflow.com",
    "stackexchange.com",
    "developer.mozilla.org",
    "bls.gov",
)

CONTENT_PLATFORM_DOMAINS = (
    "medium.com",
    "coursera.org",
    "udemy.com",
    "edx.org",
    "linkedin.com",
    "youtube.com",
    "forbes.com",
    "hbr.org",
    "khanacademy.org",
    "freecodecamp.org",
)

# First match wins; ``linkedin.com/learning`` must precede ``linkedin.com``.
ACCESS_RULES: tuple[tuple[str, AccessType], ...] = (
    ("linkedin.com/learning", AccessType.PREMIUM),
    ("coursera.org", AccessType.PREMIUM),
    ("udemy.com", AccessType.PREMIUM),
    ("pluralsight.com", AccessType.PREMIUM),
    ("udacity.com", AccessType.PREMIUM),
    ("masterclass.com", AccessType.PREMIUM),
    ("hbr.org", AccessType.PREMIUM),
    ("linkedin.com", AccessType.REGISTRATION),
    ("glassdoor.com", AccessType.REGISTRATION),
    ("medium.com", AccessType.REGISTRATION),
    ("edx.org", AccessType.REGISTRATION),
    ("leetcode.com", AccessType.REGISTRATION),
    ("github.com", AccessType.FREE),
    ("gitlab.com", AccessType.FREE),
    ("wikipedia.org", AccessType.FREE),
    ("stackoverflow.com", AccessType.FREE),
    ("stackexchange.com", AccessType.FREE),
    ("freecodecamp.org", AccessType.FREE),
    ("khanacademy.org", AccessType.FREE),
    ("youtube.com", AccessType.FREE),
    ("reddit.com", AccessType.FREE),
    ("dev.to", AccessType.FREE),
    ("developer.mozilla.org", AccessType.FREE),
)


def match_target(url: str) -> str:
    """Return ``host + path`` lower-cased, without scheme, port or ``www.``."""

    candidate = url.strip().lower()
    parsed = urlparse(candidate if "://" in candidate else f"//{candidate}")
    host = parsed.hostname or ""
    if host.startswith("www."):
        host = host[4:]
    return f"{host}{parsed.path or ''}"


def _first_match(target: str, patterns: tuple[str, ...]) -> str | None:
    for pattern in patterns:
        if pattern in target:
            return pattern
    return None


def is_job_board(url: str) -> bool:
    return _first_match(match_target(url), JOB_BOARD_PATTERNS) is not None


def classify_category(url: str) -> WebsiteCategory:
    target = match_target(url)
    for pattern, category in CATEGORY_RULES:
        if pattern in target:
            return category
    return WebsiteCategory.RESOURCE


def trust_score(url: str) -> int:
    target = match_target(url)
    if _first_match(target, REFERENCE_TRUST_DOMAINS):
        return REFERENCE_TRUST_SCORE
    if _first_match(target, CONTENT_PLATFORM_DOMAINS):
        return CONTENT_PLATFORM_TRUST_SCORE
    return DEFAULT_TRUST_SCORE


def access_type(url: str) -> AccessType:
    target = match_target(url)
    for pattern, access in ACCESS_RULES:
        if pattern in target:
            return access
    return AccessType.UNKNOWN


def is_premium(url: str) -> bool:
    return access_type(url) is AccessType.PREMIUM


def extract_features(snippet: str | None) -> list[str]:
    if not snippet:
        return []
    lowered = snippet.lower()
    return [word.title() for word in FEATURE_VOCABULARY if word in lowered]


def relevance_score(position: int) -> int:
    """Linear decay by zero-based provider rank, floored."""

    return max(100 - RELEVANCE_DECAY_PER_POSITION * position, MIN_RELEVANCE_SCORE)


__all__ = [
    "access_type",
    "classify_category",
    "extract_features",
    "is_job_board",
    "is_premium",
    "match_target",
    "relevance_score",
    "trust_score",
]
