"""
Job Relevance Filter

Keyword rules that decide whether a fetched posting is really a PMHNP
role. Generic nurse practitioner titles need psychiatric context in the
title itself; titles naming another profession are rejected.
"""

POSITIVE_KEYWORDS = [
    'pmhnp',
    'psychiatric nurse practitioner',
    'psych nurse practitioner',
    'mental health nurse practitioner',
    'psychiatric mental health nurse practitioner',
    'psychiatric-mental health nurse practitioner',
    'psychiatric aprn',
    'psychiatric prescriber',
    'behavioral health nurse practitioner',
    'behavioral health np',
    'psych np',
    'mental health np',
    'psychiatric np',
    'pmhnp-bc',
    'fpmhnp',
    'pmnhp',  # common misspelling
    'app - psychiatry',
    'advanced practice provider - psychiatry',
    'nurse practitioner - psychiatry',
    'nurse practitioner - mental health',
    'nurse practitioner - behavioral health',
    'np - psychiatry',
    'np - mental health',
    'nurse practitioner psychiatry',
    'nurse practitioner mental health',
    'nurse practitioner behavioral health',
    'np psychiatry',
    'np mental health',
    'np behavioral health',
]

NEGATIVE_KEYWORDS = [
    # Other provider types
    'physician', 'medical doctor', ' m.d.', ' d.o.', 'social worker',
    'therapist', 'counselor', 'psychiatrist', 'practical nurse', ' lpn',
    ' lvn', ' cna', 'medical assistant', 'verify insurance', 'receptionist',
    'scheduler', 'driver', 'dietitian', 'nutritionist',
    'occupational therapist', 'physical therapist', 'speech therapist',
    'primary care', 'home based', 'community care clinic',
    'emergency medicine', 'acute care', 'cardiology', 'dermatology',
    'surgical', 'orthopedic', 'urology', 'occupational health',
    # Non-provider roles
    'registered nurse', ' rn ', ' rn-', '-rn ', 'lecturer', 'instructor',
    'technician', 'scheduling coordinator', 'intake coordinator',
    'referral coordinator', 'case manager', 'program director',
    'office manager', 'facility manager', 'practice manager',
    'lcsw', 'lmft', 'licsw', 'lpc', 'phd', 'psy d', 'psychologist',
    'medical director', 'director of nursing', 'director of operations',
    'director of finance',
    'chiropractor', 'hospitalist', 'physician assistant', 'pa-c', ' pa ',
    'locum tenens psychiatrist', 'clinical nurse specialist',
    'medical front office', 'talent community', ' icu ', 'anesthesia',
    'pain management', 'advanced practice clinician', 'nocturnist',
    'pediatric icu', 'collaborating psychiatrist',
    'neurologist', 'interim cfo', 'cfo', 'building automation',
    'project sales', 'recruiter', 'bookings specialist',
    'medical science liaison', 'lmsw', 'lcpc', 'lgpc',
    'prospect application', 'pediatric nurse practitioner', 'pediatric np',
    'pediatrics nurse practitioner', "women's health nurse practitioner",
    "women's health np", 'certified nurse midwife', 'nurse midwife',
    'midwife', 'substance abuse nurse practitioner',
    'addiction medicine nurse practitioner', 'travel nurse practitioner',
    'outpatient rn', 'inpatient rn', 'skilled nursing', 'walk-in clinic',
    'urgent care', 'oncology', 'endocrinology', 'gastroenterology',
    'nephrology', 'pulmonology', 'rheumatology', 'hematology', 'neurology',
    'bariatric', 'neonatal', 'labor and delivery', ' pace ', 'wound care',
    'palliative', 'nursing home', 'long term care', 'long-term care',
    'home health', 'infusion', 'dialysis', 'transplant', 'medical np',
    'medical pa', 'centralized nurse practioner',
]

GENERIC_NP_TITLES = [
    'nurse practitioner',
    'advanced practice provider',
    'advanced practice nurse',
    'advanced practice professional',
    'app',
    'apn',
    'inpatient app',
    'outpatient app',
    'prn nurse practitioner',
    'part time nurse practitioner',
    'part-time nurse practitioner',
    'weekend nurse practitioner',
    'clinical nurse practitioner',
    'pnp',
    'lpnp',
]

_GENERIC_TITLE_SUFFIXES = (' -', ' –', ' (', ',', ' $', ' sign', ' travel', ' prn', ' weekend', ' part', ' full')

_MENTAL_HEALTH_CONTEXT = ('mental health', 'psychiatric', 'behavioral health', 'psychiatry')
_NP_TITLE_MARKERS = ('nurse practitioner', ' np', 'aprn', 'arnp')
_TITLE_PSYCH_MARKERS = ('psych', 'mental health', 'behavioral health', 'pmhnp')
_PMHNP_INDICATORS = ('pmhnp', 'nurse practitioner', 'np-bc', 'aprn', 'arnp', 'psych np')


def _is_generic_title(title: str) -> bool:
    for generic in GENERIC_NP_TITLES:
        if title == generic or title.endswith(' ' + generic):
            return True
        if any(title.startswith(generic + suffix) for suffix in _GENERIC_TITLE_SUFFIXES):
            return True
    return False


def _is_wrong_role(title: str, combined: str) -> bool:
    for keyword in NEGATIVE_KEYWORDS:
        if keyword not in title:
            continue
        # Dual-role postings mention a psychiatrist alongside the NP role
        if keyword == 'psychiatrist' and any(ind in combined for ind in _PMHNP_INDICATORS):
            continue
        return True
    return False


def is_relevant_job(title: str = '', description: str = '') -> bool:
    """
    Decide whether a posting is a PMHNP job.

    Args:
        title: Job title
        description: Job description (plain text or HTML)

    Returns:
        bool: True if the job should be ingested
    """
    title = title or ''
    combined = f"{title} {description or ''}".lower()
    title_lower = title.lower().strip()

    has_positive = any(keyword in combined for keyword in POSITIVE_KEYWORDS)
    if not has_positive:
        has_context = any(marker in combined for marker in _MENTAL_HEALTH_CONTEXT)
        title_has_np = any(marker in title_lower for marker in _NP_TITLE_MARKERS)
        has_positive = (has_context and title_has_np) or 'pmhnp' in combined

    if not has_positive:
        return False

    if _is_generic_title(title_lower):
        if not any(marker in title_lower for marker in _TITLE_PSYCH_MARKERS):
            return False

    if any(keyword in title_lower for keyword in POSITIVE_KEYWORDS):
        return True

    return not _is_wrong_role(title_lower, combined)
