"""
Aggregator Constants

Search queries and ATS company boards shared by the job sources.
"""

import re
from typing import Dict, List, NamedTuple

from pmhnp_hiring.core.config import load_company_slugs

SEARCH_QUERIES: List[str] = [
    'PMHNP',
    'Psychiatric Nurse Practitioner',
    'Psychiatric Mental Health Nurse Practitioner',
    'Behavioral Health Nurse Practitioner',
    'Psychiatric APRN',
    'Psych NP',
    'Mental Health NP',
    'PMHNP-BC',
    'Psychiatric prescriber',
    'Telepsychiatry Nurse Practitioner',
    'Nurse Practitioner Psychiatry',
    'Psychiatric ARNP',
    'Psychiatry Nurse Practitioner',
    'Psychiatric Mental Health NP-BC',
    'New Grad PMHNP',
    'Remote PMHNP',
    'Telehealth Psychiatric Nurse Practitioner',
    'Locum Tenens PMHNP',
    'Travel Psychiatric Nurse Practitioner',
    'Correctional Psychiatric Nurse Practitioner',
    'Inpatient Psychiatric Nurse Practitioner',
    'Outpatient PMHNP',
]

GREENHOUSE_SLUGS: List[str] = [
    'sondermind', 'headway', 'modernhealth', 'mantrahealth', 'cerebral',
    'twochairs', 'talkspace', 'ayahealthcare', 'amwell', 'octave',
    'growtherapy', 'blueskytelepsych', 'bicyclehealth', 'signifyhealth', 'valerahealth',
    'charliehealth', 'blackbirdhealth', 'ophelia', 'springhealth66', 'omadahealth',
    'brave', 'betterhelp', 'firsthand', 'compasspathways', 'alma',
    'cortica', 'galileo', 'amaehealth', 'pelago', 'bouldercare',
    'daybreakhealth', 'parallellearning', 'legion', 'array', 'neuroflow',
    'forgehealth', 'iris', 'strivehealth', 'solmentalhealth', 'meditelecare',
    'cloverhealth', 'pineparkhealth', 'moodhealth', 'onemedical', 'riviamind',
    'overstoryhealth',
]

LEVER_SLUGS: List[str] = [
    'lifestance', 'talkiatry', 'includedhealth', 'lyrahealth', 'carbonhealth',
    'prosper', 'bighealth', 'genesis', 'sesame', 'mindful',
    'athenapsych', 'seven-starling', 'beckley-clinical', 'synapticure', 'arundellodge',
    'ro', 'advocate', 'ucsf', 'guidestareldercare', 'next-health',
    'ekohealth', 'heartbeathealth', 'aledade', 'clarifyhealth', 'journeyclinical',
    'koalahealth', 'myplacehealth', 'salvohealth', 'sprinterhealth', 'vivo-care',
    'wepclinical', 'zushealth',
]

ASHBY_SLUGS: List[str] = [
    'equip', 'legionhealth', 'array-behavioral-care', 'blossom-health', 'sondermind',
    'hims-and-hers', 'rula', 'tavahealth', 'sesame', 'wheel',
    'foresight', 'bravehealth', 'visanahealth', 'finni-health', 'annaautismcare',
    'claritypediatrics', 'nest-health', 'cylinderhealth', 'tandem-health', 'virtahealth',
    'august-health', 'foundationhealthcareers', 'pearlhealth', 'valeriehealth', 'summerhealth',
]


class WorkdaySite(NamedTuple):
    """A Workday career site: ``https://{slug}.wd{instance}.myworkdayjobs.com/en-US/{site}``."""

    slug: str
    instance: int
    site: str
    name: str


WORKDAY_SITES: List[WorkdaySite] = [
    WorkdaySite('trinityhealth', 1, 'jobs', 'Trinity Health'),
    WorkdaySite('memorialhermann', 5, 'External', 'Memorial Hermann'),
    WorkdaySite('sharp', 1, 'External', 'Sharp HealthCare'),
    WorkdaySite('lifestance', 5, 'Careers', 'LifeStance Health'),
    WorkdaySite('chghealthcare', 1, 'External', 'CHG Healthcare'),
    WorkdaySite('aah', 5, 'External', 'Advocate Health'),
    WorkdaySite('ms', 5, 'External', 'Mount Sinai'),
    WorkdaySite('mc', 1, 'External', 'Mayo Clinic'),
    WorkdaySite('adventhealth', 12, 'AH_External_Career_Site', 'AdventHealth'),
    WorkdaySite('allina', 5, 'External', 'Allina Health'),
    WorkdaySite('bannerhealth', 108, 'Careers', 'Banner Health'),
    WorkdaySite('ccf', 1, 'ClevelandClinicCareers', 'Cleveland Clinic'),
    WorkdaySite('geisinger', 5, 'GeisingerExternal', 'Geisinger'),
    WorkdaySite('imh', 108, 'IntermountainCareers', 'Intermountain Health'),
    WorkdaySite('massgeneralbrigham', 1, 'MGBExternal', 'Mass General Brigham'),
    WorkdaySite('sanford', 5, 'SanfordHealth', 'Sanford Health'),
    WorkdaySite('sutterhealth', 1, 'sh', 'Sutter Health'),
    WorkdaySite('vumc', 1, 'vumccareers', 'Vanderbilt UMC'),
    WorkdaySite('centene', 5, 'Centene_External', 'Centene'),
    WorkdaySite('cvshealth', 1, 'CVS_Health_Careers', 'CVS Health'),
    WorkdaySite('essentiahealth', 1, 'essentia_health', 'Essentia Health'),
    WorkdaySite('geodehealth', 1, 'geode', 'Geode Health'),
    WorkdaySite('centerstone', 5, 'centerstonecareers', 'Centerstone'),
    WorkdaySite('rogersbh', 1, 'RBHCareer', 'Rogers Behavioral Health'),
    WorkdaySite('thriveworks', 5, 'Thriveworks', 'Thriveworks'),
]

COMPANY_NAMES: Dict[str, str] = {
    'talkiatry': 'Talkiatry',
    'talkspace': 'Talkspace',
    'sondermind': 'SonderMind',
    'brightside': 'Brightside Health',
    'brightsidehealth': 'Brightside Health',
    'springhealth': 'Spring Health',
    'springhealth66': 'Spring Health',
    'lyrahealth': 'Lyra Health',
    'modernhealth': 'Modern Health',
    'cerebral': 'Cerebral',
    'headway': 'Headway',
    'teladoc': 'Teladoc Health',
    'amwell': 'Amwell',
    'mdlive': 'MDLIVE',
    'hims': 'Hims & Hers',
    'ayahealthcare': 'Aya Healthcare',
    'mantrahealth': 'Mantra Health',
    'lifestance': 'LifeStance Health',
    'lifestancehealth': 'LifeStance Health',
    'twochairs': 'Two Chairs',
    'elliementalhealth': 'Ellie Mental Health',
    'includedhealth': 'Included Health',
    'carbonhealth': 'Carbon Health',
    'bighealth': 'Big Health',
    'athenapsych': 'AthenaPsych',
    'synapticure': 'SynaptiCure',
    'ro': 'Ro Health',
    'equip': 'Equip Health',
    'legionhealth': 'Legion Health',
    'hims-and-hers': 'Hims & Hers',
    'tavahealth': 'Tava Health',
    'sesame': 'Sesame Care',
    'wheel': 'Wheel Health',
    'foresight': 'Foresight Mental Health',
    'bravehealth': 'Brave Health',
    'visanahealth': 'Visana Health',
    'annaautismcare': 'Anna Autism Care',
    'claritypediatrics': 'Clarity Pediatrics',
    'cylinderhealth': 'Cylinder Health',
    'virtahealth': 'Virta Health',
    'foundationhealthcareers': 'Foundation Health',
    'pearlhealth': 'Pearl Health',
    'valeriehealth': 'Valerie Health',
    'summerhealth': 'Summer Health',
}


def format_company_name(slug: str) -> str:
    """Display name for an ATS board slug."""
    if slug in COMPANY_NAMES:
        return COMPANY_NAMES[slug]
    return ' '.join(word.capitalize() for word in re.split(r'[-_]', slug) if word)


BOARD_SLUGS: Dict[str, List[str]] = {
    'greenhouse': GREENHOUSE_SLUGS,
    'lever': LEVER_SLUGS,
    'ashby': ASHBY_SLUGS,
}


def get_board_slugs(ats: str) -> List[str]:
    """Board slugs for ``greenhouse``, ``lever`` or ``ashby``, honoring the JSON override."""
    overrides = load_company_slugs()
    if overrides.get(ats):
        return overrides[ats]
    return list(BOARD_SLUGS[ats])
