"""
gedcom_tags.py - GEDCOM tag to event kind tables.

Module: gedcom_cache.gedcom_tags
Author: @colin0brass
Last updated: 2026-10-19
"""

# Individual events (GEDCOM 5.5.1 INDIVIDUAL_EVENT_STRUCTURE plus common extensions)
INDIVIDUAL_EVENT_TAGS = {
    'BIRT': 'birth',
    'CHR': 'christening',
    'DEAT': 'death',
    'BURI': 'burial',
    'CREM': 'cremation',
    'ADOP': 'adoption',
    'BAPM': 'baptism',
    'BARM': 'bar-mitzvah',
    'BASM': 'bat-mitzvah',
    'BLES': 'blessing',
    'CHRA': 'adult-christening',
    'CONF': 'confirmation',
    'FCOM': 'first-communion',
    'ORDN': 'ordination',
    'NATU': 'naturalization',
    'EMIG': 'emigration',
    'IMMI': 'immigration',
    'CENS': 'census',
    'PROB': 'probate',
    'WILL': 'will',
    'GRAD': 'graduation',
    'RETI': 'retirement',
    '_MILT': 'military-service',
    '_MDCL': 'medical-treatment',
    'EVEN': 'custom',
}

# Individual attributes: each carries a value
ATTRIBUTE_TAGS = {
    'CAST': 'caste',
    'DSCR': 'physical-description',
    'EDUC': 'education',
    'IDNO': 'id-number',
    'NATI': 'nationality',
    'NCHI': 'children-count',
    'NMR': 'marriage-count',
    'OCCU': 'occupation',
    'PROP': 'property',
    'RELI': 'religion',
    'RESI': 'residence',
    'SSN': 'id-number',
    'TITL': 'title',
    'FACT': 'fact',
}

FAMILY_EVENT_TAGS = {
    'MARR': 'marriage',
    'DIV': 'divorce',
    'DIVF': 'divorce-filed',
    'ENGA': 'engagement',
    'MARB': 'marriage-bann',
    'MARC': 'marriage-contract',
    'MARL': 'marriage-license',
    'MARS': 'marriage-settlement',
    'ANUL': 'annulment',
    '_SEPR': 'separation',
    'SEPA': 'separation',
}

# Kinds grouped by the fusion heuristic with marriages of the same spouse
MARRIAGE_KINDS = ('marriage',)
DIVORCE_KINDS = ('divorce', 'annulment')

IDENTIFIER_TAGS = {
    'AFN': 'afn',
    'RFN': 'rfn',
    'REFN': 'refn',
    'RIN': 'rin',
    '_UID': 'uid',
}

SEX_MAP = {
    'M': 'male',
    'F': 'female',
}

SUBDIVISION_TAGS = ('_SUBDIV', '_SDIV', 'ADDR', '_ADDR')

NOTE_TAGS = ('NOTE',)
SOURCE_TAGS = ('SOUR',)
MEDIA_TAGS = ('OBJE', '_PHOTO')
