"""
Constants.
"""

# `¦` == place of a broken digraph in the examples below

# zero-width joiner, invisible in the output but enough to stop the
# collation from reading two adjacent letters as one digraph
#  "kas¦zab" -> sorts as k-a-s-z-a-b, not k-a-sz-a-b
BREAK_MARK = '\u200d'

# visible replacement of BREAK_MARK in diagnostic mode
DIAGNOSTIC_BREAK_MARK = '¦'

# characters that mark a boundary in analyzer hyphenation hints
#  "hy:kas|zab", "hy:meg=győz"
HINT_BREAKS = '|=+-'

DIGRAPHS = ('cs', 'dz', 'gy', 'ly', 'ny', 'sz', 'ty', 'zs')

# simplified doublings, longest first
#  "asszony" -> "aszszony", "briddzsel" -> "bridzsdzsel"
SIMPLIFIED_DOUBLINGS = ('ddzs', 'ccs', 'ddz', 'ggy', 'lly', 'nny', 'tty',
                        'ssz', 'zzs')

# letters before which a doubling is a real trigraph, not a doubling
#  "cssz": cs + sz, "dzzs": dz + zs
DOUBLING_EXCEPTIONS = {
    'ssz': 'cz',
    'zzs': 'ds',
}

# last letter of a word part / beginning of the next part that would
# merge into a digraph or a simplified doubling if written together,
# the longer pattern first for every letter
BOUNDARY_PAIRS = (
    ('c', 'cs'), ('c', 's'),
    ('d', 'dz'), ('d', 'z'),
    ('g', 'gy'), ('g', 'y'),
    ('l', 'ly'), ('l', 'y'),
    ('n', 'ny'), ('n', 'y'),
    ('s', 'sz'), ('s', 'z'),
    ('t', 'ty'), ('t', 'y'),
    ('z', 'zs'), ('z', 's'),
)

LONG_VOWELS = 'áéíóőúű'
SHORT_VOWELS = 'aeioöuü'
VOWEL_FOLD = str.maketrans(LONG_VOWELS + LONG_VOWELS.upper(),
                           SHORT_VOWELS + SHORT_VOWELS.upper())

LONG_VOWEL_SIGN = 'L'
SHORT_VOWEL_SIGN = 'S'

# the pair the locale probe sorts, correct order first
PROBE_WORDS = ('zsanér', 'zsáner')

# --- analyzer tags (Hunspell morphological fields)

POS_TAG = 'po'
STEM_TAG = 'st'
DERIVATION_TAG = 'ds'
INFLECTION_TAG = 'is'
INFLECTIONAL_PREFIX_TAG = 'ip'
VERBAL_PREFIX_TAG = 'sp'
HYPHENATION_TAG = 'hy'
COMPOUND_PART_TAG = 'pa'

PROPER_NOUN = 'noun_prs'
NUMERALS = {'num', 'adj_num'}

ABSTRACT_NOUN_SUFFIX = 'ABSTR'           # -ság/-ség
MULTIPLICATIVE_SUFFIXES = {'MULTIPL',    # -szor/-szer/-ször
                           'ORD_MULTIPL'}
SZERU_SUFFIX = 'SIMIL'                   # -szerű
MEASURE_SUFFIX = 'MEASURE'               # -nyi
INSTRUMENTAL_TRANSLATIVE = {'INSTR', 'TRANSL'}
SUPERLATIVE_PREFIX = 'SUPERLAT'          # leg-
