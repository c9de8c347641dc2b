"""
Turn morphological analyses of words into corrected word forms in which
the boundaries that must not be read as a digraph (or as a simplified
doubling) carry a break mark.
"meggyőz" is meg + győz, not a doubled "gy", "község" is köz + ség, not
kö + zs + ég, so the sort index of these words has to be built from
"meg¦győz" and "köz¦ség".
Each rule looks at the tags of one analysis line and the word as
corrected by the preceding rules, and returns a new form or None.
"""

import logging
from collections import defaultdict
from functools import reduce

import regex

import sort_index
from consts import (BREAK_MARK, LONG_VOWELS, SHORT_VOWELS,
                    POS_TAG, STEM_TAG, DERIVATION_TAG, INFLECTION_TAG,
                    INFLECTIONAL_PREFIX_TAG, VERBAL_PREFIX_TAG,
                    HYPHENATION_TAG, COMPOUND_PART_TAG,
                    PROPER_NOUN, NUMERALS, ABSTRACT_NOUN_SUFFIX,
                    MULTIPLICATIVE_SUFFIXES, SZERU_SUFFIX, MEASURE_SUFFIX,
                    INSTRUMENTAL_TRANSLATIVE, SUPERLATIVE_PREFIX)

logger = logging.getLogger(__name__)

VOWELS = LONG_VOWELS + SHORT_VOWELS

# joins compound parts into a hyphenation hint
COMPOUND_JOINER = '|'

#  "község" -> "köz¦ség", but "egészség" is left alone
ABSTRACT_NOUN_PATTERN = regex.compile(r'(?<=(?:^|[^sd])z)(?=s[áé]g)',
                                      regex.IGNORECASE)
BARE_Z_PATTERN = regex.compile(r'(?:^|[^sd])z$', regex.IGNORECASE)

#  "százszor" -> "száz¦szor", "kilencszer" -> "kilenc¦szer"
MULTIPLICATIVE_PATTERN = regex.compile(r'(?<=c|(?:^|[^s])z)(?=sz[oeö]r)',
                                       regex.IGNORECASE)

#  "leggyorsabb" -> "leg¦gyorsabb", "legesleggyorsabb" too
SUPERLATIVE_PATTERN = regex.compile(r'(?<=^leg(?:esleg)*)(?=gy)',
                                    regex.IGNORECASE)

#  "gázszerű" -> "gáz¦szerű", "ájulásszerű" -> "ájulás¦szerű"
SZERU_PATTERN = regex.compile(r'(?<=[csz])(?=szerű)', regex.IGNORECASE)

#  "kazánnyi" -> "kazán¦nyi"
MEASURE_PATTERN = regex.compile(r'(?<=n)(?=nyi)', regex.IGNORECASE)
BARE_N_PATTERN = regex.compile(r'n$', regex.IGNORECASE)

#  "Jamesszel" -> "James¦szel", "Jamesszé" -> "James¦szé"
FOREIGN_SZ_PATTERN = regex.compile(r'(?<=s)(?=sz(?:al|el|á|é))',
                                   regex.IGNORECASE)
BARE_S_PATTERN = regex.compile(r'(?:^|[^csz])s$', regex.IGNORECASE)

# end of a numeral stem and the beginning of the next compound member
#  "kilenccsillagos" -> "kilenc¦csillagos", "hatvannyolc" -> "hatvan¦nyolc"
NUMERAL_BOUNDARIES = (
    (regex.compile(r'(?:kilenc|nyolc)$', regex.IGNORECASE), 'cs'),
    (regex.compile(r'(?:kilenc|nyolc)$', regex.IGNORECASE), 's'),
    (regex.compile(r'l$', regex.IGNORECASE), 'ly'),
    (regex.compile(r'n$', regex.IGNORECASE), 'ny'),
    (regex.compile(r'(?:két|öt|hat|hét)$', regex.IGNORECASE), 'ty'),
    (regex.compile(r'(?:tíz|száz)$', regex.IGNORECASE), 'zs'),
    (regex.compile(r'(?:tíz|száz)$', regex.IGNORECASE), 's'),
)

# last letter of a verbal prefix and beginning of the stem
#  "meggyőz" -> "meg¦győz", "agyonnyom" -> "agyon¦nyom"
VERBAL_PREFIX_BOUNDARIES = (('g', 'gy'), ('l', 'ly'), ('n', 'ny'),
                            ('t', 'ty'))

ALNUM_TAIL_PATTERN = regex.compile(r'[\p{L}\p{N}]{3}$')


class Analysis:
    '''
    One line of analyzer output: the analyzed surface form followed by
    TAB or space separated `code:value` tags. A code may occur more than
    once (compound parts), so every code maps to a list of values.
    '''

    def __init__(self, surface, tags=None):
        self.surface = surface
        self.tags = tags or {}

    @classmethod
    def parse(cls, line):
        '''Return Analysis for a response line, None for a blank line'''
        fields = line.split()
        if not fields:
            return None
        tags = defaultdict(list)
        for field in fields[1:]:
            code, colon, value = field.partition(':')
            if colon and value:
                tags[code].append(value)
        return cls(fields[0], dict(tags))

    def get(self, code, default=''):
        '''Return the first value of a tag'''
        values = self.tags.get(code)
        return values[0] if values else default

    def values(self, code):
        return self.tags.get(code, [])

    def has(self, code, *values):
        '''Return True if the tag has any of the values'''
        return any(v in values for v in self.tags.get(code, ()))

    @property
    def proper_noun(self):
        return self.has(POS_TAG, PROPER_NOUN)

    def __repr__(self):
        return f'Analysis({self.surface!r}, {self.tags!r})'


def insert_break(pattern, word, break_mark):
    '''Insert break_mark at the first (zero-width) match of pattern'''
    corrected, count = pattern.subn(break_mark, word, count=1)
    return corrected if count else None


def break_after(word, length, follower, break_mark):
    '''Break the word after its first `length` letters if `follower` comes next'''
    if word[length:].lower().startswith(follower):
        return word[:length] + break_mark + word[length:]
    return None


def abstract_noun(analysis, word, break_mark):
    '''-ság/-ség after a stem ending in a bare z'''
    if (analysis.has(DERIVATION_TAG, ABSTRACT_NOUN_SUFFIX)
            and BARE_Z_PATTERN.search(analysis.get(STEM_TAG))):
        return insert_break(ABSTRACT_NOUN_PATTERN, word, break_mark)
    return None


def multiplicative(analysis, word, break_mark):
    '''-szor/-szer/-ször after c or a z that is not part of an sz'''
    if analysis.has(DERIVATION_TAG, *MULTIPLICATIVE_SUFFIXES):
        return insert_break(MULTIPLICATIVE_PATTERN, word, break_mark)
    return None


def superlative(analysis, word, break_mark):
    '''leg- before a stem starting with gy'''
    if (analysis.has(INFLECTIONAL_PREFIX_TAG, SUPERLATIVE_PREFIX)
            and analysis.get(STEM_TAG).lower().startswith('gy')):
        return insert_break(SUPERLATIVE_PATTERN, word, break_mark)
    return None


def szeru_suffix(analysis, word, break_mark):
    '''-szerű after c, s or z'''
    if analysis.has(DERIVATION_TAG, SZERU_SUFFIX):
        return insert_break(SZERU_PATTERN, word, break_mark)
    return None


def measure_suffix(analysis, word, break_mark):
    '''-nyi after a stem ending in a bare n'''
    if (analysis.has(INFLECTION_TAG, MEASURE_SUFFIX)
            and BARE_N_PATTERN.search(analysis.get(STEM_TAG))):
        return insert_break(MEASURE_PATTERN, word, break_mark)
    return None


def foreign_sz(analysis, word, break_mark):
    '''
    Instrumental and translative suffix of a stem ending in an s that
    is pronounced sz: "James" + "vel" -> "Jamesszel"
    '''
    if (analysis.has(INFLECTION_TAG, *INSTRUMENTAL_TRANSLATIVE)
            and BARE_S_PATTERN.search(analysis.get(STEM_TAG))):
        return insert_break(FOREIGN_SZ_PATTERN, word, break_mark)
    return None


def numeral_prefix(analysis, word, break_mark):
    '''Numeral as the first member of a compound'''
    if not analysis.has(POS_TAG, *NUMERALS):
        return None
    stem = analysis.get(STEM_TAG)
    if not stem or not word.lower().startswith(stem.lower()):
        return None
    for stem_end, follower in NUMERAL_BOUNDARIES:
        if stem_end.search(stem):
            corrected = break_after(word, len(stem), follower, break_mark)
            if corrected is not None:
                return corrected
    return None


def verbal_prefix(analysis, word, break_mark):
    '''Verbal prefix ending in the first letter of the stem's digraph'''
    prefix = analysis.get(VERBAL_PREFIX_TAG).lower()
    stem = analysis.get(STEM_TAG).lower()
    if not prefix or not stem or not word.lower().startswith(prefix):
        return None
    for last, first in VERBAL_PREFIX_BOUNDARIES:
        if prefix.endswith(last) and stem.startswith(first):
            return break_after(word, len(prefix), first, break_mark)
    return None


def substitute_hint(word, hint, break_mark):
    '''
    Find the hint without its break characters in the word
    (ignoring case) and put the break marks of the hint into the word
    at the same places. Return the word unchanged if the hint does
    not occur in it or does not contain a digraph boundary.
    '''
    plain = sort_index.strip(hint)
    marked = sort_index.strip(sort_index.mark(hint, break_mark))
    if not plain or marked == plain:
        return word
    start = word.lower().find(plain.lower())
    if start < 0:
        return word
    end = start + len(plain)
    letters = iter(word[start:end])
    rebuilt = ''.join(ch if ch == break_mark else next(letters)
                      for ch in marked)
    return word[:start] + rebuilt + word[end:]


def apply_hint(word, hint, break_mark=BREAK_MARK):
    '''
    Apply a hyphenation hint to the word. The end of the hint may
    differ from the word because of a linking vowel or a lengthened
    final vowel ("alma|fa" in "almafát"), so if the hint does not fit,
    it is shortened by one letter if it ends in a vowel, then by two
    more letters if its end consists of letters or digits.
    '''
    corrected = substitute_hint(word, hint, break_mark)
    if corrected == word and hint and hint[-1].lower() in VOWELS:
        hint = hint[:-1]
        corrected = substitute_hint(word, hint, break_mark)
    if corrected == word and ALNUM_TAIL_PATTERN.search(hint):
        hint = hint[:-2]
        corrected = substitute_hint(word, hint, break_mark)
    return corrected


def hyphenation_hint(analysis, word, break_mark):
    '''Explicit hyphenation hint of the analyzer'''
    corrected = word
    for hint in analysis.values(HYPHENATION_TAG):
        corrected = apply_hint(corrected, hint, break_mark)
    return corrected if corrected != word else None


def compound_parts(analysis, word, break_mark):
    '''Compound members of the analysis, joined into a hyphenation hint'''
    parts = analysis.values(COMPOUND_PART_TAG)
    if not parts:
        return None
    corrected = apply_hint(word, COMPOUND_JOINER.join(parts), break_mark)
    return corrected if corrected != word else None


# in order of precedence
RULES = (
    abstract_noun,
    multiplicative,
    superlative,
    szeru_suffix,
    measure_suffix,
    foreign_sz,
    numeral_prefix,
    verbal_prefix,
    hyphenation_hint,
    compound_parts,
)


def correct(analysis, break_mark=BREAK_MARK):
    '''Fold the rules over the surface form of an analysis'''
    return reduce(lambda word, rule: rule(analysis, word, break_mark) or word,
                  RULES, analysis.surface)


class CorrectionMap:
    '''
    Word -> corrected word mapping.
    A proper noun analysis always has the last word: it overrides an
    earlier correction of the same word, even with the unmodified form.
    Otherwise the first analysis that changes a word wins.
    The map is frozen after the analyzer's responses have been read.
    '''

    def __init__(self):
        self.entries = {}
        self.frozen = False

    def record(self, surface, corrected, proper_noun=False):
        if self.frozen:
            raise RuntimeError('Correction map is already frozen.')
        if proper_noun:
            if corrected != surface or surface in self.entries:
                self.entries[surface] = corrected
        elif corrected != surface and surface not in self.entries:
            self.entries[surface] = corrected

    def freeze(self):
        self.frozen = True

    def get(self, word, default=None):
        return self.entries.get(word, default)

    def __contains__(self, word):
        return word in self.entries

    def __getitem__(self, word):
        return self.entries[word]

    def __len__(self):
        return len(self.entries)


def build_correction_map(lines, break_mark=BREAK_MARK):
    '''
    Build the correction map from the complete response stream of the
    analyzer, processing the analyses in arrival order.
    '''
    corrections = CorrectionMap()
    analysis_count = 0
    for line in lines:
        analysis = Analysis.parse(line)
        if analysis is None:
            continue
        analysis_count += 1
        corrected = correct(analysis, break_mark)
        if corrected != analysis.surface:
            logger.debug(f'{analysis.surface} -> {corrected}')
        corrections.record(analysis.surface, corrected,
                           analysis.proper_noun)
    corrections.freeze()
    logger.info(f'Built correction map of {len(corrections)} words '
                + f'from {analysis_count} analyses.')
    return corrections
