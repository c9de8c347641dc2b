"""
Build the sort index of a text: a form of the text on which the
Hungarian collation of the locale gives the linguistically correct order.
Simplified doublings of digraphs and trigraphs are written out in full
("asszony" -> "aszszony"), letters that meet across a word or compound
boundary are kept apart by a break mark ("Kis Zoltán" -> "Kis¦Zoltán"
instead of "KisZoltán", which would contain an "sz"), and everything else
that is not a letter or a digit is removed.
"""

from functools import lru_cache

import regex

from consts import (BREAK_MARK, HINT_BREAKS, DIGRAPHS, SIMPLIFIED_DOUBLINGS,
                    DOUBLING_EXCEPTIONS, BOUNDARY_PAIRS)

ALNUM = r'\p{L}\p{N}'

NON_ALNUM_PATTERN = regex.compile(f'[^{ALNUM}]')

DIGRAPH_PATTERN = regex.compile('|'.join(DIGRAPHS), regex.IGNORECASE)

HINT_BREAK_PATTERN = regex.compile(f'[{regex.escape(HINT_BREAKS)}]')


def doubling_alternative(doubling):
    '''Return regex for a simplified doubling, honouring its exceptions'''
    not_after = DOUBLING_EXCEPTIONS.get(doubling)
    if not_after:
        return f'(?<![{not_after}]){doubling}'
    return doubling


def boundary_pattern(separator):
    '''
    Return a pattern that matches `separator` wherever it lies between
    the two halves of one of the BOUNDARY_PAIRS. The alternatives keep
    the order of BOUNDARY_PAIRS, so the longer digraph is tried first.
    '''
    return regex.compile('|'.join(f'(?<={first}){separator}(?={second})'
                                  for first, second in BOUNDARY_PAIRS),
                         regex.IGNORECASE)


DOUBLING_PATTERN = regex.compile(
    '|'.join(doubling_alternative(d) for d in SIMPLIFIED_DOUBLINGS),
    regex.IGNORECASE)

# runs of non-alphanumeric characters (spaces, hyphens, break marks)
SEPARATOR_BOUNDARY_PATTERN = boundary_pattern(f'[^{ALNUM}]+')

# a single break character of a hyphenation hint
HINT_BOUNDARY_PATTERN = boundary_pattern(
    f'[{regex.escape(HINT_BREAKS)}]')


@lru_cache(maxsize=None)
def junk_pattern(break_mark):
    '''Return pattern of everything not kept in an index'''
    return regex.compile(f'[^{ALNUM}{regex.escape(break_mark)}]+')


def expand_doublings(text):
    '''
    Write out simplified doublings in full: "ccs" -> "cscs",
    "ddzs" -> "dzsdzs" etc. The letter case of the match is kept.
    '''
    return DOUBLING_PATTERN.sub(lambda m: m[0][1:] * 2, text)


def encode(text, break_mark=BREAK_MARK):
    '''
    Return the sort index of `text`.
    1. simplified doublings are expanded,
    2. if the text contains anything but letters and digits, the
       non-alphanumeric runs lying on a digraph boundary are replaced
       by `break_mark`,
    3. all remaining characters other than letters, digits and `break_mark`
       are removed.
    '''
    index = expand_doublings(text)
    if NON_ALNUM_PATTERN.search(index):
        index = SEPARATOR_BOUNDARY_PATTERN.sub(break_mark, index)
        index = junk_pattern(break_mark).sub('', index)
    return index


def mark(hint, break_mark=BREAK_MARK):
    '''
    Replace the break characters of an analyzer hyphenation hint with
    `break_mark` where they separate the halves of a digraph boundary.
    "kas|zab" -> "kas¦zab", "alma|fa" -> "alma|fa"
    '''
    return HINT_BOUNDARY_PATTERN.sub(break_mark, hint)


def strip(hint):
    '''Remove all break characters from a hyphenation hint'''
    return HINT_BREAK_PATTERN.sub('', hint)


def has_digraph(text):
    '''Return True if text contains a digraph (or trigraph) letter pair'''
    return DIGRAPH_PATTERN.search(text) is not None
