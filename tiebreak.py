"""
Restore the correct order of words that differ only in vowel length.
Some implementations of the Hungarian collation compare vowel length
from the end of the word, putting "zsáner" before "zsanér". In the
sorted stream such words are adjacent, so runs of records whose indices
are equal apart from letter case and vowel length are collected and
reordered: short vowels first, the first vowel position deciding.
"""

from more_itertools import split_when

from consts import (BREAK_MARK, LONG_VOWELS, SHORT_VOWELS, VOWEL_FOLD,
                    LONG_VOWEL_SIGN, SHORT_VOWEL_SIGN)


def index_of(record):
    return record.partition('\t')[0]


def strip_index(record, break_mark=BREAK_MARK):
    '''Return the original line of a sort record without break marks'''
    return record.partition('\t')[2].replace(break_mark, '')


def fold_vowels(text):
    '''Lower case text with every long vowel replaced by its short pair'''
    return text.translate(VOWEL_FOLD).lower()


def vowel_signature(text):
    '''
    Return the sequence of vowel lengths in text, one LONG_VOWEL_SIGN
    or SHORT_VOWEL_SIGN per vowel, other characters are ignored.
    "Zsanér" -> "SL"
    '''
    signs = []
    for ch in text.lower():
        if ch in LONG_VOWELS:
            signs.append(LONG_VOWEL_SIGN)
        elif ch in SHORT_VOWELS:
            signs.append(SHORT_VOWEL_SIGN)
    return ''.join(signs)


def same_run(record_a, record_b):
    '''True if the indices differ at most in letter case and vowel length'''
    index_a, index_b = index_of(record_a), index_of(record_b)
    return (len(index_a) == len(index_b)
            and fold_vowels(index_a) == fold_vowels(index_b))


def combined_key(record):
    return vowel_signature(index_of(record)) + record


def reorder_run(run):
    '''
    Sort a run of records by vowel signature + record and reverse it.
    LONG_VOWEL_SIGN < SHORT_VOWEL_SIGN, so after reversing short vowels
    come first, and lower case comes before upper case.
    A run whose first and last record have the same key is kept as it
    is. Only the two ends of the run are compared.
    '''
    if len(run) < 2 or combined_key(run[0]) == combined_key(run[-1]):
        return run
    return sorted(run, key=combined_key, reverse=True)


def resolve(records, break_mark=BREAK_MARK):
    '''
    Iterate over the lines of the sorted records with the runs of vowel
    length variants reordered.
    '''
    for run in split_when(records, lambda a, b: not same_run(a, b)):
        for record in reorder_run(run):
            yield strip_index(record, break_mark)
