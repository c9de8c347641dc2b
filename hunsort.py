"""
Sort Hungarian text lines in linguistically correct order.
Lines containing digraphs are corrected with the help of morphological
analyses before their sort index is built, so that e.g. "meggyőz"
(meg + győz) is not sorted as a doubled "gy". The lines are then sorted
by the locale's collation, and if the collation orders vowel length
from the wrong end, the order of vowel length variants is fixed.
"""

import argparse
import fileinput
import logging
import subprocess
import sys
from collections import Counter
from contextlib import ExitStack
from dataclasses import dataclass, field, fields
from pathlib import Path

import regex
import yaml

import sort_index
import tiebreak
from analyzer import HunspellProcess, HunspellLibrary
from consts import BREAK_MARK, DIAGNOSTIC_BREAK_MARK
from locale_sort import LocaleSort, DEFAULT_LOCALE, SORT_COMMAND
from morph_rules import build_correction_map

logger = logging.getLogger('hunsort')

ANALYZERS = ('process', 'library')
TIEBREAK_MODES = ('auto', 'always', 'never')

# leading and trailing punctuation of a whitespace delimited token
TOKEN_PATTERN = regex.compile(r'([^\p{L}\p{N}]*)(.*?)([^\p{L}\p{N}]*)',
                              regex.DOTALL)
WHITESPACE_PATTERN = regex.compile(r'(\s+)')


@dataclass
class Config:
    delimiter: str | None = None
    diagnostic: bool = False
    locale: str = DEFAULT_LOCALE
    dictionary: str = 'hu_HU'
    analyzer: str = 'process'
    analyzer_command: list[str] | None = None
    sort_command: list[str] = field(default_factory=lambda: list(SORT_COMMAND))
    tiebreak: str = 'auto'
    work_dir: str | None = None
    log_file: str | None = None

    def __post_init__(self):
        if self.analyzer not in ANALYZERS:
            raise ValueError(f"Invalid analyzer '{self.analyzer}', "
                             + f"must be one of {ANALYZERS}")
        if self.tiebreak not in TIEBREAK_MODES:
            raise ValueError(f"Invalid tiebreak mode '{self.tiebreak}', "
                             + f"must be one of {TIEBREAK_MODES}")
        if self.delimiter is not None:
            try:
                regex.compile(self.delimiter)
            except regex.error as err:
                raise ValueError(f"Invalid delimiter pattern "
                                 + f"'{self.delimiter}': {err}") from err
        if self.analyzer_command is None:
            self.analyzer_command = ['hunspell', '-m', '-i', 'utf-8',
                                     '-d', self.dictionary]

    @property
    def break_mark(self):
        return DIAGNOSTIC_BREAK_MARK if self.diagnostic else BREAK_MARK


def read_config(file_path):
    '''
    Read settings from a YAML file. Keys are the field names of Config;
    unknown keys are an error.
    '''
    with open(file_path, encoding='utf-8') as cfg:
        settings = yaml.load(cfg.read(), Loader=yaml.SafeLoader) or {}
    if not isinstance(settings, dict):
        raise ValueError(f"Invalid configuration in {file_path}: "
                         + "expected a mapping")
    known = {f.name for f in fields(Config)}
    unknown = set(settings) - known
    if unknown:
        raise ValueError(f"Unknown keys in configuration {file_path}: "
                         + f"{sorted(unknown)}")
    return settings


class PhaseError(RuntimeError):
    '''Raised when a pipeline phase is started out of order'''


def bare_word(token):
    '''Return token without its leading and trailing punctuation'''
    return TOKEN_PATTERN.fullmatch(token)[2]


def correct_subject(subject, corrections):
    '''Replace the words of subject that have a corrected form'''
    parts = WHITESPACE_PATTERN.split(subject)
    for i, token in enumerate(parts):
        match = TOKEN_PATTERN.fullmatch(token)
        corrected = corrections.get(match[2])
        if corrected is not None:
            parts[i] = match[1] + corrected + match[3]
    return ''.join(parts)


class Pipeline:
    '''
    State of one sorting run, going through the phases
    collect -> analyze -> correct -> sort -> resolve.
    The analyzer channel and the sort channel are opened by the caller
    and closed by the pipeline at the end of their phase.
    '''

    PHASES = ('collect', 'analyze', 'correct', 'sort', 'resolve')

    def __init__(self, analyzer, sort_channel, delimiter=None,
                 break_mark=BREAK_MARK):
        self.analyzer = analyzer
        self.sort_channel = sort_channel
        self.delimiter = (regex.compile(delimiter)
                          if isinstance(delimiter, str) else delimiter)
        self.break_mark = break_mark
        # lines waiting for the correction map, with their multiplicity
        self.buffer = Counter()
        self.submitted = set()
        self.corrections = None
        self.direct_count = 0
        self.phase = 'collect'

    def enter(self, phase):
        '''Move on to `phase`, which has to be the next one'''
        position = self.PHASES.index(self.phase)
        if self.PHASES[position + 1:position + 2] != (phase,):
            raise PhaseError(f"Cannot start phase '{phase}' in phase "
                             + f"'{self.phase}'")
        logger.info(f'Phase {phase}')
        self.phase = phase

    def subject(self, line):
        '''Return the part of the line relevant for sorting'''
        if self.delimiter is None:
            return line
        match = self.delimiter.search(line)
        return line[:match.start()] if match else line

    def collect(self, lines):
        '''
        Send lines without digraphs straight to the sort, buffer the
        others and submit their digraph words to the analyzer, each
        word once per run.
        '''
        if self.phase != 'collect':
            raise PhaseError(f"Cannot collect lines in phase '{self.phase}'")
        for line in lines:
            subject = self.subject(line)
            if not sort_index.has_digraph(subject):
                self.sort_channel.write(
                    sort_index.encode(subject, self.break_mark), line)
                self.direct_count += 1
                continue
            self.buffer[line] += 1
            for token in subject.split():
                word = bare_word(token)
                if sort_index.has_digraph(word) and word not in self.submitted:
                    self.submitted.add(word)
                    self.analyzer.submit(word)

    def analyze(self):
        self.enter('analyze')
        logger.info(f'{self.direct_count} lines sorted directly, '
                    + f'{sum(self.buffer.values())} lines '
                    + f'({len(self.buffer)} distinct) wait for '
                    + f'{len(self.submitted)} analyzed words.')
        self.analyzer.close()

    def correct(self):
        self.enter('correct')
        self.corrections = build_correction_map(self.analyzer.responses(),
                                                self.break_mark)
        self.reprocess()

    def reprocess(self):
        '''
        Build the index of the buffered lines from their corrected
        subjects and send every occurrence of them to the sort.
        '''
        if self.corrections is None:
            raise PhaseError('Lines cannot be reprocessed before the '
                             + 'correction map is built.')
        for line, count in self.buffer.items():
            subject = correct_subject(self.subject(line), self.corrections)
            index = sort_index.encode(subject, self.break_mark)
            for _ in range(count):
                self.sort_channel.write(index, line)
        self.buffer.clear()

    def sort(self):
        self.enter('sort')
        self.sort_channel.close()

    def resolve(self, fix_vowel_length=False):
        '''Return an iterator over the output lines'''
        self.enter('resolve')
        records = self.sort_channel.records()
        if fix_vowel_length:
            return tiebreak.resolve(records, self.break_mark)
        return (tiebreak.strip_index(record, self.break_mark)
                for record in records)

    def run(self, lines, fix_vowel_length=False):
        self.collect(lines)
        self.analyze()
        self.correct()
        self.sort()
        return self.resolve(fix_vowel_length)


def open_analyzer(config):
    if config.analyzer == 'library':
        return HunspellLibrary(config.dictionary)
    return HunspellProcess(config.analyzer_command, config.work_dir,
                           keep_files=config.diagnostic)


def needs_tiebreak(config, sorter):
    if config.tiebreak == 'auto':
        return sorter.has_vowel_length_defect()
    return config.tiebreak == 'always'


def build_config(args):
    '''Settings from the config file, overridden by the command line'''
    settings = read_config(args.config) if args.config else {}
    for key in ('delimiter', 'locale', 'dictionary', 'analyzer',
                'tiebreak', 'work_dir', 'log_file'):
        value = getattr(args, key)
        if value is not None:
            settings[key] = value
    if args.diagnostic:
        settings['diagnostic'] = True
    return Config(**settings)


def sort_files(config, sorter, files, output=None):
    '''
    Sort the lines of `files` (standard input if empty) into the file
    `output` (standard output if None). Every file and channel opened
    here is closed even if a subprocess fails.
    '''
    fix_vowel_length = needs_tiebreak(config, sorter)
    with ExitStack() as stack:
        if output:
            outfile = stack.enter_context(open(output, 'w',
                                               encoding='utf-8'))
        else:
            sys.stdout.reconfigure(encoding='utf-8')
            outfile = sys.stdout
        if not files or '-' in files:
            sys.stdin.reconfigure(encoding='utf-8')
        analyzer = stack.enter_context(open_analyzer(config))
        channel = stack.enter_context(sorter.open())
        infile = stack.enter_context(fileinput.input(files,
                                                     encoding='utf-8'))
        pipeline = Pipeline(analyzer, channel, config.delimiter,
                            config.break_mark)
        lines = (line.rstrip('\n') for line in infile)
        for line in pipeline.run(lines, fix_vowel_length):
            outfile.write(line + '\n')


def main():
    args = get_args()
    config = build_config(args)

    logging.basicConfig(filename=config.log_file,
                        format='*%(asctime)s,%(name)s,%(message)s',
                        datefmt='%Y/%m/%d %H:%M:%S',
                        level=logging.DEBUG)
    if config.log_file is None:
        logging.disable()

    sorter = LocaleSort(config.locale, config.sort_command,
                        config.work_dir, keep_files=config.diagnostic)

    try:
        if args.check_locale:
            print('defect' if sorter.has_vowel_length_defect() else 'ok')
            return
        sort_files(config, sorter, args.files, args.output)
    except subprocess.CalledProcessError as err:
        logger.exception(str(err))
        print(f'hunsort: {err}', file=sys.stderr)
        sys.exit(err.returncode)
    except OSError as err:
        logger.exception(str(err))
        print(f'hunsort: {err}', file=sys.stderr)
        sys.exit(1)


def get_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description=__doc__,
    )
    parser.add_argument(
        'files',
        help='input files, standard input if none or `-`',
        nargs='*',
        type=str
    )
    parser.add_argument(
        '--output', '-o',
        help='output file, standard output if omitted',
        type=str
    )
    parser.add_argument(
        '--config', '-c',
        help='YAML file with settings, overridden by the options below',
        type=Path
    )
    parser.add_argument(
        '--delimiter', '-t',
        help='regular expression, only the text before its first match '
             + 'is used for sorting',
        type=str
    )
    parser.add_argument(
        '--diagnostic', '-d',
        help='use a visible break mark and keep the intermediate files',
        action='store_true'
    )
    parser.add_argument(
        '--locale', '-l',
        help=f'locale of the sort command (default: {DEFAULT_LOCALE})',
        type=str
    )
    parser.add_argument(
        '--dictionary',
        help='Hunspell dictionary name or path without extension '
             + '(default: hu_HU)',
        type=str
    )
    parser.add_argument(
        '--analyzer',
        help='run Hunspell as a `process` or through the Python `library` '
             + '(default: process)',
        choices=ANALYZERS
    )
    parser.add_argument(
        '--tiebreak',
        help='fix the order of vowel length variants: `auto` if the locale '
             + 'needs it, `always` or `never` (default: auto)',
        choices=TIEBREAK_MODES
    )
    parser.add_argument(
        '--work-dir',
        help='directory of the intermediate files',
        dest='work_dir',
        type=str
    )
    parser.add_argument(
        '--log-file',
        help='write a log to this file',
        dest='log_file',
        type=str
    )
    parser.add_argument(
        '--check-locale',
        help='only report whether the locale orders vowel length wrongly',
        action='store_true'
    )
    return parser.parse_args()


if __name__ == '__main__':
    main()
