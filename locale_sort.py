"""
The external sort: coreutils `sort`, run under the Hungarian locale.
Records are "<index>\\t<line>" strings, sorted stably by the index
field only, so equal indices keep the order in which they were fed.
"""

import logging
import os
import subprocess
import tempfile

from analyzer import ChannelError
from consts import PROBE_WORDS

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = 'hu_HU.UTF-8'

SORT_COMMAND = ['sort', '-s', '-t', '\t', '-k1,1']


class LocaleSort:
    '''Runs the sort command under the given locale.'''

    def __init__(self, locale=DEFAULT_LOCALE, command=None,
                 work_dir=None, keep_files=False):
        self.locale = locale
        self.command = command or SORT_COMMAND
        self.work_dir = work_dir
        self.keep_files = keep_files

    def environment(self):
        return dict(os.environ, LC_ALL=self.locale)

    def open(self):
        '''Start a sort subprocess and return the channel feeding it'''
        return SortChannel(self.command, self.environment(),
                           self.work_dir, self.keep_files)

    def sort_lines(self, lines):
        '''Sort a few lines in one go and return them in sorted order'''
        output = subprocess.check_output(self.command,
                                         input=''.join(line + '\n'
                                                       for line in lines),
                                         env=self.environment(),
                                         encoding='utf-8')
        return output.splitlines()

    def has_vowel_length_defect(self):
        '''
        Return True if the collation of the locale orders "zsáner"
        before "zsanér", i.e. compares vowel length from the wrong end.
        '''
        result = self.sort_lines(PROBE_WORDS)
        defect = result[0] == PROBE_WORDS[1]
        logger.info(f'Locale probe under {self.locale}: {result} '
                    + ('-> vowel length defect' if defect else '-> ok'))
        return defect


class SortChannel:
    '''
    A running sort process. All records have to be written and the
    channel closed before the sorted records can be read; the sorted
    output is persisted in a file, because the tie-break resolver needs
    to look ahead over whole runs of records.
    '''

    def __init__(self, command, env, work_dir=None, keep_files=False):
        self.command = command
        self.closed = False
        self.record_count = 0
        self.output_file = tempfile.NamedTemporaryFile(
            mode='w+', encoding='utf-8', dir=work_dir,
            prefix='hunsort-', suffix='.sorted', delete=not keep_files)
        if keep_files:
            logger.info(f'Sorted records are kept in {self.output_file.name}')
        logger.info(f'Starting sort: {command}')
        self.process = subprocess.Popen(command, stdin=subprocess.PIPE,
                                        stdout=self.output_file,
                                        env=env, encoding='utf-8')

    def write(self, index, line):
        if self.closed:
            raise ChannelError('Cannot write records to a closed '
                               + 'sort channel.')
        self.process.stdin.write(f'{index}\t{line}\n')
        self.record_count += 1

    def close(self):
        if self.closed:
            return
        self.process.stdin.close()
        returncode = self.process.wait()
        self.closed = True
        if returncode:
            raise subprocess.CalledProcessError(returncode, self.command)
        logger.info(f'Sorted {self.record_count} records.')

    def records(self):
        '''Iterate over the sorted records, only after closing'''
        if not self.closed:
            raise ChannelError('Sorted records can only be read after '
                               + 'the sort channel has been closed.')
        return self._read()

    def _read(self):
        self.output_file.flush()
        self.output_file.seek(0)
        for line in self.output_file:
            yield line.rstrip('\n')

    def discard(self):
        if self.process.poll() is None:
            self.process.kill()
            self.process.wait()
        self.output_file.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.discard()
