"""
Channels to the morphological analyzer (Hunspell).
Words are submitted one at a time, but the analyses can only be read
after the channel has been closed. The analyzer does not necessarily
flush its output word by word, so reading the responses before all
requests have been written could block or miss analyses.
"""

import logging
import subprocess
import tempfile
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class ChannelError(RuntimeError):
    '''Raised when a channel is used in the wrong phase'''


class AnalyzerChannel(ABC):
    '''Superclass for batch analyzer channels.'''

    def __init__(self):
        self.closed = False
        self.submitted_count = 0

    def submit(self, word):
        '''Send a word to the analyzer'''
        if self.closed:
            raise ChannelError('Cannot submit words to a closed '
                               + 'analyzer channel.')
        self._submit(word)
        self.submitted_count += 1

    def close(self):
        '''Signal the end of the requests and wait for the analyzer'''
        if self.closed:
            return
        self._close()
        self.closed = True
        logger.info(f'Analyzer channel closed after {self.submitted_count} '
                    + 'words.')

    def responses(self):
        '''
        Return an iterator over the response lines of the analyzer.
        Only allowed after the channel has been closed.
        '''
        if not self.closed:
            raise ChannelError('Analyzer responses can only be read after '
                               + 'the channel has been closed.')
        return self._responses()

    def discard(self):
        '''Release the resources of the channel'''
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.discard()

    @abstractmethod
    def _submit(self, word):
        pass

    @abstractmethod
    def _close(self):
        pass

    @abstractmethod
    def _responses(self):
        pass


class HunspellProcess(AnalyzerChannel):
    '''
    Analyzer run as a subprocess, e.g. `hunspell -m -d hu_HU`, reading
    one word per line on its standard input. Its output goes to a
    temporary file, which is read back after the process has exited.
    '''

    def __init__(self, command, work_dir=None, keep_files=False):
        super().__init__()
        self.command = command
        self.output_file = tempfile.NamedTemporaryFile(
            mode='w+', encoding='utf-8', dir=work_dir,
            prefix='hunsort-', suffix='.morph', delete=not keep_files)
        if keep_files:
            logger.info(f'Analyses are kept in {self.output_file.name}')
        logger.info(f'Starting analyzer: {" ".join(command)}')
        self.process = subprocess.Popen(command, stdin=subprocess.PIPE,
                                        stdout=self.output_file,
                                        encoding='utf-8')

    def _submit(self, word):
        self.process.stdin.write(word + '\n')

    def _close(self):
        self.process.stdin.close()
        returncode = self.process.wait()
        if returncode:
            raise subprocess.CalledProcessError(returncode, self.command)

    def _responses(self):
        self.output_file.flush()
        self.output_file.seek(0)
        for line in self.output_file:
            yield line.rstrip('\n')

    def discard(self):
        if self.process.poll() is None:
            self.process.kill()
            self.process.wait()
        self.output_file.close()


class HunspellLibrary(AnalyzerChannel):
    '''
    Analyzer using the Hunspell Python binding in-process. The words
    are collected and analyzed together when the channel is closed,
    each analysis is returned as "<word> <fields>", just like the
    output of `hunspell -m`.
    '''

    def __init__(self, dictionary):
        super().__init__()
        # optional dependency, only needed for this channel
        import hunspell

        self.hobj = hunspell.HunSpell(dictionary + '.dic',
                                      dictionary + '.aff')
        self.encoding = self.hobj.get_dic_encoding()
        self.words = []
        self.analyses = []

    def _submit(self, word):
        self.words.append(word)

    def _close(self):
        for word in self.words:
            for analysis in self.hobj.analyze(word):
                if isinstance(analysis, bytes):
                    analysis = analysis.decode(self.encoding)
                self.analyses.append(f'{word} {analysis.strip()}')
        self.words = []

    def _responses(self):
        return iter(self.analyses)
