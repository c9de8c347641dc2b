import argparse

import pytest

from analyzer import AnalyzerChannel, ChannelError
from consts import DIAGNOSTIC_BREAK_MARK
from hunsort import (Config, Pipeline, PhaseError, bare_word, build_config,
                     correct_subject, needs_tiebreak, read_config)
from morph_rules import build_correction_map

M = DIAGNOSTIC_BREAK_MARK

ANALYSES = {
    'Kaszab': ['Kaszab\tst:Kaszab\tpo:noun_prs\thy:kas|zab'],
    'kasza': ['kasza\tst:kasza\tpo:noun'],
    'meggyőz': ['meggyőz\tst:győz\tsp:meg\tpo:verb'],
    'község': ['község\tst:köz\tds:ABSTR\tpo:noun'],
}


class FakeAnalyzer(AnalyzerChannel):
    '''Answers from a fixed table of analyses'''

    def __init__(self, analyses=ANALYSES):
        super().__init__()
        self.analyses = analyses
        self.words = []

    def _submit(self, word):
        self.words.append(word)

    def _close(self):
        pass

    def _responses(self):
        for word in self.words:
            yield from self.analyses.get(word, [])


class FakeSort:
    '''Stable sort of the records by the index field'''

    def __init__(self):
        self.written = []
        self.closed = False

    def write(self, index, line):
        if self.closed:
            raise ChannelError('closed')
        self.written.append((index, line))

    def close(self):
        self.closed = True

    def records(self):
        if not self.closed:
            raise ChannelError('not closed')
        return iter(f'{index}\t{line}' for index, line
                    in sorted(self.written, key=lambda rec: rec[0]))


def make_pipeline(delimiter=None):
    return Pipeline(FakeAnalyzer(), FakeSort(), delimiter, M)


def test_bare_word():
    assert bare_word('(meggyőz),') == 'meggyőz'
    assert bare_word('Kaszab') == 'Kaszab'
    assert bare_word('...') == ''


def test_correct_subject_keeps_punctuation_and_whitespace():
    corrections = build_correction_map(ANALYSES['Kaszab'], M)
    assert (correct_subject('  Kaszab,\tkasza (Kaszab) ', corrections)
            == f'  Kas{M}zab,\tkasza (Kas{M}zab) ')


def test_lines_without_digraphs_are_sent_directly():
    pipeline = make_pipeline()
    pipeline.collect(['alma', 'Tóth Béla'])
    assert pipeline.sort_channel.written == [('alma', 'alma'),
                                             ('TóthBéla', 'Tóth Béla')]
    assert pipeline.analyzer.words == []
    assert not pipeline.buffer


def test_digraph_words_are_submitted_once():
    pipeline = make_pipeline()
    pipeline.collect(['Kaszab kasza', 'Kaszab', '(Kaszab)', 'alma'])
    assert pipeline.analyzer.words == ['Kaszab', 'kasza']
    assert pipeline.sort_channel.written == [('alma', 'alma')]


def test_corrected_index_for_every_occurrence():
    pipeline = make_pipeline()
    lines = ['Kaszab', 'kasza', 'Kaszab', 'Kaszab']
    pipeline.collect(lines)
    pipeline.analyze()
    pipeline.correct()
    written = pipeline.sort_channel.written
    assert written.count((f'Kas{M}zab', 'Kaszab')) == 3
    assert written.count(('kasza', 'kasza')) == 1
    assert len(written) == len(lines)
    assert not pipeline.buffer


def test_delimiter_limits_the_subject():
    pipeline = make_pipeline(delimiter=r'\t')
    pipeline.collect(['Kaszab\tmeggyőz', 'alma\tkasza'])
    assert pipeline.analyzer.words == ['Kaszab']
    pipeline.analyze()
    pipeline.correct()
    assert pipeline.sort_channel.written == [
        ('alma', 'alma\tkasza'),
        (f'Kas{M}zab', 'Kaszab\tmeggyőz'),
    ]


def test_subject_without_delimiter_match():
    pipeline = make_pipeline(delimiter=';')
    assert pipeline.subject('alma;körte') == 'alma'
    assert pipeline.subject('alma') == 'alma'


def test_run_returns_every_line_once_per_occurrence():
    lines = ['meggyőz', 'község', 'alma', 'község', 'Kaszab']
    output = list(make_pipeline().run(lines))
    assert sorted(output) == sorted(lines)
    assert output.count('község') == 2


def test_index_is_built_from_the_corrected_subject():
    pipeline = make_pipeline()
    pipeline.collect(['(meggyőz),', 'megy'])
    pipeline.analyze()
    pipeline.correct()
    assert pipeline.sort_channel.written == [(f'meg{M}győz', '(meggyőz),'),
                                             ('megy', 'megy')]


def test_identical_lines_stay_together():
    lines = ['Kaszab', 'alma', 'Kaszab', 'kasza', 'Kaszab']
    output = list(make_pipeline().run(lines))
    start = output.index('Kaszab')
    assert output[start:start + 3] == ['Kaszab'] * 3
    assert len(output) == len(lines)


def test_run_with_vowel_length_fix():
    lines = ['zsáner', 'alma', 'zsanér']
    output = list(make_pipeline().run(lines, fix_vowel_length=True))
    assert output == ['alma', 'zsanér', 'zsáner']


def test_phases_have_to_follow_each_other():
    pipeline = make_pipeline()
    with pytest.raises(PhaseError):
        pipeline.sort()
    with pytest.raises(PhaseError):
        pipeline.reprocess()
    pipeline.collect(['alma'])
    pipeline.analyze()
    with pytest.raises(PhaseError):
        pipeline.collect(['körte'])
    with pytest.raises(PhaseError):
        pipeline.analyze()
    pipeline.correct()
    pipeline.sort()
    with pytest.raises(PhaseError):
        pipeline.correct()
    assert list(pipeline.resolve()) == ['alma']


def test_analyzer_responses_need_a_closed_channel():
    analyzer = FakeAnalyzer()
    analyzer.submit('Kaszab')
    with pytest.raises(ChannelError):
        analyzer.responses()
    analyzer.close()
    assert list(analyzer.responses()) == ANALYSES['Kaszab']
    with pytest.raises(ChannelError):
        analyzer.submit('kasza')


def test_config_defaults():
    config = Config()
    assert config.analyzer_command[-2:] == ['-d', 'hu_HU']
    assert config.break_mark != M
    assert Config(diagnostic=True).break_mark == M
    assert Config(dictionary='/tmp/hu').analyzer_command[-1] == '/tmp/hu'


@pytest.mark.parametrize(
    'settings',
    [{'analyzer': 'spell'}, {'tiebreak': 'sometimes'}, {'delimiter': '('}],
)
def test_invalid_config(settings):
    with pytest.raises(ValueError):
        Config(**settings)


def test_read_config(tmp_path):
    path = tmp_path / 'hunsort.yaml'
    path.write_text('delimiter: "\\t"\ntiebreak: never\n', encoding='utf-8')
    assert read_config(path) == {'delimiter': '\t', 'tiebreak': 'never'}

    path.write_text('colour: blue\n', encoding='utf-8')
    with pytest.raises(ValueError):
        read_config(path)

    path.write_text('- a list\n', encoding='utf-8')
    with pytest.raises(ValueError):
        read_config(path)

    path.write_text('', encoding='utf-8')
    assert read_config(path) == {}


def test_command_line_overrides_config_file(tmp_path):
    path = tmp_path / 'hunsort.yaml'
    path.write_text('locale: C\ntiebreak: never\n', encoding='utf-8')
    args = argparse.Namespace(config=path, delimiter=';', locale=None,
                              dictionary=None, analyzer=None,
                              tiebreak='always', work_dir=None,
                              log_file=None, diagnostic=True)
    config = build_config(args)
    assert config.locale == 'C'
    assert config.tiebreak == 'always'
    assert config.delimiter == ';'
    assert config.diagnostic


class FakeSorter:

    def __init__(self, defect):
        self.defect = defect
        self.probed = False

    def has_vowel_length_defect(self):
        self.probed = True
        return self.defect


@pytest.mark.parametrize(
    'mode, defect, expected',
    [('auto', True, True), ('auto', False, False),
     ('always', False, True), ('never', True, False)],
)
def test_needs_tiebreak(mode, defect, expected):
    sorter = FakeSorter(defect)
    assert needs_tiebreak(Config(tiebreak=mode), sorter) == expected
    assert sorter.probed == (mode == 'auto')
