from consts import DIAGNOSTIC_BREAK_MARK
from tiebreak import resolve, same_run, strip_index, vowel_signature

M = DIAGNOSTIC_BREAK_MARK

FAMILY = [
    "zsaner", "Zsaner", "ZSANER",
    "zsanér", "Zsanér", "ZSANÉR",
    "zsáner", "Zsáner", "ZSÁNER",
    "zsánér", "Zsánér", "ZSÁNÉR",
]


def records(lines):
    return [f"{line}\t{line}" for line in lines]


def test_vowel_signature():
    assert vowel_signature("zsanér") == "SL"
    assert vowel_signature("ZSÁNER") == "LS"
    assert vowel_signature("őrült") == "LS"
    assert vowel_signature("szt") == ""


def test_same_run_ignores_case_and_vowel_length_only():
    assert same_run("zsáner\tzsáner", "ZSANÉR\tZSANÉR")
    assert not same_run("zsáner\tzsáner", "zsánerek\tzsánerek")
    assert not same_run("kor\tkor", "kör\tkör")


def test_family_in_defective_order_is_fixed():
    # order of a collation comparing vowel length from the end
    defective = [
        "zsaner", "Zsaner", "ZSANER",
        "zsáner", "Zsáner", "ZSÁNER",
        "zsanér", "Zsanér", "ZSANÉR",
        "zsánér", "Zsánér", "ZSÁNÉR",
    ]
    assert list(resolve(records(defective), M)) == FAMILY


def test_result_does_not_depend_on_input_order_of_the_run():
    assert list(resolve(records(reversed(FAMILY)), M)) == FAMILY


def test_pair_with_symmetric_vowel_lengths():
    result = list(resolve(records(["zsáner", "zsanér"]), M))
    assert result == ["zsanér", "zsáner"]


def test_unrelated_neighbours_are_untouched():
    lines = ["alma", "körte", "kör", "kor"]
    assert list(resolve(records(lines), M)) == lines


def test_duplicates_are_untouched():
    lines = ["zsáner", "zsáner", "zsáner"]
    assert list(resolve(records(lines), M)) == lines


def test_only_the_ends_of_a_run_are_compared():
    lines = ["zsanér", "zsaner", "zsanér"]
    assert list(resolve(records(lines), M)) == lines


def test_run_of_delimited_lines():
    recs = ["zsáner\tzsáner;2", "zsanér\tzsanér;1", "zsák\tzsák;3"]
    assert list(resolve(recs, M)) == ["zsanér;1", "zsáner;2", "zsák;3"]


def test_strip_index():
    assert strip_index(f"Kas{M}zab\tKaszab", M) == "Kaszab"
    assert strip_index(f"meg{M}győz\tmeg{M}győz", M) == "meggyőz"
    assert strip_index("alma\talma\tfa", M) == "alma\tfa"
