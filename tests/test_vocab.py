import pytest

from wordtree.errors import EmptyAttackPool, EmptyCandidateSet, InvalidDictionary, WordLengthMismatch
from wordtree.sampler import WordSampler
from wordtree.vocab import WordVocab, load_dictionaries, read_word_list

from conftest import write_lines


def test_read_word_list_cleans_entries(tmp_path, caplog):
    path = write_lines(tmp_path / "words.txt", ["Crane", "slate", "", "  crane ", "null", "slate"])
    with caplog.at_level("WARNING"):
        words = read_word_list(path)
    assert words == ["crane", "slate", "null"]
    assert "duplicates" in caplog.text


def test_read_word_list_csv(tmp_path):
    path = write_lines(tmp_path / "words.csv", ["word,rank", "crane,1", "slate,2"])
    assert read_word_list(path) == ["crane", "slate"]
    with pytest.raises(KeyError):
        read_word_list(path, column="answer")


def test_empty_file(tmp_path):
    path = tmp_path / "empty.txt"
    path.write_text("", encoding="utf-8")
    assert read_word_list(path) == []


def test_union_and_intersection(tmp_path):
    a = write_lines(tmp_path / "a.txt", ["slate", "crane", "trace"])
    b = write_lines(tmp_path / "b.txt", ["crane", "zesty", "trace"])
    global_vocab, attack_vocab = load_dictionaries([a, b])
    assert global_vocab.texts() == ["crane", "slate", "trace", "zesty"]
    assert attack_vocab.texts() == ["crane", "trace"]
    assert attack_vocab.alphabet == global_vocab.alphabet
    assert "z" in global_vocab.alphabet


def test_single_dictionary_is_both(tmp_path):
    a = write_lines(tmp_path / "a.txt", ["slate", "crane"])
    global_vocab, attack_vocab = load_dictionaries([a])
    assert global_vocab.texts() == attack_vocab.texts() == ["crane", "slate"]


def test_empty_dictionaries(tmp_path):
    empty = tmp_path / "empty.txt"
    empty.write_text("", encoding="utf-8")
    with pytest.raises(EmptyCandidateSet):
        load_dictionaries([empty])
    a = write_lines(tmp_path / "a.txt", ["slate"])
    b = write_lines(tmp_path / "b.txt", ["crane"])
    with pytest.raises(EmptyAttackPool):
        load_dictionaries([a, b])


def test_mixed_lengths(tmp_path):
    a = write_lines(tmp_path / "a.txt", ["slate", "cat"])
    with pytest.raises(WordLengthMismatch):
        load_dictionaries([a])


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_word_list(tmp_path / "nope.txt")


def test_vocab_lookup(vocab):
    assert len(vocab) == 10
    assert vocab.word_length == 5
    assert vocab.contains("crane")
    assert not vocab.contains("zebra")
    assert vocab.lookup("crane").text == "crane"
    assert vocab.word_at(vocab.index_of("slate")).text == "slate"
    with pytest.raises(KeyError):
        vocab.index_of("zebra")
    with pytest.raises(IndexError):
        vocab.word_at(10)


def test_vocab_rejects_bad_input():
    with pytest.raises(EmptyCandidateSet):
        WordVocab([])
    with pytest.raises(ValueError):
        WordVocab(["crane", "crane"])
    with pytest.raises(TypeError):
        WordVocab(("crane",))


def test_sampler_is_deterministic(vocab):
    a = WordSampler(vocab, seed=7).sample_texts(4)
    b = WordSampler(vocab, seed=7).sample_texts(4)
    assert a == b
    assert len(set(a)) == 4
    assert a == [w for w in vocab.texts() if w in a]
    assert WordSampler(vocab, seed=7).sample_texts(50) == vocab.texts()
    with pytest.raises(ValueError):
        WordSampler(vocab).sample_texts(0)


def test_plain_list_keeps_commas_and_quotes(tmp_path):
    path = write_lines(tmp_path / "words.txt", ["crane", "sl,ate", 'it"s', "trace"])
    assert read_word_list(path) == ["crane", "sl,ate", 'it"s', "trace"]


@pytest.mark.parametrize("lines", [["crane", "sl\tate"], ["sl\tate", "crane"]])
def test_tab_in_plain_list_is_rejected(tmp_path, lines):
    path = write_lines(tmp_path / "words.txt", lines)
    with pytest.raises(InvalidDictionary):
        read_word_list(path)
