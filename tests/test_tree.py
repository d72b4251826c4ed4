import pytest

from wordtree.errors import (
    AlphabetMismatch,
    EmptyAttackPool,
    EmptyCandidateSet,
    InvalidTreeFormat,
    NoCandidatesLeft,
    WordLengthMismatch,
)
from wordtree.feedback import code_count, pack_evaluation
from wordtree.search import CandidateSearch
from wordtree.stats import play_hidden_word
from wordtree.tree import DecisionTree, TreeBuilder, partition, tree_words, validate_tree
from wordtree.vocab import WordVocab

from conftest import WORDS

DUAL_WORDS = ["brick", "crane", "dwarf", "fjord", "gucks", "nymph", "plumb", "slate", "vibex", "waltz"]


def _build(texts, **kwargs):
    words = WordVocab(list(texts)).words()
    return TreeBuilder(words, **kwargs).build(words), words


def test_two_words_give_two_leaves():
    tree, _ = _build(["crane", "slate"])
    assert tree.word == "crane"
    assert len(tree.edges) == 2
    assert all(child.is_leaf for child in tree.edges.values())
    assert tree.edges[code_count(5) - 1].word == "crane"
    assert tree.edges[pack_evaluation("slate", "crane")].word == "slate"


def test_single_word_is_a_leaf():
    tree, _ = _build(["crane"])
    assert tree.is_leaf
    assert tree.word == "crane"


def test_every_word_is_reachable(tree):
    attempts = {w: play_hidden_word(tree, w) for w in WORDS}
    assert all(1 <= n <= len(WORDS) for n in attempts.values())
    assert [w for w, n in attempts.items() if n == 1] == [tree.word]
    assert set(tree_words(tree)) == set(WORDS)
    assert validate_tree(tree) == 5


def test_children_are_keyed_by_feedback(tree):
    for node in tree.walk():
        for code, child in node.edges.items():
            for leaf in child.walk():
                if leaf.is_leaf:
                    assert pack_evaluation(leaf.word, node.word) == code


def test_duplicate_candidates_are_ignored(vocab):
    words = vocab.words()
    tree = TreeBuilder(words).build(words + words)
    assert sorted(tree_words(tree)) == sorted(WORDS)


def test_opening_word_is_used(vocab):
    words = vocab.words()
    humph = vocab.lookup("humph")
    tree = TreeBuilder(words, opening=[humph]).build(words)
    assert tree.word == "humph"
    for w in WORDS:
        play_hidden_word(tree, w)


def test_dual_depth_guesses_a_pair_first():
    words = WordVocab(list(DUAL_WORDS)).words()
    first, second = CandidateSearch().select_guess_pair(words, words)
    tree = TreeBuilder(words, dual_depth=1).build(words)
    assert tree.word == first.text
    for w in DUAL_WORDS:
        play_hidden_word(tree, w)
    validate_tree(tree)
    # the second guess sits right under every first-guess group it splits
    groups = partition(words, first)
    for code, group in groups.items():
        if len(group) > 1 and len(partition(group, second)) > 1:
            assert tree.edges[code].word == second.text


def test_dual_falls_back_without_pairs():
    tree, _ = _build(["humph", "sissy"], dual_depth=2)
    for w in ["humph", "sissy"]:
        play_hidden_word(tree, w)


def test_build_errors(vocab):
    words = vocab.words()
    with pytest.raises(EmptyCandidateSet):
        TreeBuilder(words).build([])
    with pytest.raises(EmptyAttackPool):
        TreeBuilder([]).build(words)
    other = WordVocab(["crane", "zebra"]).words()
    with pytest.raises(AlphabetMismatch):
        TreeBuilder(words).build(other)
    short = WordVocab(["cat", "car"]).words()
    with pytest.raises(WordLengthMismatch):
        TreeBuilder(short).build(short[:1] + words[:1])
    with pytest.raises(ValueError):
        TreeBuilder(words, dual_depth=-1)


def test_missing_edge_raises_no_candidates_left(tree):
    unused = next(c for c in range(code_count(5)) if c not in tree.edges)
    with pytest.raises(NoCandidatesLeft):
        tree.child(unused)


def test_edges_are_read_only(tree):
    with pytest.raises(TypeError):
        tree.edges[0] = tree


@pytest.mark.parametrize(
    "bad",
    [
        DecisionTree(""),
        DecisionTree("a" * 20),
        DecisionTree("crane", {0: DecisionTree("cat")}),
        DecisionTree("crane", {243: DecisionTree("slate")}),
        DecisionTree("crane", {-1: DecisionTree("slate")}),
        DecisionTree("crane", {"0": DecisionTree("slate")}),
        DecisionTree("crane", {True: DecisionTree("slate")}),
        # second `e` marked present while the first is not: never produced
        DecisionTree("speed", {3: DecisionTree("abide")}),
    ],
)
def test_validator_rejects(bad):
    with pytest.raises(InvalidTreeFormat):
        validate_tree(bad)


def test_validator_accepts_max_length():
    assert validate_tree(DecisionTree("a" * 19)) == 19


@pytest.mark.parametrize("code", [999, -1, 243])
def test_out_of_range_code_raises_no_candidates_left(code):
    tree = DecisionTree("crane", {242: DecisionTree("crane")})
    with pytest.raises(NoCandidatesLeft):
        tree.child(code)
