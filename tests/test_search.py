from collections import Counter

import pytest

from wordtree.errors import EmptyAttackPool, EmptyCandidateSet, NoCandidatesLeft
from wordtree.feedback import pack_evaluation
from wordtree.search import CandidateSearch, distinct_letter_pairs, select_guess, select_guess_pair
from wordtree.vocab import WordVocab

PAIR_WORDS = ["brick", "crane", "dwarf", "fjord", "gucks", "nymph", "plumb", "sissy", "slate", "vibex", "waltz"]


def _cube_metric(candidates, guess):
    sizes = Counter(pack_evaluation(h, guess) for h in candidates)
    return sum(n ** 3 for n in sizes.values())


def test_single_candidate_is_returned(vocab):
    words = vocab.words()
    assert select_guess(words[:1], words) == words[0]
    # even with no attack words
    assert select_guess(words[:1], []) == words[0]


def test_empty_inputs(vocab):
    words = vocab.words()
    with pytest.raises(EmptyCandidateSet):
        select_guess([], words)
    with pytest.raises(EmptyAttackPool):
        select_guess(words, [])
    with pytest.raises(NoCandidatesLeft):
        select_guess_pair([], words)


def test_metric_is_sum_of_cubed_partition_sizes(vocab):
    words = vocab.words()
    search = CandidateSearch()
    for guess in words:
        assert search.metric(words, guess) == _cube_metric(words, guess)


def test_select_guess_minimizes_metric(vocab):
    words = vocab.words()
    guess = select_guess(words, words)
    metrics = [_cube_metric(words, g) for g in words]
    # ties go to the first attack word
    assert guess == words[metrics.index(min(metrics))]


def test_pruning_does_not_change_the_guess(vocab):
    words = vocab.words()
    pruned = CandidateSearch(prune=True).select_guess(words, words)
    full = CandidateSearch(prune=False).select_guess(words, words)
    assert pruned == full


def test_parallel_matches_sequential(vocab):
    words = vocab.words()
    seq = CandidateSearch(workers=1).select_guess(words, words)
    par = CandidateSearch(workers=2).select_guess(words, words)
    assert seq == par


def test_distinct_letter_pairs_are_disjoint():
    words = WordVocab(list(PAIR_WORDS)).words()
    pairs = distinct_letter_pairs(words)
    assert pairs
    for a, b in pairs:
        assert a < b
        assert len(set(a.text) | set(b.text)) == 10
    # words with repeated letters never take part
    assert all("sissy" not in (a.text, b.text) for a, b in pairs)


def test_select_guess_pair():
    words = WordVocab(list(PAIR_WORDS)).words()
    first, second = select_guess_pair(words, words)
    assert not set(first.text) & set(second.text)
    assert select_guess_pair(words[:1], words) == (words[0], words[0])


def test_no_distinct_pair():
    words = WordVocab(["sissy", "humph"]).words()
    with pytest.raises(EmptyAttackPool):
        select_guess_pair(words, words)


def test_workers_must_be_positive():
    with pytest.raises(ValueError):
        CandidateSearch(workers=0)


def _joint_metric(candidates, first, second):
    sizes = Counter((pack_evaluation(h, first), pack_evaluation(h, second)) for h in candidates)
    return sum(n ** 3 for n in sizes.values())


def test_select_guess_pair_minimizes_joint_metric():
    words = WordVocab(list(PAIR_WORDS)).words()
    pairs = distinct_letter_pairs(words)
    metrics = [_joint_metric(words, a, b) for a, b in pairs]
    # ties go to the first pair
    assert select_guess_pair(words, words) == pairs[metrics.index(min(metrics))]


def test_pair_search_agrees_across_modes():
    words = WordVocab(list(PAIR_WORDS)).words()
    expected = CandidateSearch().select_guess_pair(words, words)
    assert CandidateSearch(prune=False).select_guess_pair(words, words) == expected
    assert CandidateSearch(workers=2).select_guess_pair(words, words) == expected
    assert CandidateSearch(workers=2, prune=False).select_guess_pair(words, words) == expected
