import pytest

from wordtree.tree import TreeBuilder
from wordtree.vocab import WordVocab

WORDS = ["caret", "cigar", "crane", "crate", "humph", "react", "rebut", "sissy", "slate", "trace"]


@pytest.fixture
def vocab():
    return WordVocab(list(WORDS))


@pytest.fixture
def tree(vocab):
    return TreeBuilder(vocab.words()).build(vocab.words())


def write_lines(path, lines):
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path
