from __future__ import annotations

import random

from wordtree.vocab import WordVocab


class WordSampler:
    def __init__(self, vocab: WordVocab, seed: int | None = None) -> None:
        # Validate vocab
        if not isinstance(vocab, WordVocab):
            raise TypeError("vocab must be a WordVocab")
        if len(vocab) == 0:
            raise ValueError("vocab is empty")

        # Store vocab
        self._vocab = vocab

        # Create RNG (deterministic if seed provided)
        self._rng = random.Random(seed)
        self._seed = seed

    def sample_texts(self, k: int) -> list[str]:
        """k distinct words, in vocabulary order; all of them if k >= len(vocab)."""
        if not isinstance(k, int) or k <= 0:
            raise ValueError("k must be a positive integer")
        texts = self._vocab.texts()
        if k >= len(texts):
            return texts
        return [texts[i] for i in sorted(self._rng.sample(range(len(texts)), k))]
