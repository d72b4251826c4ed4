"""
tree_io.py

Persist decision trees as gzip-compressed JSON:

    {"word": "crane", "edges": {"0": {...}, "17": {...}}}

JSON object keys are strings, so edge codes are written in decimal and parsed
back to int on load.
"""

from __future__ import annotations

import gzip
import json
import logging
import zlib
from pathlib import Path
from typing import Any, Dict, Union

from wordtree.errors import InvalidTreeFormat
from wordtree.tree import DecisionTree, validate_tree

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def tree_to_dict(tree: DecisionTree) -> Dict[str, Any]:
    return {
        "word": tree.word,
        "edges": {str(code): tree_to_dict(child) for code, child in tree.edges.items()},
    }


def tree_from_dict(data: Any) -> DecisionTree:
    """Rebuild a tree from `tree_to_dict` output; InvalidTreeFormat on bad shape."""
    if not isinstance(data, dict):
        raise InvalidTreeFormat(f"tree node must be an object, got {type(data).__name__}")
    word = data.get("word")
    if not isinstance(word, str):
        raise InvalidTreeFormat("tree node has no string 'word'")
    raw_edges = data.get("edges", {})
    if not isinstance(raw_edges, dict):
        raise InvalidTreeFormat(f"edges of {word!r} must be an object")

    edges: Dict[int, DecisionTree] = {}
    for key, child in raw_edges.items():
        if isinstance(key, str) and not (key.isascii() and key.isdigit()):
            raise InvalidTreeFormat(f"edge key {key!r} under {word!r} is not a code")
        try:
            code = int(key)
        except (TypeError, ValueError):
            raise InvalidTreeFormat(f"edge key {key!r} under {word!r} is not a code") from None
        edges[code] = tree_from_dict(child)
    return DecisionTree(word, edges)


def save_tree(tree: DecisionTree, path: PathLike) -> None:
    path = Path(path)
    payload = json.dumps(tree_to_dict(tree), ensure_ascii=False, separators=(",", ":"))
    with gzip.open(path, mode="wt", encoding="utf-8", compresslevel=9) as f:
        f.write(payload)
    logger.info("saved tree to %s", path)


def load_tree(path: PathLike, *, validate: bool = True) -> DecisionTree:
    """
    Load a tree written by `save_tree`.

    Raises
    ------
    FileNotFoundError
        If `path` does not exist.
    InvalidTreeFormat
        If the file is not gzip JSON of the expected shape, or (with
        `validate=True`) the tree fails `validate_tree`.
    """
    path = Path(path)
    try:
        with gzip.open(path, mode="rt", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise
    except (OSError, EOFError, zlib.error, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise InvalidTreeFormat(f"{path} is not a gzip JSON tree: {e}") from e

    tree = tree_from_dict(data)
    if validate:
        length = validate_tree(tree)
        logger.info("loaded tree from %s (word length %d)", path, length)
    return tree
