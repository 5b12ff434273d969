import io
import os
import sys
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd


@dataclass(frozen=True)
class Instance:
    label: int
    features: Dict[int, float]


def read_data(lines: Iterable[str], parse: Callable[[str], Instance]) -> List[Instance]:
    """Parses every line, skipping the malformed ones.

    Inputs:
        lines: Raw input lines.
        parse: Line parser, usually `features.make_parse(vocabulary)`.

    Returns:
        The instances in input order.
    """
    data = []
    it = iter(lines)
    while True:
        try:
            line = next(it)
        except StopIteration:
            break
        except OSError:
            # a failed read ends the input like EOF
            break
        try:
            data.append(parse(line))
        except ValueError:
            continue
    return data


def load_data(path: Optional[str], parse: Callable[[str], Instance]) -> List[Instance]:
    """Reads instances from a file, or from standard input for None or "-".

    Bytes that are not valid UTF-8 are kept as surrogate escapes, so they end
    up in feature names instead of failing the read.
    """
    if path is None or path == "-":
        buffer = getattr(sys.stdin, "buffer", None)
        if buffer is None:
            return read_data(sys.stdin, parse)
        stream = io.TextIOWrapper(buffer, encoding="utf-8", errors="surrogateescape")
        try:
            return read_data(stream, parse)
        finally:
            # leave sys.stdin's buffer open
            stream.detach()
    with open(path, "r", encoding="utf-8", errors="surrogateescape") as f:
        return read_data(f, parse)


def split_data(
    data: Sequence[Instance], train_ratio: float = 0.8
) -> Tuple[List[Instance], List[Instance]]:
    """Splits into (train, test). The instance right after the training
    slice belongs to neither side."""
    if not 0.0 <= train_ratio <= 1.0:
        raise ValueError(f"train_ratio must be in [0, 1], got {train_ratio}")
    n = int(len(data) * train_ratio)
    return list(data[:n]), list(data[n + 1 :])


def gold_labels(data: Iterable[Instance]) -> List[int]:
    return [instance.label for instance in data]


def accuracy(golds: Sequence[int], predictions: Sequence[int]) -> float:
    if len(golds) != len(predictions) or len(golds) == 0:
        return 0.0
    correct = sum(1 for g, p in zip(golds, predictions) if g == p)
    return correct / len(golds)


def save_results(
    data: Sequence[Instance], predictions: Sequence[int], path: str
) -> None:
    """Writes gold labels and predictions side by side as CSV."""
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    df = pd.DataFrame(
        {"label": gold_labels(data), "prediction": list(predictions)}
    )
    df.to_csv(path, index=False)
