"""Feature vocabulary and line parser for sparse `label name:value ...` data."""

import math
import re
from typing import Callable, Dict, List

from utils import Instance

LABEL_RE = re.compile(r"[+-]?[0-9]+")
LABEL_MIN = -(2**31)
LABEL_MAX = 2**31 - 1
INFINITY_NAMES = {"inf", "infinity"}


class ParseError(ValueError):
    """Raised when a line is not a valid labeled feature vector."""


def _parse_label(token: str) -> int:
    # decimal ASCII digits only, in 32-bit range
    if not LABEL_RE.fullmatch(token):
        raise ParseError(f"Invalid label: {token!r}")
    label = int(token)
    if not LABEL_MIN <= label <= LABEL_MAX:
        raise ParseError(f"Label out of range: {token!r}")
    return label


def _parse_value(token: str, raw_value: str) -> float:
    if "_" in raw_value or not raw_value.isascii():
        raise ParseError(f"Invalid feature value: {token!r}")
    try:
        value = float(raw_value)
    except ValueError as e:
        raise ParseError(f"Invalid feature value: {token!r}") from e
    # overflow like 1e400, as opposed to a spelled-out infinity
    if math.isinf(value) and raw_value.lstrip("+-").lower() not in INFINITY_NAMES:
        raise ParseError(f"Feature value out of range: {token!r}")
    return value


class Vocabulary:
    """Maps feature names to sequential integer ids on first sight."""

    def __init__(self):
        self.name2id: Dict[str, int] = {}
        self.id2name: List[str] = []

    def get_id(self, name: str) -> int:
        feature_id = self.name2id.get(name)
        if feature_id is None:
            feature_id = len(self.id2name)
            self.name2id[name] = feature_id
            self.id2name.append(name)
        return feature_id

    def get_name(self, feature_id: int) -> str:
        if not 0 <= feature_id < len(self.id2name):
            raise KeyError(feature_id)
        return self.id2name[feature_id]

    def __len__(self):
        return len(self.id2name)

    def __contains__(self, name):
        return name in self.name2id


def parse_line(line: str, vocabulary: Vocabulary) -> Instance:
    """Parse one input line into an instance.

    Inputs:
        line: whitespace separated tokens, an integer label first and then
            `name:value` pairs.
        vocabulary: resolves feature names to ids. Names are registered in
            order once their value parses, so a line failing part-way keeps
            the names before the bad token.

    Returns:
        The parsed instance.
    """
    tokens = line.split()
    if len(tokens) < 2:
        raise ParseError(f"Invalid line: {line!r}")

    label = _parse_label(tokens[0])

    features: Dict[int, float] = {}
    for token in tokens[1:]:
        name, sep, raw_value = token.partition(":")
        if not sep:
            raise ParseError(f"Invalid feature: {token!r}")
        value = _parse_value(token, raw_value)
        features[vocabulary.get_id(name)] = value

    return Instance(label=label, features=features)


def make_parse(vocabulary: Vocabulary) -> Callable[[str], Instance]:
    """Returns a line parser bound to a shared vocabulary"""

    def parse(line: str) -> Instance:
        return parse_line(line, vocabulary)

    return parse
