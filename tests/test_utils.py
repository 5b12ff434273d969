import io

import pandas as pd
import pytest

from features import Vocabulary, make_parse
from utils import Instance, accuracy, gold_labels, load_data, read_data, save_results, split_data


def _instances(n):
    return [Instance(label=1 if i % 2 else -1, features={0: float(i)}) for i in range(n)]


def test_accuracy():
    assert accuracy([1, -1, 1, 1], [1, 1, 1, -1]) == 0.5
    assert accuracy([1, -1], [1, -1]) == 1.0
    assert accuracy([1, -1], [-1, 1]) == 0.0


def test_accuracy_length_mismatch():
    assert accuracy([1, -1, 1], [1, -1]) == 0.0


def test_accuracy_empty():
    assert accuracy([], []) == 0.0


def test_read_data_skips_malformed_lines():
    lines = ["1 a:1", "garbage", "", "-1 a:x", "-1 b:2\n"]
    data = read_data(lines, make_parse(Vocabulary()))
    assert [d.label for d in data] == [1, -1]
    assert data[1].features == {1: 2.0}


class _FailingReader:
    def __init__(self, lines):
        self.lines = list(lines)

    def __iter__(self):
        return self

    def __next__(self):
        if self.lines:
            return self.lines.pop(0)
        raise OSError("read failed")


def test_read_data_stops_on_read_error():
    data = read_data(_FailingReader(["1 a:1", "-1 a:2"]), make_parse(Vocabulary()))
    assert len(data) == 2


def test_load_data_from_file(tmp_path):
    path = tmp_path / "data.txt"
    path.write_text("1 a:1\n-1 b:1\n")
    data = load_data(str(path), make_parse(Vocabulary()))
    assert gold_labels(data) == [1, -1]


def test_load_data_from_stdin(monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO("1 a:1\nbad\n-1 a:2"))
    data = load_data("-", make_parse(Vocabulary()))
    assert gold_labels(data) == [1, -1]


def test_split_drops_boundary_instance():
    data = _instances(10)
    train, test = split_data(data)
    assert train == data[:8]
    assert test == data[9:]


def test_split_small_input_gives_empty_test():
    data = _instances(4)
    train, test = split_data(data)
    assert train == data[:3]
    assert test == []


def test_split_empty():
    assert split_data([]) == ([], [])


def test_split_rejects_bad_ratio():
    with pytest.raises(ValueError):
        split_data(_instances(3), 1.5)


def test_save_results(tmp_path):
    data = _instances(3)
    path = tmp_path / "results" / "preds.csv"
    save_results(data, [1, 1, -1], str(path))
    df = pd.read_csv(path)
    assert list(df.columns) == ["label", "prediction"]
    assert df["label"].tolist() == [-1, 1, -1]
    assert df["prediction"].tolist() == [1, 1, -1]


def test_load_data_stdin_invalid_utf8(monkeypatch):
    raw = b"1 a:1 b:1\n-1 \xff\xfe:1 b:1\n1 a:\xff\n"
    monkeypatch.setattr("sys.stdin", io.TextIOWrapper(io.BytesIO(raw), encoding="utf-8"))
    vocab = Vocabulary()
    data = load_data("-", make_parse(vocab))
    assert gold_labels(data) == [1, -1]
    assert data[1].features == {2: 1.0, 1: 1.0}
    assert len(vocab) == 3


def test_load_data_file_invalid_utf8(tmp_path):
    path = tmp_path / "data.txt"
    path.write_bytes(b"1 \xc3(:2\n-1 a:1\n")
    data = load_data(str(path), make_parse(Vocabulary()))
    assert gold_labels(data) == [1, -1]
    assert data[0].features == {0: 2.0}
