"""Averaged perceptron for binary classification of sparse feature vectors.

Reads `label name:value ...` lines, trains on the first part of the data and
prints train and test accuracy of the averaged weights after every epoch.
"""

import argparse
import sys
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

from features import Vocabulary, make_parse
from tqdm import tqdm
from utils import Instance, accuracy, gold_labels, load_data, save_results, split_data


class AveragedPerceptronModel:
    """Binary perceptron with lazily averaged weights.

    `cum_weights` accumulates every update scaled by the number of updates
    made before it, so the averaged weight of a feature is
    `weights[f] - cum_weights[f] / count`.
    """

    def __init__(self):
        self.weights: Dict[int, float] = defaultdict(float)
        self.cum_weights: Dict[int, float] = defaultdict(float)
        self.count: int = 1

    def score(self, features: Dict[int, float]) -> float:
        """Raw online score `w . x`."""
        s = 0.0
        for feat, value in features.items():
            # absent weights are skipped, not multiplied as 0
            w = self.weights.get(feat)
            if w is not None:
                s += w * value
        return s

    def averaged_score(self, features: Dict[int, float]) -> float:
        """Score under the averaged weights.

        Inputs:
            features: Sparse feature vector keyed by feature id.

        Returns:
            `w . x - (u . x) / count`, skipping features with no weight.
        """
        s = 0.0
        for feat, value in features.items():
            w = self.weights.get(feat)
            if w is not None:
                s += w * value
            cum_w = self.cum_weights.get(feat)
            if cum_w is not None:
                s -= cum_w * value / self.count
        return s

    def _predict_for_training(self, features: Dict[int, float]) -> int:
        return 1 if self.score(features) > 0 else -1

    def predict(self, features: Dict[int, float]) -> int:
        """Predicts +1 or -1 with the averaged weights. Ties go to -1."""
        return 1 if self.averaged_score(features) > 0 else -1

    def learn(self, instance: Instance) -> bool:
        """Applies one mistake-driven update.

        Inputs:
            instance: The training example, including its label.

        Returns:
            Whether the raw weights mispredicted it and were updated.
        """
        prediction = self._predict_for_training(instance.features)
        if prediction == instance.label:
            return False

        label = instance.label
        for feat, value in instance.features.items():
            self.weights[feat] += label * value
            self.cum_weights[feat] += self.count * label * value
        self.count += 1
        return True

    def predict_all(self, data: Sequence[Instance]) -> List[int]:
        return [self.predict(instance.features) for instance in data]

    def evaluate(self, data: Sequence[Instance]) -> float:
        """Accuracy of the averaged weights on the given data."""
        return accuracy(gold_labels(data), self.predict_all(data))

    def train(
        self,
        training_data: Sequence[Instance],
        test_data: Sequence[Instance],
        num_epochs: int,
        progress: bool = True,
    ) -> List[Tuple[int, float, float]]:
        """Perceptron training, one pass per epoch in input order.

        Inputs:
            training_data: Instances to learn from.
            test_data: Held-out instances, only evaluated.
            num_epochs: Number of passes over the training data.
            progress: Show a progress bar on stderr.

        Returns:
            (epoch, train accuracy, test accuracy) for every epoch, as printed.
        """
        history = []
        for epoch in range(num_epochs):
            for instance in tqdm(training_data, disable=not progress, leave=False):
                self.learn(instance)

            train_acc = self.evaluate(training_data)
            test_acc = self.evaluate(test_data)
            print(f"{epoch}\t{train_acc:.3f}\t{test_acc:.3f}")
            history.append((epoch, train_acc, test_acc))
        return history


def main(
    data: str = "-",
    num_epochs: int = 10,
    train_ratio: float = 0.8,
    save_path: Optional[str] = None,
    progress: bool = True,
) -> List[Tuple[int, float, float]]:
    vocabulary = Vocabulary()
    instances = load_data(data, make_parse(vocabulary))
    train_data, test_data = split_data(instances, train_ratio)

    model = AveragedPerceptronModel()
    history = model.train(train_data, test_data, num_epochs, progress=progress)

    if save_path is not None:
        save_results(test_data, model.predict_all(test_data), save_path)
        print(f"Test predictions saved to {save_path}", file=sys.stderr)

    return history


def cli():
    parser = argparse.ArgumentParser(description="Averaged perceptron model")
    parser.add_argument(
        "-d",
        "--data",
        type=str,
        default="-",
        help="Input file of `label name:value ...` lines, '-' for stdin",
    )
    parser.add_argument(
        "-s",
        "--save_predictions",
        type=str,
        default=None,
        help="CSV path for the test set predictions",
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Hide the progress bar"
    )

    args = parser.parse_args()

    main(
        data=args.data,
        save_path=args.save_predictions,
        progress=not args.quiet,
    )


if __name__ == "__main__":
    cli()
