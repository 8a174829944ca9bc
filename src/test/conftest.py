import pytest
import torch

from neural_convert.models.parser import (
    DVModel,
    DVModelReranker,
    LexicalizedParser,
    ParserOptions,
)
from neural_convert.models.sentiment import RNNOptions, SentimentModel
from neural_convert.nn.keyed_map import TwoDimensionalMap
from neural_convert.nn.tensor import SimpleTensor


def rand_matrix(rows: int, cols: int) -> torch.Tensor:
    return torch.randn(rows, cols, dtype=torch.float64)


@pytest.fixture
def sentiment_model() -> SentimentModel:
    torch.manual_seed(0)
    binary_transform = TwoDimensionalMap()
    binary_transform.put("NP", "VP", rand_matrix(4, 9))
    binary_transform.put("", "", rand_matrix(4, 9))
    binary_tensors = TwoDimensionalMap()
    binary_tensors.put("NP", "VP", SimpleTensor([rand_matrix(8, 8) for _ in range(4)]))
    binary_classification = TwoDimensionalMap()
    binary_classification.put("NP", "VP", rand_matrix(5, 5))
    return SentimentModel(
        binary_transform=binary_transform,
        binary_tensors=binary_tensors,
        binary_classification=binary_classification,
        unary_classification={"": rand_matrix(5, 5), "NP": rand_matrix(5, 5)},
        word_vectors={
            "good": rand_matrix(4, 1),
            "bad": rand_matrix(4, 1),
            "*UNK*": rand_matrix(4, 1),
        },
        op=RNNOptions(num_hid=4, random_seed=1234),
    )


@pytest.fixture
def dv_model() -> DVModel:
    torch.manual_seed(1)
    op = ParserOptions(language="chinese")
    binary_transform = TwoDimensionalMap()
    binary_transform.put("NP", "PP", rand_matrix(3, 7))
    binary_transform.put("DT", "NN", rand_matrix(3, 7))
    binary_score = TwoDimensionalMap()
    binary_score.put("NP", "PP", rand_matrix(1, 3))
    binary_score.put("DT", "NN", rand_matrix(1, 3))
    return DVModel(
        binary_transform=binary_transform,
        unary_transform={"NP": rand_matrix(3, 4)},
        binary_score=binary_score,
        unary_score={"NP": rand_matrix(1, 3)},
        word_vectors={"the": rand_matrix(3, 1), "*UNK*": rand_matrix(3, 1)},
        op=op,
    )


@pytest.fixture
def dv_parser(dv_model) -> LexicalizedParser:
    return LexicalizedParser(
        op=dv_model.op,
        grammar={"states": ["ROOT", "NP", "PP"], "unary_rules": [("NP", "PP", -1.5)]},
        reranker=DVModelReranker(dv_model),
    )
