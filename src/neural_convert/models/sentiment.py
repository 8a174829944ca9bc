"""
The recursive sentiment model. Only its parameters and options are modeled here, training
and inference live elsewhere.
"""

from dataclasses import dataclass, field
from typing import Dict

import torch

from ..config import Config
from ..nn.keyed_map import TwoDimensionalMap
from ..nn.tensor import SimpleTensor
from .store import TorchModelStore

__all__ = ["RNNOptions", "SentimentModel", "SentimentModelStore"]


@dataclass
class RNNOptions(Config):
    """
    Hyperparameters the sentiment model was trained with. Conversion passes these through
    untouched.
    """

    num_hid: int = 25
    num_classes: int = 5
    random_seed: int = 0
    simplified_model: bool = True
    combine_classification: bool = True
    use_tensors: bool = True
    language: str = "english"


@dataclass(eq=False)
class SentimentModel:
    binary_transform: TwoDimensionalMap[str, str, torch.Tensor] = field(
        default_factory=TwoDimensionalMap
    )
    """
    Composition matrix for each pair of child categories.
    """
    binary_tensors: TwoDimensionalMap[str, str, SimpleTensor] = field(
        default_factory=TwoDimensionalMap
    )
    binary_classification: TwoDimensionalMap[str, str, torch.Tensor] = field(
        default_factory=TwoDimensionalMap
    )
    unary_classification: Dict[str, torch.Tensor] = field(default_factory=dict)
    word_vectors: Dict[str, torch.Tensor] = field(default_factory=dict)
    op: RNNOptions = field(default_factory=RNNOptions)


class SentimentModelStore(TorchModelStore[SentimentModel]):
    model_class = SentimentModel
