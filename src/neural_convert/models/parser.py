"""
A lexicalized parser with an optional DV reranker. The grammar tables are opaque to
conversion, only the reranker's parameters are converted.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple

import torch

from ..config import Config
from ..exceptions import CollaboratorAbsent, ProtocolError
from ..nn.keyed_map import TwoDimensionalMap
from .store import TorchModelStore

__all__ = [
    "ParserOptions",
    "DVModel",
    "DVModelReranker",
    "LexicalizedParser",
    "ParserModelStore",
    "detach_reranker",
    "attach_reranker",
]

log = logging.getLogger(__name__)


@dataclass
class ParserOptions(Config):
    language: str = "english"
    markov_order: int = 1
    dv_simplified_model: bool = False
    train_word_vectors: bool = True


@dataclass(eq=False)
class DVModel:
    binary_transform: TwoDimensionalMap[str, str, torch.Tensor]
    unary_transform: Dict[str, torch.Tensor]
    binary_score: TwoDimensionalMap[str, str, torch.Tensor]
    unary_score: Dict[str, torch.Tensor]
    word_vectors: Dict[str, torch.Tensor]
    op: ParserOptions


@dataclass(eq=False)
class DVModelReranker:
    model: DVModel

    def get_model(self) -> DVModel:
        return self.model


@dataclass(eq=False)
class LexicalizedParser:
    op: ParserOptions = field(default_factory=ParserOptions)
    grammar: Dict[str, Any] = field(default_factory=dict)
    """
    Grammar tables, lexicon and anything else the parser keeps. Never converted.
    """
    reranker: Optional[Any] = None


def detach_reranker(parser: LexicalizedParser) -> Tuple[LexicalizedParser, DVModelReranker]:
    """
    Split a parser into a copy without a reranker and the reranker itself. ``parser`` is
    not modified.

    :raises CollaboratorAbsent: If the parser has no reranker.
    :raises ProtocolError: If the parser's reranker isn't a :class:`DVModelReranker`.
    """
    reranker = parser.reranker
    if reranker is None:
        raise CollaboratorAbsent("The parser has no reranker attached")
    if not isinstance(reranker, DVModelReranker):
        raise ProtocolError(
            "Expected the parser's reranker to be a DVModelReranker, "
            f"found {type(reranker).__name__}"
        )
    return replace(parser, reranker=None), reranker


def attach_reranker(parser: LexicalizedParser, reranker: DVModelReranker) -> LexicalizedParser:
    """
    Return a copy of ``parser`` with ``reranker`` attached.
    """
    if parser.reranker is not None:
        log.warning("Replacing the parser's existing reranker")
    return replace(parser, reranker=reranker)


class ParserModelStore(TorchModelStore[LexicalizedParser]):
    model_class = LexicalizedParser
