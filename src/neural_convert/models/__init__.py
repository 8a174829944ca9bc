from .parser import (
    DVModel,
    DVModelReranker,
    LexicalizedParser,
    ParserModelStore,
    ParserOptions,
    attach_reranker,
    detach_reranker,
)
from .sentiment import RNNOptions, SentimentModel, SentimentModelStore
from .store import NativeModelStore, TorchModelStore

__all__ = [
    "NativeModelStore",
    "TorchModelStore",
    "RNNOptions",
    "SentimentModel",
    "SentimentModelStore",
    "ParserOptions",
    "DVModel",
    "DVModelReranker",
    "LexicalizedParser",
    "ParserModelStore",
    "attach_reranker",
    "detach_reranker",
]
