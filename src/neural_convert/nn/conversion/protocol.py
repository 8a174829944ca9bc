import logging
from abc import ABCMeta, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Mapping, NamedTuple, Tuple

from ...config import StrEnum
from ...exceptions import ProtocolError, ShapeError
from ...models.parser import (
    DVModel,
    DVModelReranker,
    LexicalizedParser,
    attach_reranker,
    detach_reranker,
)
from ...models.sentiment import RNNOptions, SentimentModel
from ...stream import UnitReader, UnitWriter
from ..codec import (
    matrix_from_portable,
    matrix_to_portable,
    tensor_from_portable,
    tensor_to_portable,
)
from ..keyed_map import TwoDimensionalMap, transform_2d_map, transform_map

__all__ = [
    "FieldKind",
    "FieldSpec",
    "ModelSchema",
    "SentimentSchema",
    "ParserSchema",
    "DetachedParser",
    "to_portable",
    "from_portable",
    "write_model",
    "read_model",
]

log = logging.getLogger(__name__)


class FieldKind(StrEnum):
    """
    The container kind of a model field.
    """

    named_matrices = "named_matrices"
    """
    A single-key map of matrices.
    """

    two_key_matrices = "two_key_matrices"
    """
    A two-key map of matrices.
    """

    two_key_tensors = "two_key_tensors"
    """
    A two-key map of tensors.
    """

    opaque = "opaque"
    """
    A value that is passed through without conversion.
    """


@dataclass(frozen=True)
class FieldSpec:
    name: str
    kind: FieldKind


def to_portable(kind: FieldKind, value: Any) -> Any:
    """
    Convert a native field value of the given kind into its portable form.
    """
    if kind == FieldKind.named_matrices:
        return transform_map(value, matrix_to_portable)
    elif kind == FieldKind.two_key_matrices:
        return transform_2d_map(value, matrix_to_portable).to_nested_dict()
    elif kind == FieldKind.two_key_tensors:
        return transform_2d_map(value, tensor_to_portable).to_nested_dict()
    elif kind == FieldKind.opaque:
        return value
    else:
        raise NotImplementedError(kind)


def _check_named_map(value: Any, kind: FieldKind) -> Mapping:
    if not isinstance(value, Mapping):
        raise ProtocolError(f"Expected a map for a '{kind}' field, got {type(value).__name__}")
    for key in value:
        if not isinstance(key, str):
            raise ProtocolError(f"Expected string keys in a '{kind}' field, found {key!r}")
    return value


def _check_two_key_map(value: Any, kind: FieldKind) -> TwoDimensionalMap:
    _check_named_map(value, kind)
    for k1, inner in value.items():
        if not isinstance(inner, Mapping):
            raise ProtocolError(
                f"Expected a nested map under '{k1}' for a '{kind}' field, "
                f"got {type(inner).__name__}"
            )
        _check_named_map(inner, kind)
    return TwoDimensionalMap.from_nested_dict(value)


def from_portable(kind: FieldKind, value: Any) -> Any:
    """
    Convert a portable field value of the given kind back into its native form.

    :raises ProtocolError: If the value isn't the container ``kind`` calls for.
    :raises ShapeError: If any matrix or tensor in the value is malformed.
    """
    if kind == FieldKind.named_matrices:
        return transform_map(_check_named_map(value, kind), matrix_from_portable)
    elif kind == FieldKind.two_key_matrices:
        return transform_2d_map(_check_two_key_map(value, kind), matrix_from_portable)
    elif kind == FieldKind.two_key_tensors:
        return transform_2d_map(_check_two_key_map(value, kind), tensor_from_portable)
    elif kind == FieldKind.opaque:
        return value
    else:
        raise NotImplementedError(kind)


class ModelSchema(metaclass=ABCMeta):
    """
    The fixed, ordered list of fields that a kind of model writes and reads.
    """

    fields: ClassVar[Tuple[FieldSpec, ...]]

    def prepare(self, model: Any) -> Any:
        """
        Turn a loaded native model into the input of :meth:`extract()`.

        :raises CollaboratorAbsent: If the model has nothing to convert.
        """
        return model

    @abstractmethod
    def extract(self, model: Any) -> Dict[str, Any]:
        """
        Get the native value of every field, keyed by field name.
        """
        raise NotImplementedError

    @abstractmethod
    def build(self, values: Dict[str, Any]) -> Any:
        """
        Construct a model from restored native field values, keyed by field name.
        """
        raise NotImplementedError


class SentimentSchema(ModelSchema):
    fields = (
        FieldSpec("binary_transform", FieldKind.two_key_matrices),
        FieldSpec("binary_tensors", FieldKind.two_key_tensors),
        FieldSpec("binary_classification", FieldKind.two_key_matrices),
        FieldSpec("unary_classification", FieldKind.named_matrices),
        FieldSpec("word_vectors", FieldKind.named_matrices),
        FieldSpec("op", FieldKind.opaque),
    )

    def extract(self, model: SentimentModel) -> Dict[str, Any]:
        return {spec.name: getattr(model, spec.name) for spec in self.fields}

    def build(self, values: Dict[str, Any]) -> SentimentModel:
        if not isinstance(values["op"], RNNOptions):
            raise ProtocolError(
                f"Expected the 'op' field to hold RNNOptions, found {type(values['op']).__name__}"
            )
        return SentimentModel(**values)


class DetachedParser(NamedTuple):
    parser: LexicalizedParser
    reranker: DVModelReranker


class ParserSchema(ModelSchema):
    """
    The parser itself is an opaque first field. Its reranker is detached before writing
    and its parameters make up the remaining fields.
    """

    fields = (
        FieldSpec("parser", FieldKind.opaque),
        FieldSpec("binary_transform", FieldKind.two_key_matrices),
        FieldSpec("unary_transform", FieldKind.named_matrices),
        FieldSpec("binary_score", FieldKind.two_key_matrices),
        FieldSpec("unary_score", FieldKind.named_matrices),
        FieldSpec("word_vectors", FieldKind.named_matrices),
    )

    def prepare(self, model: LexicalizedParser) -> DetachedParser:
        return DetachedParser(*detach_reranker(model))

    def extract(self, model: DetachedParser) -> Dict[str, Any]:
        dv_model = model.reranker.get_model()
        return {
            "parser": model.parser,
            "binary_transform": dv_model.binary_transform,
            "unary_transform": dv_model.unary_transform,
            "binary_score": dv_model.binary_score,
            "unary_score": dv_model.unary_score,
            "word_vectors": dv_model.word_vectors,
        }

    def build(self, values: Dict[str, Any]) -> LexicalizedParser:
        parser = values["parser"]
        if not isinstance(parser, LexicalizedParser):
            raise ProtocolError(
                f"Expected the 'parser' field to hold a LexicalizedParser, "
                f"found {type(parser).__name__}"
            )
        dv_model = DVModel(
            binary_transform=values["binary_transform"],
            unary_transform=values["unary_transform"],
            binary_score=values["binary_score"],
            unary_score=values["unary_score"],
            word_vectors=values["word_vectors"],
            op=parser.op,
        )
        return attach_reranker(parser, DVModelReranker(dv_model))


def write_model(schema: ModelSchema, model: Any, writer: UnitWriter) -> int:
    """
    Write one unit per field of ``schema``, in order.

    :param schema: The model schema.
    :param model: The model, as returned by :meth:`ModelSchema.prepare()`.
    :param writer: Where to write the units.

    :returns: The number of units written.
    """
    values = schema.extract(model)
    for spec in schema.fields:
        writer.write(
            spec.name,
            spec.kind,
            to_portable(spec.kind, values[spec.name]),
            memoize=spec.kind == FieldKind.opaque,
        )
    return len(schema.fields)


def read_model(schema: ModelSchema, reader: UnitReader) -> Any:
    """
    Read exactly the fields of ``schema``, in order, and build the model from them.

    :raises ProtocolError: If the stream doesn't match the schema.
    :raises ShapeError: If a matrix or tensor in the stream is malformed.
    """
    values: Dict[str, Any] = {}
    for spec in schema.fields:
        portable = reader.read(spec.name, spec.kind)
        try:
            values[spec.name] = from_portable(spec.kind, portable)
        except ShapeError as e:
            raise ShapeError(f"Field '{spec.name}': {e}") from e
    reader.expect_end()
    return schema.build(values)
