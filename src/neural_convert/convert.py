"""
Convert stored models between their native form and the portable form.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar

from .config import Config, StrEnum
from .exceptions import CollaboratorAbsent, ConfigurationError
from .io import atomic_output, file_exists, open_input
from .models.parser import ParserModelStore
from .models.sentiment import SentimentModelStore
from .models.store import NativeModelStore
from .nn.conversion.protocol import (
    ModelSchema,
    ParserSchema,
    SentimentSchema,
    read_model,
    write_model,
)
from .stream import UnitReader, UnitWriter

__all__ = [
    "Stage",
    "ModelType",
    "ConversionResult",
    "ConversionConfig",
    "get_schema_and_store",
    "native_to_portable",
    "portable_to_native",
    "convert",
]

log = logging.getLogger(__name__)


class Stage(StrEnum):
    """
    The direction of a conversion.
    """

    old = "old"
    """
    Native to portable.
    """

    new = "new"
    """
    Portable to native.
    """


class ModelType(StrEnum):
    sentiment = "sentiment"
    """
    The recursive sentiment model.
    """

    dvparser = "dvparser"
    """
    A lexicalized parser with a DV reranker.
    """


class ConversionResult(StrEnum):
    converted = "converted"
    noop = "noop"


E = TypeVar("E", bound=StrEnum)


def parse_choice(enum_cls: Type[E], value: Any, name: str) -> E:
    """
    Parse ``value`` into a member of ``enum_cls``, ignoring case.

    :raises ConfigurationError: If ``value`` is missing or not a valid choice.
    """
    choices = ", ".join(f"'{m.value}'" for m in enum_cls)
    if value is None or value == "":
        raise ConfigurationError(f"Please specify {name}, one of {choices}")
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        raise ConfigurationError(f"Invalid {name} '{value}', expected one of {choices}")


@dataclass
class ConversionConfig(Config):
    stage: Optional[Stage] = None
    model: Optional[ModelType] = None
    input: Optional[str] = None
    """
    Local path or URL of the model to convert.
    """
    output: Optional[str] = None
    """
    Local path to write the converted model to.
    """
    save_overwrite: bool = False

    @classmethod
    def from_dict(
        cls, data: Dict[str, Any], overrides: Optional[List[str]] = None
    ) -> "ConversionConfig":
        if isinstance(data, dict):
            data = {
                k: v.lower() if k in ("stage", "model") and isinstance(v, str) else v
                for k, v in data.items()
            }
        return super().from_dict(data, overrides=overrides)

    def validate(self):
        self.stage = parse_choice(Stage, self.stage, "stage")
        self.model = parse_choice(ModelType, self.model, "model")
        if not self.input:
            raise ConfigurationError("Please specify input")
        if not self.output:
            raise ConfigurationError("Please specify output")


_SCHEMAS: Dict[ModelType, Tuple[Type[ModelSchema], Type[NativeModelStore]]] = {
    ModelType.sentiment: (SentimentSchema, SentimentModelStore),
    ModelType.dvparser: (ParserSchema, ParserModelStore),
}


def get_schema_and_store(model_type: ModelType) -> Tuple[ModelSchema, NativeModelStore]:
    schema_class, store_class = _SCHEMAS[model_type]
    return schema_class(), store_class()


def native_to_portable(
    schema: ModelSchema,
    store: NativeModelStore,
    input_path: str,
    output_path: str,
    save_overwrite: bool = False,
) -> ConversionResult:
    if not save_overwrite and file_exists(output_path):
        raise FileExistsError(output_path)

    model = store.load(input_path)
    try:
        prepared = schema.prepare(model)
    except CollaboratorAbsent as e:
        log.info(f"Nothing to do for '{input_path}': {e}")
        return ConversionResult.noop

    with atomic_output(output_path, save_overwrite=save_overwrite) as f:
        num_units = write_model(schema, prepared, UnitWriter(f))
    log.info(f"Wrote {num_units} portable units to '{output_path}'")
    return ConversionResult.converted


def portable_to_native(
    schema: ModelSchema,
    store: NativeModelStore,
    input_path: str,
    output_path: str,
    save_overwrite: bool = False,
) -> ConversionResult:
    if not save_overwrite and file_exists(output_path):
        raise FileExistsError(output_path)

    log.info(f"Reading portable units from '{input_path}'")
    with open_input(input_path) as f:
        model = read_model(schema, UnitReader(f))
    store.save(model, output_path, save_overwrite=save_overwrite)
    return ConversionResult.converted


def convert(config: ConversionConfig) -> ConversionResult:
    """
    Run one conversion. This is all-or-nothing: if it raises, no output was written.

    :param config: What to convert. It's validated before any file is touched.

    :returns: :data:`ConversionResult.noop` if there was nothing to convert, otherwise
        :data:`ConversionResult.converted`.
    """
    config.validate()
    assert config.stage is not None and config.model is not None
    assert config.input is not None and config.output is not None

    schema, store = get_schema_and_store(config.model)
    log.info(f"Converting {config.model} model, stage '{config.stage}'")
    if config.stage == Stage.old:
        result = native_to_portable(
            schema, store, config.input, config.output, save_overwrite=config.save_overwrite
        )
    else:
        result = portable_to_native(
            schema, store, config.input, config.output, save_overwrite=config.save_overwrite
        )
    if result == ConversionResult.converted:
        log.info(f"Successfully converted '{config.input}' to '{config.output}'")
    return result
