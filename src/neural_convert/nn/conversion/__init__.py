"""
The field protocol that converts whole models to and from a stream of portable units.
"""

from .protocol import (
    DetachedParser,
    FieldKind,
    FieldSpec,
    ModelSchema,
    ParserSchema,
    SentimentSchema,
    from_portable,
    read_model,
    to_portable,
    write_model,
)

__all__ = [
    "DetachedParser",
    "FieldKind",
    "FieldSpec",
    "ModelSchema",
    "ParserSchema",
    "SentimentSchema",
    "from_portable",
    "read_model",
    "to_portable",
    "write_model",
]
