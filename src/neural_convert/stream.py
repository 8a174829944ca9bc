"""
The portable file format: a strictly ordered sequence of self-describing units, one per
model field. Each unit is an independent pickle record of the form
``{"field": <name>, "kind": <kind>, "value": <value>}``.

Map values are plain ``dict``/``list``/``float`` data. Opaque values are pickled as-is,
so only read streams from sources you trust.
"""

import logging
import pickle
from typing import Any, BinaryIO, Optional

from .exceptions import ProtocolError

__all__ = ["PICKLE_PROTOCOL", "UnitWriter", "UnitReader"]

log = logging.getLogger(__name__)

PICKLE_PROTOCOL = 4
"""
Fixed so that the same logical input always gives byte-identical output.
"""

_UNIT_KEYS = frozenset(("field", "kind", "value"))


class UnitWriter:
    def __init__(self, f: BinaryIO):
        self._f = f
        self.num_units = 0

    def write(self, field: str, kind: str, value: Any, memoize: bool = True) -> None:
        """
        Write one unit.

        :param field: The field name.
        :param kind: The field kind.
        :param value: The value to write.
        :param memoize: Whether shared objects in ``value`` are written once and referenced
            after that. Without the memo the bytes written only depend on the values, not on
            object identity, but ``value`` can't contain reference cycles.
        """
        pickler = pickle.Pickler(self._f, protocol=PICKLE_PROTOCOL)
        pickler.fast = not memoize
        pickler.dump({"field": field, "kind": str(kind), "value": value})
        self.num_units += 1
        log.debug(f"Wrote unit {self.num_units} ('{field}', {kind})")


class UnitReader:
    def __init__(self, f: BinaryIO):
        self._f = f
        self.num_units = 0

    def read(self, field: Optional[str] = None, kind: Optional[str] = None) -> Any:
        """
        Read the next unit and return its value.

        :param field: The field name the unit must have, if given.
        :param kind: The field kind the unit must have, if given.

        :raises ProtocolError: If the stream is exhausted or corrupt, or if the unit is for a
            different field or kind.
        """
        position = self.num_units
        try:
            unit = pickle.load(self._f)
        except EOFError:
            raise ProtocolError(
                f"Stream ended after {position} units, expected a unit for field '{field}'"
            )
        except Exception as e:
            raise ProtocolError(f"Unit {position} could not be read: {e}") from e

        if not isinstance(unit, dict) or set(unit.keys()) != _UNIT_KEYS:
            raise ProtocolError(f"Unit {position} is not a portable unit ({type(unit).__name__})")
        if field is not None and unit["field"] != field:
            raise ProtocolError(
                f"Expected field '{field}' at unit {position}, found '{unit['field']}'"
            )
        if kind is not None and unit["kind"] != str(kind):
            raise ProtocolError(
                f"Expected unit {position} ('{unit['field']}') to be of kind '{kind}', "
                f"found '{unit['kind']}'"
            )

        self.num_units += 1
        log.debug(f"Read unit {self.num_units} ('{unit['field']}', {unit['kind']})")
        return unit["value"]

    def expect_end(self) -> None:
        """
        :raises ProtocolError: If there is anything left in the stream.
        """
        if self._f.read(1):
            raise ProtocolError(f"Unexpected data in stream after {self.num_units} units")
