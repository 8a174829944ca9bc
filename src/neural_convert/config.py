import copy
import json
from dataclasses import dataclass, fields, is_dataclass, replace
from enum import Enum
from typing import Any, Dict, Generator, List, Optional, Tuple, Type, TypeVar, cast

import yaml
from cached_path import cached_path
from omegaconf import OmegaConf as om
from omegaconf.errors import OmegaConfBaseException
from typing_extensions import Self

from .aliases import PathOrStr
from .exceptions import ConfigurationError


class StrEnum(str, Enum):
    """
    This is equivalent to Python's :class:`enum.StrEnum` since version 3.11.
    We include this here for compatibility with older version of Python.
    """

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"'{str(self)}'"


C = TypeVar("C", bound="Config")


@dataclass
class Config:
    """
    A base class for configuration dataclasses.

    .. important::
        When you subclass this you should still decorate your subclasses with
        :func:`@dataclass <dataclasses.dataclass>`.

    .. important::
        Config classes need to be serializable, so you should only use simple types for
        your fields.
    """

    def as_dict(self, *, exclude_none: bool = False, json_safe: bool = False) -> Dict[str, Any]:
        """
        Convert into a regular Python dictionary.

        :param exclude_none: Don't include values that are ``None``.
        :param json_safe: Output only JSON-safe types.
        """

        def iter_fields(d) -> Generator[Tuple[str, Any], None, None]:
            for field in fields(d):
                value = getattr(d, field.name)
                if exclude_none and value is None:
                    continue
                yield (field.name, value)

        def as_dict(d: Any) -> Any:
            if is_dataclass(d):
                return {k: as_dict(v) for k, v in iter_fields(d)}
            elif isinstance(d, dict):
                return {k: as_dict(v) for k, v in d.items()}
            elif isinstance(d, (list, tuple, set)):
                if json_safe:
                    return [as_dict(x) for x in d]
                return d.__class__((as_dict(x) for x in d))
            elif isinstance(d, Enum):
                return d.value if json_safe else d
            elif d is None or isinstance(d, (float, int, bool, str)):
                return d
            elif json_safe:
                return str(d)
            else:
                return d

        return as_dict(self)

    def as_config_dict(self) -> Dict[str, Any]:
        """
        A JSON-safe version of :meth:`as_dict()`, suitable for logging the config.
        """
        return self.as_dict(exclude_none=True, json_safe=True)

    def validate(self):
        """
        Validate fields in ``self``. This may modify ``self`` in-place.
        """
        pass

    def merge(self, dotlist: List[str]) -> Self:
        """
        Merge self with fields from a "dotlist", creating a new object.

        :param dotlist: A list of field attributes with dot notation, e.g. ``foo.bar=1``.
        """
        try:
            merged = om.merge(self, om.from_dotlist(_clean_opts(dotlist)))
            out = cast(Self, om.to_object(merged))
        except OmegaConfBaseException as e:
            raise ConfigurationError(str(e))
        out.validate()
        return out

    def replace(self, **changes) -> Self:
        """
        Creates a new object of the same type, replacing fields with values from ``changes``.
        """
        return replace(self, **changes)

    def copy(self, deep: bool = True) -> Self:
        return copy.deepcopy(self) if deep else copy.copy(self)

    @classmethod
    def from_dict(cls: Type[C], data: Dict[str, Any], overrides: Optional[List[str]] = None) -> C:
        """
        Initialize from a regular Python dictionary.

        :param data: A Python dictionary.
        :param overrides: A list of field overrides with dot notation, e.g. ``foo.bar=1``.
        """
        try:
            conf = om.merge(om.structured(cls), data)
            if overrides:
                conf = om.merge(conf, om.from_dotlist(_clean_opts(overrides)))
            return cast(C, om.to_object(conf))
        except OmegaConfBaseException as e:
            raise ConfigurationError(str(e))

    @classmethod
    def from_file(cls: Type[C], path: PathOrStr, overrides: Optional[List[str]] = None) -> C:
        path_str = str(path)
        if path_str.endswith((".yml", ".yaml")):
            return cls.from_yaml(path, overrides=overrides)
        elif path_str.endswith(".json"):
            return cls.from_json(path, overrides=overrides)
        else:
            raise ConfigurationError(f"Unsupported config file type: {path}")

    @classmethod
    def from_json(cls: Type[C], path: PathOrStr, overrides: Optional[List[str]] = None) -> C:
        with cached_path(path).open() as f:
            config_dict = json.load(f)
        return cls.from_dict(config_dict, overrides=overrides)

    @classmethod
    def from_yaml(cls: Type[C], path: PathOrStr, overrides: Optional[List[str]] = None) -> C:
        with cached_path(path).open() as f:
            config_dict = yaml.safe_load(f)
        return cls.from_dict(config_dict or {}, overrides=overrides)


def _clean_opts(opts: List[str]) -> List[str]:
    return [_clean_opt(s) for s in opts]


def _clean_opt(arg: str) -> str:
    if "=" not in arg:
        arg = f"{arg}=True"
    name, val = arg.split("=", 1)
    name = name.strip("-").replace("-", "_")
    return f"{name}={val}"
