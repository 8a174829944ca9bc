import logging
from typing import ClassVar, Generic, Protocol, Type, TypeVar

import torch

from ..aliases import PathOrStr
from ..exceptions import ConfigurationError
from ..io import atomic_output, open_input

__all__ = ["NativeModelStore", "TorchModelStore"]

log = logging.getLogger(__name__)

M = TypeVar("M")


class NativeModelStore(Protocol[M]):
    """
    Loads and saves a model in its native form.
    """

    def load(self, path: PathOrStr) -> M:
        ...

    def save(self, model: M, path: PathOrStr, save_overwrite: bool = False) -> None:
        ...


class TorchModelStore(Generic[M]):
    """
    A :class:`NativeModelStore` that persists whole model objects with :func:`torch.save`.
    """

    model_class: ClassVar[Type]

    def load(self, path: PathOrStr) -> M:
        """
        :raises ConfigurationError: If the file doesn't hold a model of the expected class.
        """
        log.info(f"Loading {self.model_class.__name__} from '{path}'")
        with open_input(path) as f:
            model = torch.load(f, map_location="cpu", weights_only=False)
        if not isinstance(model, self.model_class):
            raise ConfigurationError(
                f"Expected a {self.model_class.__name__} in '{path}', "
                f"found {type(model).__name__}"
            )
        return model

    def save(self, model: M, path: PathOrStr, save_overwrite: bool = False) -> None:
        log.info(f"Saving {self.model_class.__name__} to '{path}'")
        with atomic_output(path, save_overwrite=save_overwrite) as f:
            torch.save(model, f)
