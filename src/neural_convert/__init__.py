"""
neural-convert moves the parameters of trained neural NLP models between their native
torch form and a portable form made of nested lists.
"""

from .convert import ConversionConfig, ConversionResult, ModelType, Stage, convert
from .version import VERSION

__version__ = VERSION

__all__ = ["ConversionConfig", "ConversionResult", "ModelType", "Stage", "convert"]
