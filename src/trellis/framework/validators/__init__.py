"""Attribute validators for :class:`~trellis.framework.model.Model`."""

from trellis.framework.validators.base import BUILTIN_VALIDATORS, Validator
from trellis.framework.validators.boolean import BooleanValidator
from trellis.framework.validators.email import EmailValidator
from trellis.framework.validators.inline import InlineValidator
from trellis.framework.validators.ip import IpValidator
from trellis.framework.validators.number import NumberValidator
from trellis.framework.validators.range import RangeValidator
from trellis.framework.validators.required import RequiredValidator
from trellis.framework.validators.string import StringValidator
from trellis.framework.validators.url import UrlValidator

__all__ = [
    "BUILTIN_VALIDATORS",
    "BooleanValidator",
    "EmailValidator",
    "InlineValidator",
    "IpValidator",
    "NumberValidator",
    "RangeValidator",
    "RequiredValidator",
    "StringValidator",
    "UrlValidator",
    "Validator",
]
