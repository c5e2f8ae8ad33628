"""
This module exposes the dependencies used by the bundled models and resources

Custom entities should use the same names, so that the serialization layer can be replaced in one place.
"""
from dataclasses import dataclass, field

from .dataclasses_dict import DataclassDictMixIn as DictMixin
