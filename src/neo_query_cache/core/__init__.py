"""Query cache core domain: entities, value objects, exceptions and protocols."""

from .entities import *
from .value_objects import *
from .exceptions import *
from .protocols import *
