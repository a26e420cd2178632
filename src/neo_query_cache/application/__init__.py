"""Query cache application layer."""

from .services import *
