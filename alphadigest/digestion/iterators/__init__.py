"""Digestion iterators, one per cleavage mode and specificity."""

from .base import CancellationToken, IteratorState, SequenceIterator
from .enzymatic import EnzymaticIterator
from .no_digestion import NoDigestionIterator
from .semi_specific import SemiSpecificIterator
from .sequential import SequentialEnzymeIterator, single_enzyme_iterator
from .unspecific import UnspecificIterator

__all__ = [
    'CancellationToken',
    'IteratorState',
    'SequenceIterator',
    'EnzymaticIterator',
    'NoDigestionIterator',
    'SemiSpecificIterator',
    'SequentialEnzymeIterator',
    'UnspecificIterator',
    'single_enzyme_iterator',
]
