"""Base class of the digestion iterators.

Every iterator is a pull-based producer driven by the same state machine::

    SCANNING -> BUFFERING -> DRAINING -> SCANNING ... -> EXHAUSTED

Subclasses implement :meth:`SequenceIterator._scan`, which advances the
cursor to the next boundary and queues what was found there. Queued items
are either finished peptides or lazy jobs, generators yielding a peptide or
None per candidate. The base class drains the queue one candidate at a time
and checks the cancellation token before each of them. A cancelled iterator
ends in the terminal INTERRUPTED state instead of EXHAUSTED.
"""

import logging
import threading
from collections import deque
from enum import Enum
from typing import Deque, Iterator, Optional, Union

from ..builder import PeptideBuilder
from ..draft import ExtendedPeptide

logger = logging.getLogger(__name__)


class IteratorState(Enum):
    SCANNING = "scanning"
    BUFFERING = "buffering"
    DRAINING = "draining"
    EXHAUSTED = "exhausted"
    INTERRUPTED = "interrupted"


class CancellationToken:
    """Cooperative cancellation flag, safe to set from another thread."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


Job = Iterator[Optional[ExtendedPeptide]]
_JOB_DONE = object()


class SequenceIterator:
    """Lazy, single-pass producer of the peptides of one protein.

    Parameters
    ----------
    builder : PeptideBuilder
        Builder of the protein to digest
    mass_min, mass_max : float, optional
        Inclusive mass window, None for no bound
    cancellation_token : CancellationToken, optional
        Token checked before every candidate
    start, end : int
        Digested range of the protein, the whole protein by default

    Raises
    ------
    UnsupportedResidueError
        If the digested range contains an unknown residue code
    """

    def __init__(
        self,
        builder: PeptideBuilder,
        mass_min: Optional[float] = None,
        mass_max: Optional[float] = None,
        cancellation_token: Optional[CancellationToken] = None,
        start: int = 0,
        end: Optional[int] = None,
    ):
        protein_length = len(builder.protein_sequence)
        end = protein_length if end is None else end
        if not 0 <= start <= end <= protein_length:
            raise ValueError(f"Invalid range [{start}, {end}) for a protein of length {protein_length}")
        builder.residues.validate(builder.protein_sequence, start, end)

        self.builder = builder
        self.protein_sequence = builder.protein_sequence
        self.mass_min = mass_min
        self.mass_max = mass_max
        self.start = start
        self.end = end
        self.cancellation_token = cancellation_token if cancellation_token is not None else CancellationToken()
        self.state = IteratorState.SCANNING
        self._buffer: Deque[Union[ExtendedPeptide, Job]] = deque()
        self._scan_complete = False

    def _scan(self) -> bool:
        """Advance to the next boundary and queue its candidates.

        Returns False once the digested range is fully scanned.
        """
        raise NotImplementedError

    def _enqueue(self, item: Union[ExtendedPeptide, Job, None]) -> None:
        if item is not None:
            self._buffer.append(item)

    def _interrupt(self) -> None:
        logger.debug(f"Digestion interrupted with {len(self._buffer)} queued items")
        self._buffer.clear()
        self.state = IteratorState.INTERRUPTED

    @property
    def exhausted(self) -> bool:
        return self.state == IteratorState.EXHAUSTED

    @property
    def interrupted(self) -> bool:
        return self.state == IteratorState.INTERRUPTED

    def next_peptide(self) -> Optional[ExtendedPeptide]:
        """Next peptide, None when exhausted or interrupted."""
        while True:
            if self.state in (IteratorState.EXHAUSTED, IteratorState.INTERRUPTED):
                return None
            if self.cancellation_token.cancelled:
                self._interrupt()
                return None

            if self._buffer:
                self.state = IteratorState.DRAINING
                item = self._buffer[0]
                if isinstance(item, ExtendedPeptide):
                    self._buffer.popleft()
                    return item
                candidate = next(item, _JOB_DONE)
                if candidate is _JOB_DONE:
                    self._buffer.popleft()
                elif candidate is not None:
                    return candidate
                continue

            if self._scan_complete:
                self.state = IteratorState.EXHAUSTED
                return None

            self.state = IteratorState.SCANNING
            if not self._scan():
                self._scan_complete = True
            if self._buffer:
                self.state = IteratorState.BUFFERING

    def __iter__(self):
        return self

    def __next__(self) -> ExtendedPeptide:
        peptide = self.next_peptide()
        if peptide is None:
            raise StopIteration
        return peptide
