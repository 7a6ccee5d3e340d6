"""Tests for the expansion of ambiguous sequences."""

import itertools

import numpy as np
import pytest

from alphadigest.constants import AA_MASSES_DICT, H2O_MASS
from alphadigest.digestion import AmbiguousSequenceIterator, advance_odometer
from alphadigest.exceptions import UnsupportedResidueError


class TestOdometer:

    def test_rightmost_fastest(self):
        digits = np.zeros(2, dtype=np.int64)
        radices = np.array([2, 3], dtype=np.int64)
        visited = [tuple(digits)]
        while advance_odometer(digits, radices):
            visited.append(tuple(digits))
        assert visited == list(itertools.product(range(2), range(3)))
        assert tuple(digits) == (0, 0)


class TestAmbiguousSequenceIterator:
    """Test concrete assignment enumeration."""

    def test_pepxtide(self, ax_residues):
        sequences = list(AmbiguousSequenceIterator("PEPXTIDE", ax_residues, max_combinations=1))
        assert sequences == ["PEPATIDE", "PEPGTIDE"]

    def test_odometer_order(self, ax_residues):
        sequences = list(AmbiguousSequenceIterator("XJ", ax_residues, max_combinations=2))
        assert sequences == ["AI", "AL", "GI", "GL"]

    def test_idempotent(self, residues):
        first = list(AmbiguousSequenceIterator("BAZK", residues))
        second = list(AmbiguousSequenceIterator("BAZK", residues))
        assert first == second
        assert first == ["DAEK", "DAQK", "NAEK", "NAQK"]

    def test_concrete_sequence_yields_itself(self, residues):
        assert list(AmbiguousSequenceIterator("PEPTIDE", residues)) == ["PEPTIDE"]

    def test_budget_exceeded_yields_nothing(self, ax_residues):
        iterator = AmbiguousSequenceIterator("XPXPX", ax_residues, max_combinations=2)
        assert iterator.budget_exceeded
        assert iterator.next_sequence() is None

    def test_exhausted_returns_none_again(self, ax_residues):
        iterator = AmbiguousSequenceIterator("PX", ax_residues, max_combinations=1)
        assert iterator.next_sequence() == "PA"
        assert iterator.next_sequence() == "PG"
        assert iterator.next_sequence() is None
        assert iterator.next_sequence() is None
        assert iterator.exhausted

    def test_n_combinations(self, residues):
        assert AmbiguousSequenceIterator("XB", residues).n_combinations == 40

    def test_mass_precheck_too_heavy(self, ax_residues):
        lightest = sum(AA_MASSES_DICT[aa] for aa in "PEPGTIDE") + H2O_MASS
        iterator = AmbiguousSequenceIterator(
            "PEPXTIDE", ax_residues, max_combinations=1, mass_max=lightest - 1.0
        )
        assert iterator.outside_mass_window
        assert list(iterator) == []

    def test_mass_precheck_too_light(self, ax_residues):
        heaviest = sum(AA_MASSES_DICT[aa] for aa in "PEPATIDE") + H2O_MASS
        iterator = AmbiguousSequenceIterator(
            "PEPXTIDE", ax_residues, max_combinations=1, mass_min=heaviest + 1.0
        )
        assert list(iterator) == []

    def test_mass_window_inside_range_expands_all(self, ax_residues):
        mass = sum(AA_MASSES_DICT[aa] for aa in "PEPATIDE") + H2O_MASS
        iterator = AmbiguousSequenceIterator(
            "PEPXTIDE", ax_residues, max_combinations=1, mass_min=mass - 0.01, mass_max=mass + 0.01
        )
        # The precheck only skips provably empty windows
        assert list(iterator) == ["PEPATIDE", "PEPGTIDE"]

    def test_unsupported_residue(self, residues):
        with pytest.raises(UnsupportedResidueError):
            AmbiguousSequenceIterator("PEP#", residues)
