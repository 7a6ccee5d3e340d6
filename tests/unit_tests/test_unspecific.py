"""Tests for unspecific digestion."""

import numpy as np
import pytest

from alphadigest.constants import AA_MASSES_DICT, ACETYL_MASS, CARBAMIDOMETHYL_MASS, H2O_MASS
from alphadigest.digestion import DigestionParameters, ProteinDigester
from alphadigest.digestion.iterators.unspecific import window_end_bounds


# =============================================================================
# Helper Functions
# =============================================================================

def all_substrings(sequence, mass_min=None, mass_max=None):
    """Brute force (start, sequence) of all substrings in the mass window."""
    result = []
    for start in range(len(sequence)):
        for end in range(start + 1, len(sequence) + 1):
            peptide = sequence[start:end]
            mass = sum(AA_MASSES_DICT[aa] for aa in peptide) + H2O_MASS
            if (mass_min is None or mass >= mass_min) and (mass_max is None or mass <= mass_max):
                result.append((start, peptide))
    return result


@pytest.fixture
def digester():
    return ProteinDigester(DigestionParameters.unspecific())


class TestWindowEndBounds:

    def test_unbounded(self):
        prefix = np.concatenate(([0.0], np.cumsum([100.0] * 4)))
        first_end, last_end = window_end_bounds(prefix, prefix, -np.inf, np.inf)
        assert list(first_end) == [1, 2, 3, 4]
        assert list(last_end) == [4, 4, 4, 4]

    def test_bounded(self):
        prefix = np.concatenate(([0.0], np.cumsum([100.0] * 5)))
        first_end, last_end = window_end_bounds(prefix, prefix, 150.0, 250.0)
        # Windows of exactly two residues
        assert list(first_end) == [2, 3, 4, 5, 6]
        assert list(last_end) == [2, 3, 4, 5, 5]

    def test_empty(self):
        first_end, last_end = window_end_bounds(np.zeros(1), np.zeros(1), -np.inf, np.inf)
        assert len(first_end) == 0 and len(last_end) == 0


class TestUnspecificDigestion:

    def test_coverage(self, digester):
        sequence = "PEPTIDEKAGCMR"
        peptides = digester.digest(sequence)
        length = len(sequence)
        assert len(peptides) == length * (length + 1) // 2
        assert [(p.start, p.sequence) for p in peptides] == all_substrings(sequence)

    def test_order(self, digester):
        peptides = digester.digest("ACDK")
        assert [p.sequence for p in peptides] == [
            "A", "AC", "ACD", "ACDK", "C", "CD", "CDK", "D", "DK", "K",
        ]

    def test_mass_window(self, digester):
        sequence = "PEPTIDEKAGCMRWYFLLSSK"
        peptides = digester.digest(sequence, mass_min=500.0, mass_max=900.0)
        assert [(p.start, p.sequence) for p in peptides] == all_substrings(sequence, 500.0, 900.0)
        assert all(500.0 <= p.mass <= 900.0 for p in peptides)

    def test_open_ended_windows(self, digester):
        sequence = "PEPTIDEKAGCMR"
        assert [(p.start, p.sequence) for p in digester.digest(sequence, mass_min=1000.0)] \
            == all_substrings(sequence, mass_min=1000.0)
        assert [(p.start, p.sequence) for p in digester.digest(sequence, mass_max=300.0)] \
            == all_substrings(sequence, mass_max=300.0)

    def test_masses(self, digester, peptide_mass):
        for peptide in digester.digest("GASPVK"):
            assert peptide.mass == pytest.approx(peptide_mass(peptide.sequence))
            assert peptide.missed_cleavages == 0

    def test_empty_protein(self, digester):
        assert digester.digest("") == []

    def test_single_residue(self, digester):
        assert [p.sequence for p in digester.digest("W")] == ["W"]

    def test_ambiguous_windows(self, ax_residues):
        digester = ProteinDigester(DigestionParameters.unspecific(max_combinations=1), residues=ax_residues)
        peptides = digester.digest("AXG")
        assert [(p.start, p.sequence) for p in peptides] == [
            (0, "A"), (0, "AA"), (0, "AG"), (0, "AAG"), (0, "AGG"),
            (1, "A"), (1, "G"), (1, "AG"), (1, "GG"),
            (2, "G"),
        ]

    def test_no_ambiguity_budget(self, ax_residues):
        digester = ProteinDigester(DigestionParameters.unspecific(max_combinations=0), residues=ax_residues)
        assert [(p.start, p.sequence) for p in digester.digest("AXG")] == [(0, "A"), (2, "G")]

    def test_modifications(self, carbamidomethyl_resolver, peptide_mass):
        digester = ProteinDigester(DigestionParameters.unspecific(), resolver=carbamidomethyl_resolver)
        peptides = {(p.start, p.sequence): p for p in digester.digest("ACK")}

        ac = peptides[(0, "AC")]
        assert ac.modifications == (("Carbamidomethylation of C", 1),)
        assert ac.n_term_modification == "Acetylation of protein N-term"
        assert ac.mass == pytest.approx(peptide_mass("AC") + CARBAMIDOMETHYL_MASS + ACETYL_MASS)

        ck = peptides[(1, "CK")]
        assert ck.modifications == (("Carbamidomethylation of C", 0),)
        assert ck.n_term_modification is None
        assert ck.mass == pytest.approx(peptide_mass("CK") + CARBAMIDOMETHYL_MASS)
