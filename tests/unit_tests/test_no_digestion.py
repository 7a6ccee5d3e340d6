"""Tests for whole protein digestion."""

import pytest

from alphadigest.constants import DEAMIDATION_MASS
from alphadigest.digestion import DigestionParameters, NoDigestionIterator, ProteinDigester
from alphadigest.exceptions import UnsupportedResidueError
from alphadigest.modifications import FixedModificationResolver


@pytest.fixture
def digester(ax_residues):
    return ProteinDigester(DigestionParameters.whole_protein(max_combinations=1), residues=ax_residues)


class TestNoDigestion:

    def test_whole_protein(self, digester, peptide_mass):
        peptides = digester.digest("PEPTIDE")
        assert len(peptides) == 1
        assert peptides[0].sequence == "PEPTIDE"
        assert peptides[0].start == 0
        assert peptides[0].mass == pytest.approx(peptide_mass("PEPTIDE"))
        assert peptides[0].missed_cleavages == 0

    def test_pepxtide(self, digester, peptide_mass):
        """X standing for A or G with an ambiguity budget of 1."""
        peptides = digester.digest("PEPXTIDE")
        assert [p.sequence for p in peptides] == ["PEPATIDE", "PEPGTIDE"]
        assert all(p.start == 0 for p in peptides)
        for peptide in peptides:
            assert peptide.mass == pytest.approx(peptide_mass(peptide.sequence))
        assert peptides[0].mass != pytest.approx(peptides[1].mass)

    def test_ambiguity_budget_exceeded(self, digester):
        assert digester.digest("PXPXP") == []

    def test_empty_protein(self, digester):
        assert digester.digest("") == []

    def test_single_residue(self, digester):
        assert [p.sequence for p in digester.digest("K")] == ["K"]

    def test_mass_window(self, digester, peptide_mass):
        mass = peptide_mass("PEPTIDE")
        assert len(digester.digest("PEPTIDE", mass_min=mass - 0.001, mass_max=mass + 0.001)) == 1
        assert digester.digest("PEPTIDE", mass_max=mass - 0.001) == []
        assert digester.digest("PEPTIDE", mass_min=mass + 0.001) == []

    def test_mass_window_per_assignment(self, digester, peptide_mass):
        mass = peptide_mass("PEPGTIDE")
        peptides = digester.digest("PEPXTIDE", mass_min=mass - 0.001, mass_max=mass + 0.001)
        assert [p.sequence for p in peptides] == ["PEPGTIDE"]

    def test_substring(self, digester):
        iterator = digester.iter_peptides("MKPEPTIDER", start=2, end=9)
        assert isinstance(iterator, NoDigestionIterator)
        peptides = list(iterator)
        assert [(p.sequence, p.start) for p in peptides] == [("PEPTIDE", 2)]

    def test_invalid_range(self, digester):
        with pytest.raises(ValueError):
            digester.iter_peptides("PEPTIDE", start=5, end=3)

    def test_unsupported_residue_at_construction(self, digester):
        with pytest.raises(UnsupportedResidueError):
            digester.iter_peptides("PEP*TIDE")

    def test_exhausted_state(self, digester):
        iterator = digester.iter_peptides("PEPTIDE")
        assert iterator.next_peptide() is not None
        assert iterator.next_peptide() is None
        assert iterator.exhausted
        assert not iterator.interrupted
        assert iterator.next_peptide() is None


class TestMotifModifications:

    def test_motif_applies_to_expanded_residue(self, peptide_mass):
        resolver = FixedModificationResolver.from_names(["Deamidation of N in N-x-S/T"])
        digester = ProteinDigester(DigestionParameters.whole_protein(), resolver=resolver)
        peptides = {p.sequence: p for p in digester.digest("GBGSK")}
        assert set(peptides) == {"GDGSK", "GNGSK"}
        assert peptides["GDGSK"].modifications == ()
        assert peptides["GNGSK"].modifications == (("Deamidation of N in N-x-S/T", 1),)
        assert peptides["GNGSK"].mass == pytest.approx(peptide_mass("GNGSK") + DEAMIDATION_MASS)
