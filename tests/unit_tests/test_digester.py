"""Tests for the digestion entry points."""

import logging
from concurrent.futures import ThreadPoolExecutor

import pytest

from alphadigest.digestion import (
    DigestionParameters,
    EnzymaticIterator,
    NoDigestionIterator,
    ProteinDigester,
    SemiSpecificIterator,
    SequentialEnzymeIterator,
    Specificity,
    UnspecificIterator,
    create_sequence_iterator,
    digest_protein_list,
)
from alphadigest.exceptions import UnsupportedResidueError


class TestIteratorSelection:

    def test_dispatch(self, enzymes):
        trypsin = enzymes['Trypsin']
        cases = [
            (DigestionParameters.whole_protein(), NoDigestionIterator),
            (DigestionParameters.unspecific(), UnspecificIterator),
            (DigestionParameters.enzymatic(trypsin), EnzymaticIterator),
            (DigestionParameters.enzymatic(trypsin, Specificity.SEMI_SPECIFIC), SemiSpecificIterator),
            (DigestionParameters.enzymatic(trypsin, Specificity.SPECIFIC_C_TERM_ONLY), SemiSpecificIterator),
            (DigestionParameters.enzymatic([trypsin, enzymes['Lys-C']]), SequentialEnzymeIterator),
        ]
        for params, iterator_class in cases:
            assert isinstance(create_sequence_iterator("PEPTIDEK", params), iterator_class)

    @pytest.mark.parametrize("params", [
        DigestionParameters.whole_protein(),
        DigestionParameters.unspecific(),
    ])
    def test_unsupported_residue_raises_before_any_result(self, params):
        with pytest.raises(UnsupportedResidueError) as excinfo:
            create_sequence_iterator("PEPTIDEKPEPT?DE", params)
        assert excinfo.value.index == 12

    def test_unsupported_residue_enzymatic(self, trypsin):
        with pytest.raises(UnsupportedResidueError):
            create_sequence_iterator("PEPTIDEKpeptide", DigestionParameters.enzymatic(trypsin))

    def test_boundary_cases_all_modes(self, trypsin):
        for params in [
            DigestionParameters.whole_protein(),
            DigestionParameters.unspecific(),
            DigestionParameters.enzymatic(trypsin),
            DigestionParameters.enzymatic(trypsin, Specificity.SEMI_SPECIFIC),
        ]:
            digester = ProteinDigester(params)
            assert digester.digest("") == []
            assert [p.sequence for p in digester.digest("M")] == ["M"]


class TestProteinDigester:

    def test_iterators_are_independent(self, trypsin, tryptic_protein):
        digester = ProteinDigester(DigestionParameters.enzymatic(trypsin))
        first = digester.iter_peptides(tryptic_protein)
        second = digester.iter_peptides(tryptic_protein)
        first.next_peptide()
        assert list(second) == digester.digest(tryptic_protein)

    def test_parallel_proteins(self, trypsin, tryptic_protein):
        digester = ProteinDigester(DigestionParameters.enzymatic(trypsin))
        proteins = [tryptic_protein, tryptic_protein[::-1], "PEPTIDEK" * 5]
        with ThreadPoolExecutor(max_workers=3) as executor:
            results = list(executor.map(digester.digest, proteins))
        assert results == [digester.digest(protein) for protein in proteins]


class TestDigestProteinList:

    def test_mapping(self, trypsin, caplog):
        proteins = [
            ("P1", "AAAKPEPTIDER", "First protein GN=ONE"),
            ("P2", "GGGKPEPTIDERAAAK", "Second protein"),
        ]
        digester = ProteinDigester(DigestionParameters.enzymatic(trypsin, max_missed_cleavages=0))
        with caplog.at_level(logging.INFO, logger="alphadigest.digestion.digester"):
            peptides, peptide_to_proteins, protein_db = digest_protein_list(proteins, digester)

        # AAAKPEPTIDER has no site (K|P), GGGKPEPTIDER neither
        assert peptides == ["AAAKPEPTIDER", "GGGKPEPTIDER", "AAAK"]
        assert peptide_to_proteins == {0: ["P1"], 1: ["P2"], 2: ["P2"]}
        assert protein_db["P1"]["gene_name"] == "ONE"
        assert protein_db["P2"]["gene_name"] == ""
        assert protein_db["P2"]["sequence"] == "GGGKPEPTIDERAAAK"
        assert "Digesting 2 proteins" in caplog.text

    def test_shared_peptides(self, trypsin):
        proteins = [
            ("P1", "SAMPLERAAK", ""),
            ("P2", "GGKPEPTIDER", ""),
            ("P3", "AAKAAKSAMPLER", ""),
        ]
        digester = ProteinDigester(DigestionParameters.enzymatic(trypsin, max_missed_cleavages=0))
        peptides, peptide_to_proteins, _ = digest_protein_list(proteins, digester)
        assert peptides == ["SAMPLER", "AAK", "GGKPEPTIDER"]
        assert peptide_to_proteins[0] == ["P1", "P3"]
        # AAK occurs twice in P3
        assert peptide_to_proteins[1] == ["P1", "P3"]
        assert peptide_to_proteins[2] == ["P2"]

    def test_mass_window(self, trypsin):
        proteins = [("P1", "GKAPEPTIDEK", "")]
        digester = ProteinDigester(DigestionParameters.enzymatic(trypsin, max_missed_cleavages=0))
        peptides, _, _ = digest_protein_list(proteins, digester, mass_min=500.0)
        assert peptides == ["APEPTIDEK"]

    def test_empty_list(self, trypsin):
        digester = ProteinDigester(DigestionParameters.enzymatic(trypsin))
        assert digest_protein_list([], digester) == ([], {}, {})
