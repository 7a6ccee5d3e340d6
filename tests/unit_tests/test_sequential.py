"""Tests for digestion with several enzymes."""

import pytest

from alphadigest.digestion import (
    DigestionParameters,
    EnzymeDigestion,
    ProteinDigester,
    SequentialEnzymeIterator,
    Specificity,
)


def specific_windows(sequence, enzyme, max_missed_cleavages, offset=0):
    """Brute force (start, end) of specific peptides of a (sub)sequence."""
    sites = [0]
    sites += [i for i in range(1, len(sequence)) if enzyme.is_cleavage_site(sequence[i - 1], sequence[i])]
    sites.append(len(sequence))
    return [
        (offset + sites[a], offset + sites[b])
        for a in range(len(sites) - 1)
        for b in range(a + 1, min(len(sites), a + max_missed_cleavages + 2))
    ]


class TestSequentialDigestion:

    def test_two_enzymes(self, enzymes, tryptic_protein):
        trypsin, asp_n = enzymes['Trypsin'], enzymes['Asp-N']
        params = DigestionParameters.enzymatic([trypsin, asp_n], max_missed_cleavages=1)
        iterator = ProteinDigester(params).iter_peptides(tryptic_protein)
        assert isinstance(iterator, SequentialEnzymeIterator)

        found = [(p.start, p.end) for p in iterator]
        assert len(found) == len(set(found))
        assert found == sorted(found)

        expected = set()
        for start, end in specific_windows(tryptic_protein, trypsin, 1):
            expected.update(specific_windows(tryptic_protein[start:end], asp_n, 1, offset=start))
        assert set(found) == expected

    def test_window_order_is_kept(self, enzymes):
        params = DigestionParameters.enzymatic([enzymes['Trypsin'], enzymes['Asp-N']], max_missed_cleavages=0)
        peptides = ProteinDigester(params).digest("AADKGGDR")
        # Trypsin: AADK, GGDR; Asp-N on each
        assert [(p.start, p.sequence) for p in peptides] == [(0, "AA"), (2, "DK"), (4, "GG"), (6, "DR")]

    def test_overlapping_windows_merged_by_start(self, enzymes):
        trypsin, asp_n = enzymes['Trypsin'], enzymes['Asp-N']
        protein = "AAKADAKAADAK"
        params = DigestionParameters.enzymatic([trypsin, asp_n], max_missed_cleavages=1)
        found = [(p.start, p.end) for p in ProteinDigester(params).digest(protein)]
        assert found == sorted(found)

        expected = set()
        for start, end in specific_windows(protein, trypsin, 1):
            expected.update(specific_windows(protein[start:end], asp_n, 1, offset=start))
        assert found == sorted(expected)

    def test_mass_window_applies_to_last_enzyme(self, enzymes, tryptic_protein):
        params = DigestionParameters.enzymatic([enzymes['Trypsin'], enzymes['Glu-C']], max_missed_cleavages=1)
        digester = ProteinDigester(params)
        everything = digester.digest(tryptic_protein)
        windowed = digester.digest(tryptic_protein, mass_min=600.0, mass_max=1200.0)
        assert windowed == [p for p in everything if 600.0 <= p.mass <= 1200.0]

    def test_three_enzymes(self, enzymes, tryptic_protein):
        params = DigestionParameters.enzymatic(
            [enzymes['Trypsin'], enzymes['Asp-N'], enzymes['Glu-C']], max_missed_cleavages=0
        )
        peptides = ProteinDigester(params).digest(tryptic_protein)
        glu_c = enzymes['Glu-C']
        asp_n = enzymes['Asp-N']
        trypsin = enzymes['Trypsin']
        for peptide in peptides:
            for enzyme in (trypsin, asp_n, glu_c):
                assert enzyme.count_missed_cleavages(peptide.sequence) == 0
        assert "".join(p.sequence for p in peptides) == tryptic_protein

    def test_semi_specific_last_enzyme(self, enzymes):
        params = DigestionParameters.from_digestions([
            EnzymeDigestion(enzymes['Trypsin'], Specificity.SPECIFIC, 0),
            EnzymeDigestion(enzymes['Asp-N'], Specificity.SPECIFIC_N_TERM_ONLY, 0),
        ])
        peptides = ProteinDigester(params).digest("AADKGGDR")
        assert [(p.start, p.sequence) for p in peptides] == [
            (0, "A"), (0, "AA"), (2, "D"), (2, "DK"),
            (4, "G"), (4, "GG"), (6, "D"), (6, "DR"),
        ]

    def test_requires_two_enzymes(self, enzymes, builder_for):
        with pytest.raises(ValueError):
            SequentialEnzymeIterator(builder_for("AADK"), [EnzymeDigestion(enzymes['Trypsin'])])
