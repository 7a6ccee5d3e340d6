"""Pytest configuration for AlphaDigest tests.

This module provides common fixtures for all tests. Registries are built
once per session since they are immutable.
"""

import pytest

from alphadigest.constants import AA_MASSES_DICT, H2O_MASS
from alphadigest.enzymes import EnzymeRegistry
from alphadigest.modifications import FixedModificationResolver
from alphadigest.residues import ResidueTable


@pytest.fixture(scope="session")
def residues():
    """Default residue table (standard residues, U, O, B/J/Z/X)."""
    return ResidueTable.default()


@pytest.fixture(scope="session")
def ax_residues():
    """Residue table where X only stands for A or G."""
    return ResidueTable.from_masses(AA_MASSES_DICT, {'X': ('A', 'G'), 'J': ('I', 'L')})


@pytest.fixture(scope="session")
def enzymes():
    """Default enzyme registry."""
    return EnzymeRegistry.default()


@pytest.fixture(scope="session")
def trypsin(enzymes):
    return enzymes.get('Trypsin')


@pytest.fixture
def no_modifications():
    return FixedModificationResolver()


@pytest.fixture
def carbamidomethyl_resolver():
    """Resolver with Carbamidomethylation of C and protein N-term acetylation."""
    return FixedModificationResolver.from_names(
        ["Carbamidomethylation of C", "Acetylation of protein N-term"]
    )


@pytest.fixture
def peptide_mass():
    """Unmodified neutral mass of a concrete sequence."""
    def _mass(sequence):
        return sum(AA_MASSES_DICT[aa] for aa in sequence) + H2O_MASS
    return _mass


@pytest.fixture
def tryptic_protein():
    """Protein with several tryptic sites, one K/P exception and a C."""
    return "MKWVTFISLLLLFSSAYSRGVFRRDTHKSEIAHRFKDLGEEHFKGLVLIACSQYLQQCPFDEHVKLVNELTEFAK"


@pytest.fixture
def builder_for(residues, no_modifications):
    """Peptide builder of a protein with default residues and no modifications."""
    from alphadigest.digestion import PeptideBuilder

    def _builder(sequence, max_combinations=2):
        return PeptideBuilder(sequence, residues, no_modifications, max_combinations)
    return _builder
