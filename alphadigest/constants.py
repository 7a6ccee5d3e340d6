"""Physical constants, residue masses and default tables for digestion.

This module provides the constants used throughout alphadigest. All masses are
monoisotopic and sourced from Unimod / IUPAC tables.

Residue tables are provided in dictionary form here; the ord()-indexed arrays
used by the Numba kernels are built by :class:`alphadigest.residues.ResidueTable`
so that custom residue tables get the same fast path as the default one.

Key Features
------------
- Monoisotopic masses of the 20 standard residues plus U and O
- Combination codes (B, J, Z, X) with their ordered concrete alternatives
- Default fixed modification masses (Carbamidomethyl, Oxidation, Acetyl, ...)
- Default enzyme catalogue (Trypsin, Lys-C, Asp-N, ...)

Sources
-------
- IUPAC amino acid masses: https://www.unimod.org/masses.html
- Unimod modification masses: https://www.unimod.org/modifications_list.php
"""

# =============================================================================
# Fundamental Physical Constants
# =============================================================================

# Water mass (H2O)
# Calculated: 2*1.007825 + 15.994915 = 18.010564684
H2O_MASS = 18.010564684  # Da

# Size of the ord()-indexed lookup arrays (full ASCII range)
ORD_TABLE_SIZE = 256

# =============================================================================
# Residue Monoisotopic Masses (Da)
# =============================================================================

# Standard 20 amino acids (unmodified residues, no terminal groups)
AA_MASSES_DICT = {
    'A': 71.037114,   # Alanine
    'R': 156.101111,  # Arginine
    'N': 114.042927,  # Asparagine
    'D': 115.026943,  # Aspartic acid
    'C': 103.009185,  # Cysteine (unmodified)
    'E': 129.042593,  # Glutamic acid
    'Q': 128.058578,  # Glutamine
    'G': 57.021464,   # Glycine
    'H': 137.058912,  # Histidine
    'I': 113.084064,  # Isoleucine
    'L': 113.084064,  # Leucine
    'K': 128.094963,  # Lysine
    'M': 131.040485,  # Methionine
    'F': 147.068414,  # Phenylalanine
    'P': 97.052764,   # Proline
    'S': 87.032028,   # Serine
    'T': 101.047679,  # Threonine
    'W': 186.079313,  # Tryptophan
    'Y': 163.063329,  # Tyrosine
    'V': 99.068414,   # Valine
}

# Rare proteinogenic residues, concrete (not combinations)
AA_MASSES_RARE = {
    'U': 150.953636,  # Selenocysteine
    'O': 237.147727,  # Pyrrolysine
}

# =============================================================================
# Combination Codes
# =============================================================================

# One-letter codes standing for several concrete residues. The order of the
# alternatives is the order in which ambiguous sequences are expanded.
AA_COMBINATIONS = {
    'B': ('D', 'N'),  # Asp/Asn
    'J': ('I', 'L'),  # Ile/Leu
    'Z': ('E', 'Q'),  # Glu/Gln
    'X': tuple(sorted(AA_MASSES_DICT)),  # Any standard residue
}

# Maximal number of combination residues expanded in one peptide by default
DEFAULT_MAX_COMBINATIONS = 2

# =============================================================================
# Common Modification Masses
# =============================================================================

# Carbamidomethylation of Cysteine (Unimod:4)
# C2H3NO: 57.021464 Da
CARBAMIDOMETHYL_MASS = 57.021464

# Oxidation of Methionine (Unimod:35)
# O: 15.994915 Da
OXIDATION_MASS = 15.994915

# Acetylation (Protein N-term, Unimod:1)
# C2H2O: 42.010565 Da
ACETYL_MASS = 42.010565

# Amidation (Peptide C-term, Unimod:2)
# H N O-1: -0.984016 Da
AMIDATION_MASS = -0.984016

# Pyro-glu from Q (Unimod:28)
# H-3 N-1: -17.026549 Da
PYRO_GLU_Q_MASS = -17.026549

# Deamidation of N/Q (Unimod:7)
# H-1 N-1 O: 0.984016 Da
DEAMIDATION_MASS = 0.984016

# =============================================================================
# Default Enzymes
# =============================================================================

# Enzyme definitions as name -> residue sets. Cleavage happens between two
# residues when the residue before is in "before" and the residue after is
# not in "restriction_after", or when the residue after is in "after" and the
# residue before is not in "restriction_before".
DEFAULT_ENZYMES = {
    'Trypsin': {'before': 'KR', 'restriction_after': 'P'},
    'Trypsin (no P rule)': {'before': 'KR'},
    'Arg-C': {'before': 'R', 'restriction_after': 'P'},
    'Arg-C (no P rule)': {'before': 'R'},
    'Arg-N': {'after': 'R'},
    'Glu-C': {'before': 'E'},
    'Lys-C': {'before': 'K', 'restriction_after': 'P'},
    'Lys-C (no P rule)': {'before': 'K'},
    'Lys-N': {'after': 'K'},
    'Asp-N': {'after': 'D'},
    'Asp-N (ambic)': {'after': 'DE'},
    'Chymotrypsin': {'before': 'FYWL', 'restriction_after': 'P'},
    'Chymotrypsin (no P rule)': {'before': 'FYWL'},
    'Pepsin A': {'before': 'FL'},
    'CNBr': {'before': 'M'},
    'Thermolysin': {'after': 'AFILMV'},
    'LysargiNase': {'after': 'RK'},
}

# Residue code accepted in enzyme definitions as "any residue"
ENZYME_WILDCARD = 'X'


# =============================================================================
# Sanity Checks
# =============================================================================

def validate_constants():
    """Validate that constants are physically reasonable.

    Raises AssertionError if any constant is out of expected range.
    This is a sanity check to catch copy-paste errors or typos.
    """
    assert 18.00 < H2O_MASS < 18.02, f"H2O_MASS is wrong: {H2O_MASS}"

    for aa, mass in {**AA_MASSES_DICT, **AA_MASSES_RARE}.items():
        assert mass > 50.0, f"AA {aa} mass is too low: {mass}"
        assert mass < 250.0, f"AA {aa} mass is too high: {mass}"

    for code, alternatives in AA_COMBINATIONS.items():
        assert code not in AA_MASSES_DICT, f"Combination {code} shadows a residue"
        for aa in alternatives:
            assert aa in AA_MASSES_DICT, f"Combination {code} refers to unknown {aa}"
