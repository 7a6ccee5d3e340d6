"""Digestion configuration.

A :class:`DigestionParameters` value selects the cleavage mode and, for
enzymatic digestion, the enzymes with their specificity and missed cleavage
budget. Invalid configurations raise ConfigurationError on construction so
that no iterator ever starts with an unsupported combination.

Examples
--------
>>> registry = EnzymeRegistry.default()
>>> params = DigestionParameters.enzymatic(registry.get('Trypsin'), max_missed_cleavages=1)
>>> params.cleavage_mode
<CleavageMode.ENZYME: 'enzyme'>
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Tuple

from ..constants import DEFAULT_MAX_COMBINATIONS
from ..enzymes import Enzyme
from ..exceptions import ConfigurationError


class CleavageMode(Enum):
    """How proteins are cut."""
    WHOLE_PROTEIN = "whole_protein"
    UNSPECIFIC = "unspecific"
    ENZYME = "enzyme"


class Specificity(Enum):
    """Which peptide termini must be enzymatic cleavage sites."""
    SPECIFIC = "specific"
    SEMI_SPECIFIC = "semi_specific"
    SPECIFIC_N_TERM_ONLY = "specific_n_term_only"
    SPECIFIC_C_TERM_ONLY = "specific_c_term_only"

    @property
    def slides_c_term(self) -> bool:
        """Whether sub-peptides with a free C-terminus are enumerated."""
        return self in (Specificity.SEMI_SPECIFIC, Specificity.SPECIFIC_N_TERM_ONLY)

    @property
    def slides_n_term(self) -> bool:
        """Whether sub-peptides with a free N-terminus are enumerated."""
        return self in (Specificity.SEMI_SPECIFIC, Specificity.SPECIFIC_C_TERM_ONLY)


@dataclass(frozen=True)
class EnzymeDigestion:
    """One enzyme with its specificity and missed cleavage budget."""

    enzyme: Enzyme
    specificity: Specificity = Specificity.SPECIFIC
    max_missed_cleavages: int = 2

    def __post_init__(self):
        if not isinstance(self.enzyme, Enzyme):
            raise ConfigurationError(f"Expected an Enzyme, got {self.enzyme!r}")
        if not isinstance(self.specificity, Specificity):
            raise ConfigurationError(f"Unsupported specificity: {self.specificity!r}")
        if isinstance(self.max_missed_cleavages, bool) or not isinstance(self.max_missed_cleavages, int):
            raise ConfigurationError(
                f"Missed cleavage budget must be an integer, got {self.max_missed_cleavages!r}"
            )
        if self.max_missed_cleavages < 0:
            raise ConfigurationError(
                f"Missed cleavage budget must be >= 0, got {self.max_missed_cleavages} "
                f"for {self.enzyme.name}"
            )


@dataclass(frozen=True)
class DigestionParameters:
    """Parameters for protein digestion.

    Attributes
    ----------
    cleavage_mode : CleavageMode
        Whole protein, unspecific or enzymatic cleavage
    enzymes : tuple of EnzymeDigestion
        Enzymes applied one after the other, enzymatic mode only
    max_combinations : int
        Maximal number of combination residues (B, J, Z, X) expanded in one
        peptide; windows with more yield no peptide
    """

    cleavage_mode: CleavageMode
    enzymes: Tuple[EnzymeDigestion, ...] = ()
    max_combinations: int = DEFAULT_MAX_COMBINATIONS

    def __post_init__(self):
        object.__setattr__(self, 'enzymes', tuple(self.enzymes))

        if not isinstance(self.cleavage_mode, CleavageMode):
            raise ConfigurationError(f"Unsupported cleavage mode: {self.cleavage_mode!r}")
        if self.max_combinations < 0:
            raise ConfigurationError(
                f"Maximal number of combination residues must be >= 0, got {self.max_combinations}"
            )

        if self.cleavage_mode == CleavageMode.ENZYME:
            if not self.enzymes:
                raise ConfigurationError("Enzymatic digestion requires at least one enzyme")
            names = [digestion.enzyme.name for digestion in self.enzymes]
            if len(set(names)) != len(names):
                raise ConfigurationError(f"Enzyme listed more than once: {names}")
        elif self.enzymes:
            raise ConfigurationError(
                f"Enzymes cannot be used with cleavage mode {self.cleavage_mode.value}"
            )

    @classmethod
    def whole_protein(cls, max_combinations: int = DEFAULT_MAX_COMBINATIONS) -> 'DigestionParameters':
        """No digestion, the protein is the peptide."""
        return cls(CleavageMode.WHOLE_PROTEIN, max_combinations=max_combinations)

    @classmethod
    def unspecific(cls, max_combinations: int = DEFAULT_MAX_COMBINATIONS) -> 'DigestionParameters':
        """Every substring of the protein is a peptide."""
        return cls(CleavageMode.UNSPECIFIC, max_combinations=max_combinations)

    @classmethod
    def enzymatic(
        cls,
        enzymes,
        specificity: Specificity = Specificity.SPECIFIC,
        max_missed_cleavages: int = 2,
        max_combinations: int = DEFAULT_MAX_COMBINATIONS,
    ) -> 'DigestionParameters':
        """Enzymatic digestion with the same settings for every enzyme.

        Parameters
        ----------
        enzymes : Enzyme or iterable of Enzyme
            Enzymes applied one after the other
        specificity : Specificity
            Specificity used for every enzyme
        max_missed_cleavages : int
            Missed cleavage budget used for every enzyme
        max_combinations : int
            Ambiguity budget per peptide
        """
        if isinstance(enzymes, Enzyme):
            enzymes = [enzymes]
        return cls(
            CleavageMode.ENZYME,
            tuple(EnzymeDigestion(enzyme, specificity, max_missed_cleavages) for enzyme in enzymes),
            max_combinations,
        )

    @classmethod
    def from_digestions(
        cls,
        digestions: Iterable[EnzymeDigestion],
        max_combinations: int = DEFAULT_MAX_COMBINATIONS,
    ) -> 'DigestionParameters':
        """Enzymatic digestion with per enzyme settings."""
        return cls(CleavageMode.ENZYME, tuple(digestions), max_combinations)
