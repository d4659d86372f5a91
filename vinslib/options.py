"""Options shared by the measurement updaters."""

from __future__ import annotations

from dataclasses import dataclass, replace

__all__ = ["UpdaterOptions"]


@dataclass(frozen=True)
class UpdaterOptions:
    """General updater options: chi-squared gating and pixel noise."""

    chi2_multiplier: float = 5.0
    sigma_pix: float = 1.0
    sigma_pix_sq: float = 1.0

    def with_squared_noise(self) -> UpdaterOptions:
        """Return a copy whose ``sigma_pix_sq`` is ``sigma_pix`` squared."""
        return replace(self, sigma_pix_sq=self.sigma_pix**2)

    def summary(self) -> str:
        """Return a readable listing of the loaded parameters."""
        return (
            f"\t- chi2_multipler: {self.chi2_multiplier:.1f}\n"
            f"\t- sigma_pix: {self.sigma_pix:.2f}\n"
        )