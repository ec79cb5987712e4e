from __future__ import annotations

from .base_vault import BaseVault, SaveStrategy
from .progress_vault import ProgressVault


__all__ = ["BaseVault", "ProgressVault", "SaveStrategy"]
