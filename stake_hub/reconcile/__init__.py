from stake_hub.reconcile.reconciler import AccountStateReconciler
from stake_hub.reconcile.snapshot import StakePositionSnapshot, lamports_to_sol

__all__ = ["AccountStateReconciler", "StakePositionSnapshot", "lamports_to_sol"]
