"""
Django Stampman - Loyalty stamp cards.

Usage:
    from stampman import StampCardService, StampBatchController

    card = StampCardService.enroll("CAFE-10", "cust-42", "Ana")
    batch = StampCardService.open_batch(card.pk)
    batch = StampBatchController.tap_slot(batch, batch.frontier)
    progress = StampCardService.commit_batch(batch)

    if progress.state == RedemptionState.READY_TO_REDEEM:
        StampCardService.claim_reward(card.pk)
"""


def __getattr__(name):
    if name == "StampCardService":
        from stampman.service import StampCardService

        return StampCardService
    if name == "StampBatchController":
        from stampman.batch import StampBatchController

        return StampBatchController
    if name == "CommitCoordinator":
        from stampman.commit import CommitCoordinator

        return CommitCoordinator
    if name == "RedemptionGate":
        from stampman.redemption import RedemptionGate

        return RedemptionGate
    if name in ("CardProgress", "RedemptionState"):
        from stampman import progress

        return getattr(progress, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "StampCardService",
    "StampBatchController",
    "CommitCoordinator",
    "RedemptionGate",
    "CardProgress",
    "RedemptionState",
]
__version__ = "0.1.0"
