"""
Stampman signals - public event API.

Feedback signals (pure notifications, return values are ignored):
- stamp_added: Frontier slot filled in a PendingBatch. sender=StampBatchController, batch, index
- stamp_undone: Last pending slot removed. sender=StampBatchController, batch, index
- stamps_confirmed: Batch committed. sender=StampBatchController, request
- reward_redeemed: Claim succeeded. sender=RedemptionGate, progress, attempt

Lifecycle signals:
- card_completed: A commit filled the card. sender=CommitCoordinator, progress
- card_enrolled: Emitted by StampCardService.enroll(). sender=CustomerCard
- program_updated: Emitted by StampCardService.update_program(). sender=LoyaltyProgram, program, changes
"""

from django.dispatch import Signal

# Feedback signals (emitted by the batch controller and the redemption gate)
stamp_added = Signal()
stamp_undone = Signal()
stamps_confirmed = Signal()
reward_redeemed = Signal()

# Lifecycle signals
card_completed = Signal()
card_enrolled = Signal()
program_updated = Signal()
