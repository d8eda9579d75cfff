"""StampActivity model - append-only ledger of grants and redemptions."""

from django.db import models
from django.utils.translation import gettext_lazy as _


class StampActivity(models.Model):
    """
    Immutable record of a stamp grant or a reward redemption.

    Written in the same transaction as the card update. Grant rows carry
    the commit_id, which makes this table the replay ledger for commits
    older than the card's last_commit_id.
    """

    class Kind(models.TextChoices):
        STAMP = "stamp", _("Carimbo")
        REDEEM = "redeem", _("Resgate")

    card = models.ForeignKey(
        "stampman.CustomerCard",
        on_delete=models.CASCADE,
        related_name="activities",
        verbose_name=_("cartela"),
    )
    kind = models.CharField(_("tipo"), max_length=20, choices=Kind.choices)
    count = models.PositiveSmallIntegerField(_("quantidade"), default=0)
    stamps_after = models.PositiveSmallIntegerField(_("carimbos após"))
    commit_id = models.CharField(
        _("commit"),
        max_length=64,
        null=True,
        blank=True,
    )
    note = models.CharField(_("observação"), max_length=200, blank=True)
    created_by = models.CharField(_("criado por"), max_length=100, blank=True)
    created_at = models.DateTimeField(_("criado em"), auto_now_add=True, db_index=True)

    class Meta:
        db_table = "stampman_stamp_activity"
        verbose_name = _("atividade")
        verbose_name_plural = _("atividades")
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["card", "-created_at"], name="stampman_activity_card_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["card", "commit_id"],
                condition=models.Q(commit_id__isnull=False),
                name="stampman_unique_card_commit",
            ),
        ]

    def __str__(self):
        if self.kind == self.Kind.REDEEM:
            return f"{self.card_id}: resgate"
        return f"{self.card_id}: +{self.count} ({self.stamps_after})"
