"""
CustomerCard model - one progression cycle of a customer on a program.

A card is created at enrollment with zero stamps and is closed by a
reward claim. Enrolling again afterwards opens a new card, so the number
of claimed cards is the customer's redemption count.
"""

import uuid

from django.db import models
from django.utils.translation import gettext_lazy as _

from stampman.progress import CardProgress


class CustomerCard(models.Model):
    """
    Persisted CardProgress.

    Rules (enforced by DB constraints and CardProgress):
    - 0 <= current_stamps <= total_slots
    - is_reward_claimed only when current_stamps == total_slots
    - Max 1 unclaimed card per (program, customer_ref)
    - card_code unique per business among unclaimed cards

    Stamp and claim writes go through a CardStore conditional write
    keyed on ``version``; never save() these counters directly.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    program = models.ForeignKey(
        "stampman.LoyaltyProgram",
        on_delete=models.PROTECT,
        related_name="cards",
        verbose_name=_("programa"),
    )
    business_ref = models.CharField(_("estabelecimento"), max_length=100, db_index=True)

    # Customer
    customer_ref = models.CharField(
        _("cliente"),
        max_length=100,
        db_index=True,
        help_text=_("ID externo do cliente."),
    )
    customer_name = models.CharField(_("nome do cliente"), max_length=200, blank=True)
    card_code = models.CharField(
        _("código da cartela"),
        max_length=3,
        help_text=_("Código de 3 dígitos informado no balcão."),
    )

    # Progress
    total_slots = models.PositiveSmallIntegerField(_("carimbos na cartela"))
    current_stamps = models.PositiveSmallIntegerField(_("carimbos atuais"), default=0)
    is_reward_claimed = models.BooleanField(_("prêmio resgatado"), default=False)
    last_commit_id = models.CharField(
        _("último commit"),
        max_length=64,
        null=True,
        blank=True,
    )
    version = models.PositiveIntegerField(_("versão"), default=0)

    # Timestamps
    created_at = models.DateTimeField(_("criado em"), auto_now_add=True)
    last_stamp_at = models.DateTimeField(_("último carimbo em"), null=True, blank=True)
    reward_claimed_at = models.DateTimeField(_("resgatado em"), null=True, blank=True)

    class Meta:
        db_table = "stampman_customer_card"
        verbose_name = _("cartela")
        verbose_name_plural = _("cartelas")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(current_stamps__lte=models.F("total_slots")),
                name="stampman_card_stamps_within_slots",
            ),
            models.CheckConstraint(
                condition=(
                    models.Q(is_reward_claimed=False)
                    | models.Q(current_stamps=models.F("total_slots"))
                ),
                name="stampman_card_claim_requires_complete",
            ),
            models.UniqueConstraint(
                fields=["program", "customer_ref"],
                condition=models.Q(is_reward_claimed=False),
                name="stampman_unique_open_card",
            ),
            models.UniqueConstraint(
                fields=["business_ref", "card_code"],
                condition=models.Q(is_reward_claimed=False),
                name="stampman_unique_open_card_code",
            ),
        ]

    def __str__(self):
        return f"{self.card_code}: {self.current_stamps}/{self.total_slots}"

    def as_progress(self) -> CardProgress:
        """Convert to the CardProgress value object."""
        return CardProgress(
            card_id=str(self.pk),
            total_slots=self.total_slots,
            current_stamps=self.current_stamps,
            is_reward_claimed=self.is_reward_claimed,
            last_commit_id=self.last_commit_id,
            version=self.version,
        )
