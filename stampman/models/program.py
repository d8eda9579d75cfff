"""LoyaltyProgram model - the stamp card template a business offers."""

from django.db import models
from django.utils.translation import gettext_lazy as _


class LoyaltyProgram(models.Model):
    """
    Stamp card template.

    total_slots is copied onto every CustomerCard at enrollment, so
    editing a program never changes the size of cards already issued.
    """

    code = models.CharField(_("código"), max_length=50, unique=True)
    business_ref = models.CharField(
        _("estabelecimento"),
        max_length=100,
        db_index=True,
        help_text=_("ID externo do estabelecimento."),
    )
    name = models.CharField(_("nome"), max_length=200)
    total_slots = models.PositiveSmallIntegerField(
        _("carimbos na cartela"),
        default=10,
        help_text=_("Carimbos necessários para o prêmio"),
    )
    reward_description = models.CharField(_("prêmio"), max_length=255, blank=True)

    is_active = models.BooleanField(_("ativo"), default=True)
    created_at = models.DateTimeField(_("criado em"), auto_now_add=True)
    updated_at = models.DateTimeField(_("atualizado em"), auto_now=True)

    class Meta:
        db_table = "stampman_program"
        verbose_name = _("programa de fidelidade")
        verbose_name_plural = _("programas de fidelidade")
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total_slots__gte=1),
                name="stampman_program_slots_positive",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.total_slots})"
