# Generated migration for LoyaltyProgram, CustomerCard and StampActivity

import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="LoyaltyProgram",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("code", models.CharField(max_length=50, unique=True, verbose_name="código")),
                (
                    "business_ref",
                    models.CharField(
                        db_index=True,
                        help_text="ID externo do estabelecimento.",
                        max_length=100,
                        verbose_name="estabelecimento",
                    ),
                ),
                ("name", models.CharField(max_length=200, verbose_name="nome")),
                (
                    "total_slots",
                    models.PositiveSmallIntegerField(
                        default=10,
                        help_text="Carimbos necessários para o prêmio",
                        verbose_name="carimbos na cartela",
                    ),
                ),
                (
                    "reward_description",
                    models.CharField(blank=True, max_length=255, verbose_name="prêmio"),
                ),
                ("is_active", models.BooleanField(default=True, verbose_name="ativo")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="criado em")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="atualizado em")),
            ],
            options={
                "verbose_name": "programa de fidelidade",
                "verbose_name_plural": "programas de fidelidade",
                "db_table": "stampman_program",
                "ordering": ["name"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(total_slots__gte=1),
                        name="stampman_program_slots_positive",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="CustomerCard",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "business_ref",
                    models.CharField(db_index=True, max_length=100, verbose_name="estabelecimento"),
                ),
                (
                    "customer_ref",
                    models.CharField(
                        db_index=True,
                        help_text="ID externo do cliente.",
                        max_length=100,
                        verbose_name="cliente",
                    ),
                ),
                (
                    "customer_name",
                    models.CharField(blank=True, max_length=200, verbose_name="nome do cliente"),
                ),
                (
                    "card_code",
                    models.CharField(
                        help_text="Código de 3 dígitos informado no balcão.",
                        max_length=3,
                        verbose_name="código da cartela",
                    ),
                ),
                ("total_slots", models.PositiveSmallIntegerField(verbose_name="carimbos na cartela")),
                (
                    "current_stamps",
                    models.PositiveSmallIntegerField(default=0, verbose_name="carimbos atuais"),
                ),
                (
                    "is_reward_claimed",
                    models.BooleanField(default=False, verbose_name="prêmio resgatado"),
                ),
                (
                    "last_commit_id",
                    models.CharField(blank=True, max_length=64, null=True, verbose_name="último commit"),
                ),
                ("version", models.PositiveIntegerField(default=0, verbose_name="versão")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="criado em")),
                (
                    "last_stamp_at",
                    models.DateTimeField(blank=True, null=True, verbose_name="último carimbo em"),
                ),
                (
                    "reward_claimed_at",
                    models.DateTimeField(blank=True, null=True, verbose_name="resgatado em"),
                ),
                (
                    "program",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="cards",
                        to="stampman.loyaltyprogram",
                        verbose_name="programa",
                    ),
                ),
            ],
            options={
                "verbose_name": "cartela",
                "verbose_name_plural": "cartelas",
                "db_table": "stampman_customer_card",
                "ordering": ["-created_at"],
                "constraints": [
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
                        condition=models.Q(is_reward_claimed=False),
                        fields=("program", "customer_ref"),
                        name="stampman_unique_open_card",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(is_reward_claimed=False),
                        fields=("business_ref", "card_code"),
                        name="stampman_unique_open_card_code",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="StampActivity",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "kind",
                    models.CharField(
                        choices=[("stamp", "Carimbo"), ("redeem", "Resgate")],
                        max_length=20,
                        verbose_name="tipo",
                    ),
                ),
                ("count", models.PositiveSmallIntegerField(default=0, verbose_name="quantidade")),
                ("stamps_after", models.PositiveSmallIntegerField(verbose_name="carimbos após")),
                (
                    "commit_id",
                    models.CharField(
                        blank=True,
                        max_length=64,
                        null=True,
                        verbose_name="commit",
                    ),
                ),
                ("note", models.CharField(blank=True, max_length=200, verbose_name="observação")),
                ("created_by", models.CharField(blank=True, max_length=100, verbose_name="criado por")),
                (
                    "created_at",
                    models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="criado em"),
                ),
                (
                    "card",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="activities",
                        to="stampman.customercard",
                        verbose_name="cartela",
                    ),
                ),
            ],
            options={
                "verbose_name": "atividade",
                "verbose_name_plural": "atividades",
                "db_table": "stampman_stamp_activity",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["card", "-created_at"], name="stampman_activity_card_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(commit_id__isnull=False),
                        fields=("card", "commit_id"),
                        name="stampman_unique_card_commit",
                    ),
                ],
            },
        ),
    ]
