# Initial migration for Order and Expense

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Order",
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
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pendiente"),
                            ("confirmed", "Confirmado"),
                            ("delivered", "Entregado"),
                            ("cancelled", "Cancelado"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=20,
                        verbose_name="estado",
                    ),
                ),
                (
                    "order_type",
                    models.CharField(
                        choices=[("retail", "Minorista"), ("wholesale", "Mayorista")],
                        default="retail",
                        max_length=20,
                        verbose_name="tipo de orden",
                    ),
                ),
                (
                    "payment_method",
                    models.CharField(blank=True, max_length=50, verbose_name="medio de pago"),
                ),
                (
                    "user_id",
                    models.CharField(
                        blank=True, db_index=True, max_length=64, verbose_name="id de usuario"
                    ),
                ),
                (
                    "email",
                    models.CharField(
                        blank=True, db_index=True, max_length=254, verbose_name="email"
                    ),
                ),
                ("user", models.JSONField(blank=True, default=dict, verbose_name="usuario")),
                ("address", models.JSONField(blank=True, default=dict, verbose_name="dirección")),
                ("items", models.JSONField(blank=True, default=list, verbose_name="items")),
                (
                    "delivery_area",
                    models.JSONField(blank=True, default=dict, verbose_name="zona de entrega"),
                ),
                (
                    "sub_total",
                    models.DecimalField(
                        decimal_places=2, default=0, max_digits=14, verbose_name="subtotal"
                    ),
                ),
                (
                    "shipping_price",
                    models.DecimalField(
                        decimal_places=2, default=0, max_digits=14, verbose_name="envío"
                    ),
                ),
                (
                    "total",
                    models.DecimalField(
                        decimal_places=2, default=0, max_digits=14, verbose_name="total"
                    ),
                ),
                (
                    "delivery_day",
                    models.DateField(blank=True, null=True, verbose_name="día de entrega"),
                ),
                ("notes", models.TextField(blank=True, verbose_name="notas")),
                (
                    "whatsapp_contacted_at",
                    models.CharField(
                        blank=True,
                        help_text="Fecha ISO del último contacto o marcador de cliente oculto",
                        max_length=40,
                        null=True,
                        verbose_name="contactado por WhatsApp",
                    ),
                ),
                ("created_at", models.DateTimeField(db_index=True, verbose_name="creado en")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="actualizado en")),
            ],
            options={
                "verbose_name": "orden",
                "verbose_name_plural": "órdenes",
                "ordering": ["-created_at"],
            },
        ),
        migrations.AddIndex(
            model_name="order",
            index=models.Index(fields=["status", "created_at"], name="barfer_order_status_idx"),
        ),
        migrations.AddIndex(
            model_name="order",
            index=models.Index(fields=["email", "created_at"], name="barfer_order_email_idx"),
        ),
        migrations.CreateModel(
            name="Expense",
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
                ("date", models.DateTimeField(db_index=True, verbose_name="fecha")),
                (
                    "amount",
                    models.DecimalField(decimal_places=2, max_digits=14, verbose_name="monto"),
                ),
                (
                    "kind",
                    models.CharField(
                        choices=[
                            ("ordinary", "Ordinario"),
                            ("extraordinary", "Extraordinario"),
                        ],
                        default="ordinary",
                        max_length=20,
                        verbose_name="tipo",
                    ),
                ),
                (
                    "brand",
                    models.CharField(
                        blank=True,
                        default="barfer",
                        help_text="Empresa que realiza el gasto; vacío se considera Barfer",
                        max_length=20,
                        verbose_name="marca",
                    ),
                ),
                (
                    "category",
                    models.CharField(
                        blank=True,
                        db_index=True,
                        help_text="Nombre en mayúsculas (ej: SUELDOS, ALIMENTOS)",
                        max_length=100,
                        verbose_name="categoría",
                    ),
                ),
                (
                    "description",
                    models.CharField(blank=True, max_length=255, verbose_name="descripción"),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="creado en")),
            ],
            options={
                "verbose_name": "salida",
                "verbose_name_plural": "salidas",
                "ordering": ["-date"],
            },
        ),
    ]
