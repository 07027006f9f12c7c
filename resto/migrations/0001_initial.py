"""
Initial migration for Resto module.
"""

from decimal import Decimal

from django.db import migrations, models
import django.db.models.deletion
import django.core.validators
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='RestoSettings',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('release_table_on_close', models.BooleanField(default=True, help_text='Mark the table empty once its last open order is paid or cancelled', verbose_name='Release Table On Close')),
                ('low_stock_threshold', models.PositiveIntegerField(default=5, verbose_name='Low Stock Threshold')),
                ('notify_clients', models.BooleanField(default=True, help_text='Push table, order and stock changes to open screens', verbose_name='Realtime Notifications')),
            ],
            options={
                'verbose_name': 'Resto Settings',
                'verbose_name_plural': 'Resto Settings',
                'db_table': 'resto_settings',
            },
        ),
        migrations.CreateModel(
            name='StaffMember',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('username', models.CharField(max_length=50, unique=True, verbose_name='Username')),
                ('display_name', models.CharField(max_length=100, verbose_name='Name')),
                ('role', models.CharField(choices=[('Kasir', 'Cashier'), ('Pelayan', 'Waiter'), ('Koki', 'Cook'), ('Pemilik', 'Owner')], default='Pelayan', max_length=20, verbose_name='Role')),
                ('is_active', models.BooleanField(default=True, verbose_name='Active')),
                ('password_hash', models.CharField(max_length=128, verbose_name='Password Hash')),
            ],
            options={
                'verbose_name': 'Staff Member',
                'verbose_name_plural': 'Staff Members',
                'db_table': 'resto_staff',
                'ordering': ['display_name'],
            },
        ),
        migrations.CreateModel(
            name='Table',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('number', models.CharField(max_length=10, unique=True, verbose_name='Table Number')),
                ('status', models.CharField(choices=[('Kosong', 'Empty'), ('Dipesan', 'Reserved'), ('Ditempati', 'Occupied'), ('Disiapkan', 'Being Prepared')], default='Kosong', max_length=20, verbose_name='Status')),
                ('is_active', models.BooleanField(default=True, verbose_name='Active')),
            ],
            options={
                'verbose_name': 'Table',
                'verbose_name_plural': 'Tables',
                'db_table': 'resto_table',
                'ordering': ['number'],
            },
        ),
        migrations.CreateModel(
            name='MenuItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('name', models.CharField(max_length=100, verbose_name='Name')),
                ('category', models.CharField(choices=[('Makanan', 'Food'), ('Minuman', 'Drink'), ('Camilan', 'Snack')], default='Makanan', max_length=20, verbose_name='Category')),
                ('price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))], verbose_name='Price')),
                ('available_quantity', models.PositiveIntegerField(default=0, verbose_name='Available Stock')),
                ('is_available', models.BooleanField(default=True, verbose_name='Available')),
            ],
            options={
                'verbose_name': 'Menu Item',
                'verbose_name_plural': 'Menu Items',
                'db_table': 'resto_menu_item',
                'ordering': ['category', 'name'],
            },
        ),
        migrations.CreateModel(
            name='Ingredient',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('name', models.CharField(max_length=100, unique=True, verbose_name='Name')),
                ('quantity', models.DecimalField(decimal_places=3, default=Decimal('0'), max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0'))], verbose_name='Quantity')),
                ('unit', models.CharField(blank=True, default='', max_length=20, verbose_name='Unit')),
            ],
            options={
                'verbose_name': 'Ingredient',
                'verbose_name_plural': 'Ingredients',
                'db_table': 'resto_ingredient',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='MenuIngredient',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('quantity_required', models.DecimalField(decimal_places=3, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0'))], verbose_name='Quantity Required')),
                ('ingredient', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='menu_uses', to='resto.ingredient', verbose_name='Ingredient')),
                ('menu_item', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='recipe', to='resto.menuitem', verbose_name='Menu Item')),
            ],
            options={
                'verbose_name': 'Recipe Line',
                'verbose_name_plural': 'Recipe Lines',
                'db_table': 'resto_menu_ingredient',
                'ordering': ['menu_item', 'ingredient__name'],
            },
        ),
        migrations.AddConstraint(
            model_name='menuingredient',
            constraint=models.UniqueConstraint(fields=('menu_item', 'ingredient'), name='resto_menu_ingredient_unique'),
        ),
        migrations.CreateModel(
            name='Order',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('status', models.CharField(choices=[('Menunggu', 'Waiting'), ('Dibatalkan', 'Cancelled'), ('Disiapkan', 'Being Prepared'), ('Selesai', 'Done'), ('Diantarkan', 'Delivered'), ('Dibayar', 'Paid')], default='Menunggu', max_length=20, verbose_name='Status')),
                ('is_paid', models.BooleanField(default=False, verbose_name='Paid')),
                ('staff', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='orders', to='resto.staffmember', verbose_name='Staff')),
                ('table', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='orders', to='resto.table', verbose_name='Table')),
            ],
            options={
                'verbose_name': 'Order',
                'verbose_name_plural': 'Orders',
                'db_table': 'resto_order',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='OrderDetail',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('quantity', models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)], verbose_name='Quantity')),
                ('unit_price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12, verbose_name='Unit Price')),
                ('note', models.CharField(blank=True, default='', max_length=255, verbose_name='Note')),
                ('menu_item', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='order_details', to='resto.menuitem', verbose_name='Menu Item')),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='details', to='resto.order', verbose_name='Order')),
            ],
            options={
                'verbose_name': 'Order Detail',
                'verbose_name_plural': 'Order Details',
                'db_table': 'resto_order_detail',
                'ordering': ['created_at', 'pk'],
            },
        ),
        migrations.CreateModel(
            name='ReceiptSequence',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date', models.DateField(unique=True)),
                ('last', models.PositiveIntegerField(default=0)),
            ],
            options={
                'db_table': 'resto_receipt_sequence',
                'ordering': ['-date'],
            },
        ),
        migrations.CreateModel(
            name='Payment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('amount_paid', models.DecimalField(decimal_places=2, max_digits=12, verbose_name='Amount Paid')),
                ('method', models.CharField(choices=[('Cash', 'Cash'), ('Card', 'Card'), ('QRIS', 'QRIS'), ('BankTransfer', 'Bank Transfer'), ('EWallet', 'E-Wallet')], default='Cash', max_length=20, verbose_name='Method')),
                ('receipt_number', models.CharField(max_length=20, unique=True, verbose_name='Receipt Number')),
                ('paid_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Paid At')),
                ('is_successful', models.BooleanField(default=True, verbose_name='Successful')),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='payments', to='resto.order', verbose_name='Order')),
                ('staff', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='payments', to='resto.staffmember', verbose_name='Staff')),
            ],
            options={
                'verbose_name': 'Payment',
                'verbose_name_plural': 'Payments',
                'db_table': 'resto_payment',
                'ordering': ['-paid_at', '-receipt_number'],
            },
        ),
        migrations.CreateModel(
            name='Reservation',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('reserved_for', models.DateTimeField(verbose_name='Reserved For')),
                ('customer_name', models.CharField(blank=True, default='', max_length=100, verbose_name='Customer')),
                ('status', models.CharField(choices=[('Menunggu', 'Waiting'), ('Dikonfirmasi', 'Confirmed'), ('Selesai', 'Done'), ('Dibatalkan', 'Cancelled')], default='Menunggu', max_length=20, verbose_name='Status')),
                ('staff', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='reservations', to='resto.staffmember', verbose_name='Staff')),
                ('table', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='reservations', to='resto.table', verbose_name='Table')),
            ],
            options={
                'verbose_name': 'Reservation',
                'verbose_name_plural': 'Reservations',
                'db_table': 'resto_reservation',
                'ordering': ['reserved_for'],
            },
        ),
        migrations.CreateModel(
            name='ActivityLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(choices=[('login', 'Login'), ('order_created', 'Order created'), ('detail_added', 'Item added'), ('detail_removed', 'Item removed'), ('order_cancelled', 'Order cancelled'), ('order_status', 'Order status changed'), ('payment', 'Payment recorded'), ('payment_failed', 'Payment marked failed'), ('table_status', 'Table status changed'), ('table_created', 'Table created'), ('stock', 'Stock updated'), ('reservation', 'Reservation'), ('menu_created', 'Menu item added'), ('menu_updated', 'Menu item updated'), ('ingredient', 'Ingredient updated'), ('recipe', 'Recipe changed')], max_length=30, verbose_name='Action')),
                ('message', models.TextField(blank=True, default='', verbose_name='Message')),
                ('object_id', models.PositiveBigIntegerField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('staff', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='activities', to='resto.staffmember', verbose_name='Staff')),
            ],
            options={
                'verbose_name': 'Activity',
                'verbose_name_plural': 'Activity Log',
                'db_table': 'resto_activity_log',
                'ordering': ['-created_at', '-pk'],
            },
        ),
        migrations.AddIndex(
            model_name='order',
            index=models.Index(fields=['status'], name='resto_order_status_idx'),
        ),
        migrations.AddIndex(
            model_name='order',
            index=models.Index(fields=['created_at'], name='resto_order_created_idx'),
        ),
    ]
