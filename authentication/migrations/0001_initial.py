import django.db.models.deletion
import uuid
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='AdminUser',
            fields=[
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier (UUID v4)', primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, help_text='Timestamp when record was created')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when record was last updated')),
                ('username', models.CharField(help_text='Login name', max_length=150, unique=True)),
                ('name', models.CharField(blank=True, help_text='Display name', max_length=255)),
                ('role', models.CharField(choices=[('field_admin', 'Field Office Admin'), ('main_admin', 'Main Admin'), ('rd_ard', 'RD/ARD Monitor')], db_index=True, default='field_admin', max_length=20)),
                ('is_active', models.BooleanField(default=True)),
                ('field_office', models.ForeignKey(blank=True, help_text='Home field office', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='admins', to='core.fieldoffice')),
            ],
            options={
                'verbose_name': 'Admin User',
                'verbose_name_plural': 'Admin Users',
                'db_table': 'admin_users',
                'ordering': ['username'],
            },
        ),
    ]
