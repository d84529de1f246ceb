import django.core.validators
import django.db.models.deletion
import django.utils.timezone
import registrations.models
import uuid
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='GroupRegistration',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier (UUID v4)', primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, help_text='Timestamp when record was created')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when record was last updated')),
                ('receipt', models.FileField(blank=True, help_text='Payment receipt (PDF, JPEG or PNG)', max_length=255, upload_to=registrations.models.receipt_upload_path)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected')], db_index=True, default='pending', max_length=20)),
                ('or_number', models.CharField(blank=True, default='', help_text='Official receipt number, set on approval', max_length=8, validators=[django.core.validators.RegexValidator(message='Invalid OR Number. Must be exactly 8 digits.', regex='^[0-9]{8}$')])),
                ('submitted_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('agency_name', models.CharField(max_length=255)),
                ('contact_person', models.CharField(blank=True, max_length=255)),
                ('contact_number', models.CharField(max_length=30)),
                ('contact_email', models.EmailField(blank=True, max_length=254)),
                ('excel_file', models.FileField(blank=True, help_text='Original roster spreadsheet', max_length=255, upload_to=registrations.models.roster_upload_path)),
                ('field_office', models.ForeignKey(help_text='Field office handling this registration', on_delete=django.db.models.deletion.PROTECT, related_name='groupregistrations', to='core.fieldoffice')),
            ],
            options={
                'verbose_name': 'Group Registration',
                'verbose_name_plural': 'Group Registrations',
                'db_table': 'group_registrations',
                'ordering': ['-submitted_at'],
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='IndividualRegistration',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier (UUID v4)', primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, help_text='Timestamp when record was created')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when record was last updated')),
                ('receipt', models.FileField(blank=True, help_text='Payment receipt (PDF, JPEG or PNG)', max_length=255, upload_to=registrations.models.receipt_upload_path)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected')], db_index=True, default='pending', max_length=20)),
                ('or_number', models.CharField(blank=True, default='', help_text='Official receipt number, set on approval', max_length=8, validators=[django.core.validators.RegexValidator(message='Invalid OR Number. Must be exactly 8 digits.', regex='^[0-9]{8}$')])),
                ('submitted_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('full_name', models.CharField(max_length=255)),
                ('age', models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ('gender', models.CharField(choices=[('Male', 'Male'), ('Female', 'Female')], max_length=10)),
                ('contact_number', models.CharField(max_length=30)),
                ('email', models.EmailField(max_length=254)),
                ('address', models.TextField()),
                ('field_office', models.ForeignKey(help_text='Field office handling this registration', on_delete=django.db.models.deletion.PROTECT, related_name='individualregistrations', to='core.fieldoffice')),
            ],
            options={
                'verbose_name': 'Individual Registration',
                'verbose_name_plural': 'Individual Registrations',
                'db_table': 'individual_registrations',
                'ordering': ['-submitted_at'],
                'abstract': False,
                'indexes': [models.Index(fields=['field_office', 'status'], name='indiv_office_status_idx')],
            },
        ),
        migrations.AddIndex(
            model_name='groupregistration',
            index=models.Index(fields=['field_office', 'status'], name='group_office_status_idx'),
        ),
        migrations.CreateModel(
            name='GroupParticipant',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier (UUID v4)', primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, help_text='Timestamp when record was created')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when record was last updated')),
                ('full_name', models.CharField(max_length=255)),
                ('age', models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ('gender', models.CharField(choices=[('Male', 'Male'), ('Female', 'Female')], max_length=10)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('or_number', models.CharField(blank=True, default='', max_length=8, validators=[django.core.validators.RegexValidator(message='Invalid OR Number. Must be exactly 8 digits.', regex='^[0-9]{8}$')])),
                ('group_registration', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='participants', to='registrations.groupregistration')),
            ],
            options={
                'verbose_name': 'Group Participant',
                'verbose_name_plural': 'Group Participants',
                'db_table': 'group_participants',
                'ordering': ['full_name'],
            },
        ),
    ]
