from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='FieldOffice',
            fields=[
                ('id', models.PositiveIntegerField(help_text='Stable field office number', primary_key=True, serialize=False)),
                ('code', models.SlugField(help_text="Short code used by registration forms (e.g. 'cotabato')", unique=True)),
                ('name', models.CharField(help_text='Display name', max_length=150)),
            ],
            options={
                'verbose_name': 'Field Office',
                'verbose_name_plural': 'Field Offices',
                'db_table': 'field_offices',
                'ordering': ['id'],
            },
        ),
    ]
