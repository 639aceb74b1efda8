# Generated migration for member accounts

from django.db import migrations, models
import django.utils.timezone
import uuid

import apps.accounts.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
        migrations.CreateModel(
            name='Member',
            fields=[
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(default=False, help_text='Designates that this user has all permissions without explicitly assigning them.', verbose_name='superuser status')),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False, verbose_name='ID')),
                ('email', models.EmailField(max_length=254, unique=True, verbose_name='Email')),
                ('username', models.CharField(blank=True, help_text='Optional display name', max_length=150, verbose_name='Username')),
                ('avatar_url', models.URLField(blank=True, max_length=500, verbose_name='Avatar URL')),
                ('security_codes', models.JSONField(blank=True, default=list, help_text='Digests of the current code batch; used entries are null', verbose_name='Security Codes')),
                ('last_code_refresh', models.DateTimeField(blank=True, null=True, verbose_name='Last Code Refresh')),
                ('next_refresh_allowed', models.DateTimeField(blank=True, help_text='Earliest time a new code batch may be requested', null=True, verbose_name='Next Refresh Allowed')),
                ('is_active', models.BooleanField(default=True)),
                ('is_staff', models.BooleanField(default=False)),
                ('date_joined', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
            ],
            options={
                'verbose_name': 'Member',
                'verbose_name_plural': 'Members',
                'db_table': 'members',
                'ordering': ['-date_joined'],
            },
            managers=[
                ('objects', apps.accounts.models.MemberManager()),
            ],
        ),
    ]
