from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone

import apps.offboarding.models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Department',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('name', models.CharField(max_length=100, unique=True)),
                ('email_address', models.EmailField(max_length=200)),
                ('manager_name', models.CharField(blank=True, max_length=100)),
                ('manager_email', models.EmailField(blank=True, max_length=200)),
                ('is_active', models.BooleanField(default=True)),
                ('description', models.CharField(blank=True, max_length=500)),
                ('created_by', models.CharField(blank=True, max_length=256)),
            ],
            options={
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='TaskTemplate',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('task_name', models.CharField(max_length=200)),
                ('department', models.CharField(db_index=True, max_length=100)),
                ('description', models.CharField(blank=True, max_length=1000)),
                ('days_from_last_working_day', models.IntegerField(default=0, help_text='Negative values schedule the task before the last working day.')),
                ('is_required', models.BooleanField(default=True)),
                ('is_active', models.BooleanField(db_index=True, default=True)),
                ('created_by', models.CharField(blank=True, max_length=256)),
                ('depends_on_template', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='dependent_templates', to='offboarding.tasktemplate')),
            ],
            options={
                'ordering': ['department', 'task_name'],
            },
        ),
        migrations.CreateModel(
            name='OffboardingProcess',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('version', models.PositiveIntegerField(default=1, editable=False)),
                ('employee_name', models.CharField(max_length=100)),
                ('job_title', models.CharField(max_length=50)),
                ('employment_start_date', models.DateField()),
                ('last_working_day', models.DateField()),
                ('process_start_date', models.DateField(default=django.utils.timezone.localdate)),
                ('initiated_by', models.CharField(db_index=True, max_length=256)),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('pending_approval', 'Pending Approval'), ('approved', 'Approved'), ('active', 'Active'), ('closed', 'Closed'), ('rejected', 'Rejected')], db_index=True, default='pending_approval', max_length=20)),
                ('is_closed', models.BooleanField(default=False)),
                ('approved_by', models.CharField(blank=True, max_length=256)),
                ('approved_at', models.DateTimeField(blank=True, null=True)),
                ('rejected_by', models.CharField(blank=True, max_length=256)),
                ('rejected_at', models.DateTimeField(blank=True, null=True)),
                ('rejection_reason', models.CharField(blank=True, max_length=500)),
                ('closed_by', models.CharField(blank=True, max_length=256)),
                ('closed_at', models.DateTimeField(blank=True, db_index=True, null=True)),
            ],
            options={
                'verbose_name_plural': 'Offboarding processes',
                'ordering': ['-process_start_date', '-id'],
            },
        ),
        migrations.CreateModel(
            name='ChecklistItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('version', models.PositiveIntegerField(default=1, editable=False)),
                ('task_name', models.CharField(max_length=200)),
                ('department', models.CharField(db_index=True, max_length=100)),
                ('description', models.CharField(blank=True, max_length=1000)),
                ('is_required', models.BooleanField(default=True)),
                ('due_date', models.DateField(blank=True, db_index=True, null=True)),
                ('is_completed', models.BooleanField(db_index=True, default=False)),
                ('completed_by', models.CharField(blank=True, max_length=256)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('comments', models.CharField(blank=True, max_length=1000)),
                ('depends_on_task', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.RESTRICT, related_name='dependent_tasks', to='offboarding.checklistitem')),
                ('process', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='offboarding.offboardingprocess')),
                ('template', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='generated_items', to='offboarding.tasktemplate')),
            ],
            options={
                'ordering': ['department', 'task_name', 'id'],
            },
        ),
        migrations.CreateModel(
            name='TaskComment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('comment', models.CharField(max_length=1000)),
                ('created_by', models.CharField(max_length=256)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('item', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='task_comments', to='offboarding.checklistitem')),
            ],
            options={
                'ordering': ['created_at', 'id'],
            },
        ),
        migrations.CreateModel(
            name='OffboardingDocument',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('file', models.FileField(max_length=500, upload_to=apps.offboarding.models.document_upload_path)),
                ('file_name', models.CharField(max_length=255)),
                ('document_type', models.CharField(choices=[('exit_interview', 'Exit Interview'), ('asset_return_form', 'Asset Return Form'), ('clearance_certificate', 'Clearance Certificate'), ('resignation_letter', 'Resignation Letter'), ('other', 'Other')], default='other', max_length=50)),
                ('file_size', models.PositiveBigIntegerField(default=0)),
                ('content_type', models.CharField(blank=True, max_length=100)),
                ('description', models.CharField(blank=True, max_length=500)),
                ('is_required', models.BooleanField(default=False)),
                ('is_completed', models.BooleanField(default=False)),
                ('uploaded_by', models.CharField(max_length=256)),
                ('uploaded_at', models.DateTimeField(auto_now_add=True)),
                ('process', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='documents', to='offboarding.offboardingprocess')),
            ],
            options={
                'ordering': ['-uploaded_at', '-id'],
            },
        ),
    ]
