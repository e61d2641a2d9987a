from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Notification',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('title', models.CharField(max_length=200)),
                ('message', models.CharField(max_length=1000)),
                ('notification_type', models.CharField(choices=[('process_started', 'Process Started'), ('process_closed', 'Process Closed'), ('task_overdue', 'Task Overdue'), ('task_completed', 'Task Completed'), ('system_alert', 'System Alert'), ('reminder', 'Reminder')], default='system_alert', max_length=30)),
                ('priority', models.PositiveSmallIntegerField(choices=[(1, 'Low'), (2, 'Normal'), (3, 'High'), (4, 'Critical')], default=2)),
                ('recipient_email', models.EmailField(blank=True, max_length=254)),
                ('is_read', models.BooleanField(db_index=True, default=False)),
                ('read_at', models.DateTimeField(blank=True, null=True)),
                ('action_url', models.CharField(blank=True, max_length=500)),
                ('action_text', models.CharField(blank=True, max_length=100)),
                ('related_process_id', models.PositiveBigIntegerField(blank=True, db_index=True, null=True)),
                ('related_task_id', models.PositiveBigIntegerField(blank=True, db_index=True, null=True)),
                ('recipient', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='notifications', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['recipient', 'is_read'], name='notif_recipient_read_idx'),
                    models.Index(fields=['notification_type', 'related_task_id', 'created_at'], name='notif_type_task_created_idx'),
                ],
            },
        ),
    ]
