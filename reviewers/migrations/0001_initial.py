import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Team',
            fields=[
                ('name', models.CharField(max_length=100, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'teams',
            },
        ),
        migrations.CreateModel(
            name='User',
            fields=[
                ('id', models.CharField(max_length=50, primary_key=True, serialize=False)),
                ('username', models.CharField(max_length=100)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('team', models.ForeignKey(db_column='team_name', on_delete=django.db.models.deletion.CASCADE, related_name='members', to='reviewers.team')),
            ],
            options={
                'db_table': 'users',
                'indexes': [models.Index(fields=['team', 'is_active'], name='users_team_active_idx')],
            },
        ),
        migrations.CreateModel(
            name='PullRequest',
            fields=[
                ('id', models.CharField(max_length=100, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200)),
                ('status', models.CharField(choices=[('OPEN', 'Open'), ('MERGED', 'Merged')], default='OPEN', max_length=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('merged_at', models.DateTimeField(blank=True, null=True)),
                ('author', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='authored_prs', to='reviewers.user')),
            ],
            options={
                'db_table': 'pull_requests',
            },
        ),
        migrations.CreateModel(
            name='ReviewerAssignment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('assigned_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('pull_request', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='assignments', to='reviewers.pullrequest')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='review_assignments', to='reviewers.user')),
            ],
            options={
                'db_table': 'pr_reviewers',
                'ordering': ['assigned_at', 'id'],
            },
        ),
        migrations.AddField(
            model_name='pullrequest',
            name='reviewers',
            field=models.ManyToManyField(blank=True, related_name='assigned_prs', through='reviewers.ReviewerAssignment', to='reviewers.user'),
        ),
        migrations.AddConstraint(
            model_name='reviewerassignment',
            constraint=models.UniqueConstraint(fields=('pull_request', 'user'), name='unique_pr_reviewer'),
        ),
    ]
