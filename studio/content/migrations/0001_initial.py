# Generated manually
from django.db import migrations, models


def ordered_block_fields(extra):
    return [
        ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
        ('title_en', models.CharField(max_length=255)),
        ('title_vi', models.CharField(max_length=255)),
        ('description_en', models.TextField(blank=True)),
        ('description_vi', models.TextField(blank=True)),
        ('order', models.IntegerField(default=0)),
        ('created_at', models.DateTimeField(auto_now_add=True)),
        ('updated_at', models.DateTimeField(auto_now=True)),
    ] + extra


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Project',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True)),
                ('category', models.CharField(choices=[('residential', 'Residential'), ('commercial', 'Commercial'), ('architecture', 'Architecture')], db_index=True, max_length=50)),
                ('status', models.CharField(choices=[('active', 'Active'), ('archived', 'Archived')], default='active', max_length=20)),
                ('location', models.CharField(blank=True, max_length=255)),
                ('area', models.CharField(blank=True, max_length=100)),
                ('duration', models.CharField(blank=True, max_length=100)),
                ('budget', models.CharField(blank=True, max_length=100)),
                ('style', models.CharField(blank=True, max_length=100)),
                ('featured', models.BooleanField(default=False)),
                ('images', models.JSONField(blank=True, default=list)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'projects',
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='Article',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=255)),
                ('slug', models.SlugField(max_length=255)),
                ('excerpt', models.TextField(blank=True)),
                ('content', models.TextField()),
                ('featured_image', models.CharField(blank=True, max_length=500)),
                ('category', models.CharField(default='general', max_length=50)),
                ('tags', models.JSONField(blank=True, default=list)),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('published', 'Published'), ('archived', 'Archived')], db_index=True, default='draft', max_length=20)),
                ('language', models.CharField(choices=[('en', 'English'), ('vi', 'Vietnamese')], default='en', max_length=5)),
                ('featured', models.BooleanField(default=False)),
                ('published_at', models.DateTimeField(blank=True, null=True)),
                ('meta_title', models.CharField(blank=True, max_length=255)),
                ('meta_description', models.TextField(blank=True)),
                ('meta_keywords', models.CharField(blank=True, max_length=500)),
                ('view_count', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'articles',
                'ordering': ['-published_at', '-created_at', '-id'],
                'constraints': [models.UniqueConstraint(fields=('slug', 'language'), name='unique_article_slug_language')],
            },
        ),
        migrations.CreateModel(
            name='Service',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=255)),
                ('description', models.TextField()),
                ('icon', models.CharField(max_length=100)),
                ('features', models.JSONField(blank=True, default=list)),
                ('order', models.IntegerField(default=0)),
                ('active', models.BooleanField(default=True)),
            ],
            options={
                'db_table': 'services',
                'ordering': ['order', 'id'],
            },
        ),
        migrations.CreateModel(
            name='Category',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name_en', models.CharField(max_length=100)),
                ('name_vi', models.CharField(max_length=100)),
                ('slug', models.SlugField(max_length=100)),
                ('type', models.CharField(choices=[('project', 'Project'), ('article', 'Article')], default='project', max_length=20)),
                ('description', models.TextField(blank=True)),
                ('order', models.IntegerField(default=0)),
                ('active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'categories',
                'verbose_name_plural': 'categories',
                'ordering': ['order', 'id'],
                'constraints': [models.UniqueConstraint(fields=('slug', 'type'), name='unique_category_slug_type')],
            },
        ),
        migrations.CreateModel(
            name='Partner',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('logo', models.CharField(blank=True, max_length=500)),
                ('website', models.URLField(blank=True)),
                ('order', models.IntegerField(default=0)),
                ('active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'partners',
                'ordering': ['order', 'id'],
            },
        ),
        migrations.CreateModel(
            name='HomepageContent',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('language', models.CharField(choices=[('en', 'English'), ('vi', 'Vietnamese')], max_length=5, unique=True)),
                ('hero_title', models.CharField(blank=True, max_length=255)),
                ('hero_studio', models.CharField(blank=True, max_length=255)),
                ('hero_tagline', models.TextField(blank=True)),
                ('hero_architecture_label', models.CharField(blank=True, max_length=100)),
                ('hero_interior_label', models.CharField(blank=True, max_length=100)),
                ('hero_consultation_text', models.CharField(blank=True, max_length=100)),
                ('featured_badge', models.CharField(blank=True, max_length=100)),
                ('featured_title', models.CharField(blank=True, max_length=255)),
                ('featured_description', models.TextField(blank=True)),
                ('stats_projects_label', models.CharField(blank=True, max_length=100)),
                ('stats_clients_label', models.CharField(blank=True, max_length=100)),
                ('stats_awards_label', models.CharField(blank=True, max_length=100)),
                ('stats_experience_label', models.CharField(blank=True, max_length=100)),
                ('cta_title', models.CharField(blank=True, max_length=255)),
                ('cta_description', models.TextField(blank=True)),
                ('cta_button_text', models.CharField(blank=True, max_length=100)),
                ('cta_secondary_button_text', models.CharField(blank=True, max_length=100)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'homepage_content',
            },
        ),
        migrations.CreateModel(
            name='AboutPageContent',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('hero_title_en', models.CharField(blank=True, max_length=255)),
                ('hero_title_vi', models.CharField(blank=True, max_length=255)),
                ('hero_subtitle_en', models.CharField(blank=True, max_length=255)),
                ('hero_subtitle_vi', models.CharField(blank=True, max_length=255)),
                ('principles_title_en', models.CharField(blank=True, max_length=255)),
                ('principles_title_vi', models.CharField(blank=True, max_length=255)),
                ('showcase_banner_image', models.CharField(blank=True, max_length=500)),
                ('stats_projects_value', models.CharField(blank=True, max_length=50)),
                ('stats_projects_label_en', models.CharField(blank=True, max_length=100)),
                ('stats_projects_label_vi', models.CharField(blank=True, max_length=100)),
                ('stats_awards_value', models.CharField(blank=True, max_length=50)),
                ('stats_awards_label_en', models.CharField(blank=True, max_length=100)),
                ('stats_awards_label_vi', models.CharField(blank=True, max_length=100)),
                ('stats_clients_value', models.CharField(blank=True, max_length=50)),
                ('stats_clients_label_en', models.CharField(blank=True, max_length=100)),
                ('stats_clients_label_vi', models.CharField(blank=True, max_length=100)),
                ('stats_countries_value', models.CharField(blank=True, max_length=50)),
                ('stats_countries_label_en', models.CharField(blank=True, max_length=100)),
                ('stats_countries_label_vi', models.CharField(blank=True, max_length=100)),
                ('process_title_en', models.CharField(blank=True, max_length=255)),
                ('process_title_vi', models.CharField(blank=True, max_length=255)),
                ('history_title_en', models.CharField(blank=True, max_length=255)),
                ('history_title_vi', models.CharField(blank=True, max_length=255)),
                ('history_content_en', models.TextField(blank=True)),
                ('history_content_vi', models.TextField(blank=True)),
                ('mission_title_en', models.CharField(blank=True, max_length=255)),
                ('mission_title_vi', models.CharField(blank=True, max_length=255)),
                ('mission_content_en', models.TextField(blank=True)),
                ('mission_content_vi', models.TextField(blank=True)),
                ('vision_title_en', models.CharField(blank=True, max_length=255)),
                ('vision_title_vi', models.CharField(blank=True, max_length=255)),
                ('vision_content_en', models.TextField(blank=True)),
                ('vision_content_vi', models.TextField(blank=True)),
                ('core_values_title_en', models.CharField(blank=True, max_length=255)),
                ('core_values_title_vi', models.CharField(blank=True, max_length=255)),
                ('team_title_en', models.CharField(blank=True, max_length=255)),
                ('team_title_vi', models.CharField(blank=True, max_length=255)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'about_page_content',
            },
        ),
        migrations.CreateModel(
            name='AboutPrinciple',
            fields=ordered_block_fields([
                ('icon', models.CharField(blank=True, max_length=100)),
            ]),
            options={
                'db_table': 'about_principles',
                'ordering': ['order', 'id'],
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='AboutShowcaseService',
            fields=ordered_block_fields([
                ('image', models.CharField(blank=True, max_length=500)),
            ]),
            options={
                'db_table': 'about_showcase_services',
                'ordering': ['order', 'id'],
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='AboutProcessStep',
            fields=ordered_block_fields([
                ('step_number', models.CharField(max_length=10)),
            ]),
            options={
                'db_table': 'about_process_steps',
                'ordering': ['order', 'id'],
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='AboutTeamMember',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('position_en', models.CharField(max_length=200)),
                ('position_vi', models.CharField(max_length=200)),
                ('bio_en', models.TextField(blank=True)),
                ('bio_vi', models.TextField(blank=True)),
                ('image', models.CharField(blank=True, max_length=500)),
                ('achievements_en', models.JSONField(blank=True, default=list)),
                ('achievements_vi', models.JSONField(blank=True, default=list)),
                ('philosophy_en', models.TextField(blank=True)),
                ('philosophy_vi', models.TextField(blank=True)),
                ('order', models.IntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'about_team_members',
                'ordering': ['order', 'id'],
            },
        ),
    ]
