from django.db import models


LANGUAGE_CHOICES = [
    ('en', 'English'),
    ('vi', 'Vietnamese'),
]


class Project(models.Model):
    """Portfolio project"""
    CATEGORY_CHOICES = [
        ('residential', 'Residential'),
        ('commercial', 'Commercial'),
        ('architecture', 'Architecture'),
    ]
    STATUS_CHOICES = [
        ('active', 'Active'),
        ('archived', 'Archived'),
    ]

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    category = models.CharField(max_length=50, choices=CATEGORY_CHOICES, db_index=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active')
    location = models.CharField(max_length=255, blank=True)
    area = models.CharField(max_length=100, blank=True)
    duration = models.CharField(max_length=100, blank=True)
    budget = models.CharField(max_length=100, blank=True)
    style = models.CharField(max_length=100, blank=True)
    featured = models.BooleanField(default=False)
    images = models.JSONField(default=list, blank=True)  # list of image URLs
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.title

    class Meta:
        db_table = 'projects'
        ordering = ['-created_at', '-id']


class Article(models.Model):
    """Blog article, one row per language"""
    STATUS_CHOICES = [
        ('draft', 'Draft'),
        ('published', 'Published'),
        ('archived', 'Archived'),
    ]

    title = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255)
    excerpt = models.TextField(blank=True)
    content = models.TextField()
    featured_image = models.CharField(max_length=500, blank=True)
    category = models.CharField(max_length=50, default='general')
    tags = models.JSONField(default=list, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='draft', db_index=True)
    language = models.CharField(max_length=5, choices=LANGUAGE_CHOICES, default='en')
    featured = models.BooleanField(default=False)
    published_at = models.DateTimeField(null=True, blank=True)
    meta_title = models.CharField(max_length=255, blank=True)
    meta_description = models.TextField(blank=True)
    meta_keywords = models.CharField(max_length=500, blank=True)
    view_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.title} ({self.language})"

    class Meta:
        db_table = 'articles'
        ordering = ['-published_at', '-created_at', '-id']
        constraints = [
            models.UniqueConstraint(fields=['slug', 'language'], name='unique_article_slug_language'),
        ]


class Service(models.Model):
    """Service offered by the studio"""
    title = models.CharField(max_length=255)
    description = models.TextField()
    icon = models.CharField(max_length=100)
    features = models.JSONField(default=list, blank=True)
    order = models.IntegerField(default=0)
    active = models.BooleanField(default=True)

    def __str__(self):
        return self.title

    class Meta:
        db_table = 'services'
        ordering = ['order', 'id']


class Category(models.Model):
    """Project and article categories shown in portfolio/blog filters"""
    TYPE_CHOICES = [
        ('project', 'Project'),
        ('article', 'Article'),
    ]

    name_en = models.CharField(max_length=100)
    name_vi = models.CharField(max_length=100)
    slug = models.SlugField(max_length=100)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='project')
    description = models.TextField(blank=True)
    order = models.IntegerField(default=0)
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name_en

    class Meta:
        db_table = 'categories'
        verbose_name_plural = 'categories'
        ordering = ['order', 'id']
        constraints = [
            models.UniqueConstraint(fields=['slug', 'type'], name='unique_category_slug_type'),
        ]


class Partner(models.Model):
    """Partner/supplier logo strip on the homepage"""
    name = models.CharField(max_length=200)
    logo = models.CharField(max_length=500, blank=True)
    website = models.URLField(blank=True)
    order = models.IntegerField(default=0)
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'partners'
        ordering = ['order', 'id']


class HomepageContent(models.Model):
    """Homepage copy, one row per language"""
    language = models.CharField(max_length=5, choices=LANGUAGE_CHOICES, unique=True)
    hero_title = models.CharField(max_length=255, blank=True)
    hero_studio = models.CharField(max_length=255, blank=True)
    hero_tagline = models.TextField(blank=True)
    hero_architecture_label = models.CharField(max_length=100, blank=True)
    hero_interior_label = models.CharField(max_length=100, blank=True)
    hero_consultation_text = models.CharField(max_length=100, blank=True)
    featured_badge = models.CharField(max_length=100, blank=True)
    featured_title = models.CharField(max_length=255, blank=True)
    featured_description = models.TextField(blank=True)
    stats_projects_label = models.CharField(max_length=100, blank=True)
    stats_clients_label = models.CharField(max_length=100, blank=True)
    stats_awards_label = models.CharField(max_length=100, blank=True)
    stats_experience_label = models.CharField(max_length=100, blank=True)
    cta_title = models.CharField(max_length=255, blank=True)
    cta_description = models.TextField(blank=True)
    cta_button_text = models.CharField(max_length=100, blank=True)
    cta_secondary_button_text = models.CharField(max_length=100, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Homepage ({self.language})"

    class Meta:
        db_table = 'homepage_content'


class AboutPageContent(models.Model):
    """Single row holding the bilingual copy of the About page"""
    hero_title_en = models.CharField(max_length=255, blank=True)
    hero_title_vi = models.CharField(max_length=255, blank=True)
    hero_subtitle_en = models.CharField(max_length=255, blank=True)
    hero_subtitle_vi = models.CharField(max_length=255, blank=True)
    principles_title_en = models.CharField(max_length=255, blank=True)
    principles_title_vi = models.CharField(max_length=255, blank=True)
    showcase_banner_image = models.CharField(max_length=500, blank=True)
    stats_projects_value = models.CharField(max_length=50, blank=True)
    stats_projects_label_en = models.CharField(max_length=100, blank=True)
    stats_projects_label_vi = models.CharField(max_length=100, blank=True)
    stats_awards_value = models.CharField(max_length=50, blank=True)
    stats_awards_label_en = models.CharField(max_length=100, blank=True)
    stats_awards_label_vi = models.CharField(max_length=100, blank=True)
    stats_clients_value = models.CharField(max_length=50, blank=True)
    stats_clients_label_en = models.CharField(max_length=100, blank=True)
    stats_clients_label_vi = models.CharField(max_length=100, blank=True)
    stats_countries_value = models.CharField(max_length=50, blank=True)
    stats_countries_label_en = models.CharField(max_length=100, blank=True)
    stats_countries_label_vi = models.CharField(max_length=100, blank=True)
    process_title_en = models.CharField(max_length=255, blank=True)
    process_title_vi = models.CharField(max_length=255, blank=True)
    history_title_en = models.CharField(max_length=255, blank=True)
    history_title_vi = models.CharField(max_length=255, blank=True)
    history_content_en = models.TextField(blank=True)
    history_content_vi = models.TextField(blank=True)
    mission_title_en = models.CharField(max_length=255, blank=True)
    mission_title_vi = models.CharField(max_length=255, blank=True)
    mission_content_en = models.TextField(blank=True)
    mission_content_vi = models.TextField(blank=True)
    vision_title_en = models.CharField(max_length=255, blank=True)
    vision_title_vi = models.CharField(max_length=255, blank=True)
    vision_content_en = models.TextField(blank=True)
    vision_content_vi = models.TextField(blank=True)
    core_values_title_en = models.CharField(max_length=255, blank=True)
    core_values_title_vi = models.CharField(max_length=255, blank=True)
    team_title_en = models.CharField(max_length=255, blank=True)
    team_title_vi = models.CharField(max_length=255, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return 'About page'

    @classmethod
    def load(cls):
        """Return the single row, or None when the page was never saved"""
        return cls.objects.order_by('id').first()

    class Meta:
        db_table = 'about_page_content'


class OrderedBlock(models.Model):
    """Bilingual item shown in a sorted list on the About page"""
    title_en = models.CharField(max_length=255)
    title_vi = models.CharField(max_length=255)
    description_en = models.TextField(blank=True)
    description_vi = models.TextField(blank=True)
    order = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.title_en

    class Meta:
        abstract = True
        ordering = ['order', 'id']


class AboutPrinciple(OrderedBlock):
    icon = models.CharField(max_length=100, blank=True)

    class Meta(OrderedBlock.Meta):
        db_table = 'about_principles'


class AboutShowcaseService(OrderedBlock):
    image = models.CharField(max_length=500, blank=True)

    class Meta(OrderedBlock.Meta):
        db_table = 'about_showcase_services'


class AboutProcessStep(OrderedBlock):
    step_number = models.CharField(max_length=10)

    class Meta(OrderedBlock.Meta):
        db_table = 'about_process_steps'


class AboutTeamMember(models.Model):
    """Team member card on the About page"""
    name = models.CharField(max_length=200)
    position_en = models.CharField(max_length=200)
    position_vi = models.CharField(max_length=200)
    bio_en = models.TextField(blank=True)
    bio_vi = models.TextField(blank=True)
    image = models.CharField(max_length=500, blank=True)
    achievements_en = models.JSONField(default=list, blank=True)
    achievements_vi = models.JSONField(default=list, blank=True)
    philosophy_en = models.TextField(blank=True)
    philosophy_vi = models.TextField(blank=True)
    order = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'about_team_members'
        ordering = ['order', 'id']
